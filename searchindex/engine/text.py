"""
Text normalization: cleaning, splitting and stemming words into index terms.
"""

import re
import unicodedata
from typing import Iterable, List

from nltk.stem.snowball import SnowballStemmer


STEMMER_LANGUAGE = "english"

WHITESPACE_PATTERN = re.compile(r'\s+')

_stemmer = SnowballStemmer(STEMMER_LANGUAGE)


def clean(text: str) -> str:
    """
    Fold diacritics, drop every character that is not a letter or whitespace
    and lowercase the rest.
    """
    decomposed = unicodedata.normalize('NFD', text)
    kept = ''.join(ch for ch in decomposed if ch.isalpha() or ch.isspace())
    return kept.lower()


def split(text: str) -> List[str]:
    """Split text on whitespace, ignoring leading and trailing whitespace."""
    text = text.strip()
    return WHITESPACE_PATTERN.split(text) if text else []


def parse(text: str) -> List[str]:
    """Clean then split text into words."""
    return split(clean(text))


def stem(word: str) -> str:
    return _stemmer.stem(word)


def list_stems(line: str) -> List[str]:
    """Stems of every word in line, in order and with duplicates."""
    return [stem(word) for word in parse(line)]


def unique_stems(line: str) -> List[str]:
    """Sorted unique stems of the words in line."""
    return sorted(set(list_stems(line)))


def join_query(stems: Iterable[str]) -> str:
    """Canonical form of a query used as its results key."""
    return ' '.join(stems)
