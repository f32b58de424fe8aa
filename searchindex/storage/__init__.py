"""
Index storage for the search engine.
"""

from .inverted_index import InvertedIndex, QueryResult
from .concurrent_index import ConcurrentInvertedIndex

__all__ = ['InvertedIndex', 'QueryResult', 'ConcurrentInvertedIndex']
