"""
Pretty JSON output for the index, the word counts and query results.

Output uses tab indentation with one element per line. Keys are written in
the iteration order of the mapping handed in, so callers pass sorted mappings.
Scores are always rendered with eight decimal places.
"""

import io
import json
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, TextIO, Union


SCORE_FORMAT = "{:.8f}"


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def indent(writer: TextIO, times: int):
    """Write times tab characters."""
    writer.write('\t' * times)


def _write_members(items: List, writer: TextIO, level: int, write_member: Callable):
    first = True
    for item in items:
        if not first:
            writer.write(",\n")
        write_member(item)
        first = False
    if not first:
        writer.write("\n")
    indent(writer, level)


def as_array(elements: Iterable[int], writer: TextIO, level: int = 0):
    """Write integers as a pretty JSON array."""
    def write_member(element):
        indent(writer, level + 1)
        writer.write(str(element))

    writer.write("[\n")
    _write_members(list(elements), writer, level, write_member)
    writer.write("]")


def as_object(elements: Mapping[str, int], writer: TextIO, level: int = 0):
    """Write a string to integer mapping as a pretty JSON object."""
    def write_member(key):
        indent(writer, level + 1)
        writer.write(f"{_quote(key)}: {elements[key]}")

    writer.write("{\n")
    _write_members(list(elements), writer, level, write_member)
    writer.write("}")


def as_nested_array(elements: Mapping[str, Iterable[int]], writer: TextIO, level: int = 0):
    """Write a mapping of string to integer collections as a JSON object of arrays."""
    def write_member(key):
        indent(writer, level + 1)
        writer.write(f"{_quote(key)}: ")
        as_array(elements[key], writer, level + 1)

    writer.write("{\n")
    _write_members(list(elements), writer, level, write_member)
    writer.write("}")


def as_inverted_index(elements: Mapping[str, Mapping[str, Iterable[int]]], writer: TextIO, level: int = 0):
    """Write term -> location -> positions as nested JSON."""
    def write_member(key):
        indent(writer, level + 1)
        writer.write(f"{_quote(key)}: ")
        as_nested_array(elements[key], writer, level + 1)

    writer.write("{\n")
    _write_members(list(elements), writer, level, write_member)
    writer.write("}")


def as_query_result(element, writer: TextIO, level: int = 0):
    """Write one result object with where, count and score members."""
    indent(writer, level)
    writer.write("{\n")
    indent(writer, level + 1)
    writer.write(f'"where": {_quote(element.where)},\n')
    indent(writer, level + 1)
    writer.write(f'"count": {element.count},\n')
    indent(writer, level + 1)
    writer.write(f'"score": {SCORE_FORMAT.format(element.score)}\n')
    indent(writer, level)
    writer.write("}")


def as_query_results(results: Mapping[str, List], writer: TextIO, level: int = 0):
    """Write canonical query -> ranked results as nested JSON."""
    def write_results(key):
        indent(writer, level + 1)
        writer.write(f"{_quote(key)}: [\n")
        _write_members(results[key], writer, level + 1,
                       lambda result: as_query_result(result, writer, level + 2))
        writer.write("]")

    writer.write("{\n")
    _write_members(list(results), writer, level, write_results)
    writer.write("}")


def to_string(write: Callable, elements) -> str:
    """Render elements with one of the as_* functions and return the text."""
    buffer = io.StringIO()
    write(elements, buffer, 0)
    return buffer.getvalue()


def write_file(write: Callable, elements, path: Union[str, Path]):
    """Render elements with one of the as_* functions into a UTF-8 file."""
    with open(path, 'w', encoding='utf-8') as file:
        write(elements, file, 0)
