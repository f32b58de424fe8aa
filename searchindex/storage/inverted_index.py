"""
Word-level inverted index with exact and prefix search.

Structure:
    term: {
        location: {positions}
    }

Terms are kept in a sorted list next to the mapping so prefix searches can
start at the first candidate with bisect and stop at the first miss.
"""

import bisect
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Dict, Iterable, List, Set, Tuple, Union

from . import json_writer


@dataclass
class QueryResult:
    """
    One ranked search hit.

    where: location of the matches
    count: matching term occurrences at that location
    score: count / total word count of the location
    """
    where: str
    count: int = 0
    score: float = 0.0

    def update(self, matches: int, total: int):
        """Add matches for one more term and recompute the score."""
        self.count += matches
        self.score = self.count / total

    @property
    def sort_key(self) -> Tuple[float, int, str]:
        # Higher score first, then higher count, then location
        return (-self.score, -self.count, self.where)

    def __lt__(self, other: 'QueryResult') -> bool:
        return self.sort_key < other.sort_key

    def to_dict(self) -> Dict[str, Union[str, int, float]]:
        return {'where': self.where, 'count': self.count, 'score': self.score}


class InvertedIndex:
    """
    Maps terms to the locations and positions where they occur, and keeps the
    number of words indexed for every location.
    """

    def __init__(self):
        self._index: Dict[str, Dict[str, Set[int]]] = {}
        self._terms: List[str] = []
        self._word_counts: Dict[str, int] = {}

    def add_item(self, item: str, location: str, position: int) -> bool:
        """
        Record that item occurs in location at position.

        Returns:
            True if the triple was new; re-adding an existing triple changes nothing
        """
        if not item:
            raise ValueError("Cannot index an empty term")
        if position < 1:
            raise ValueError(f"Positions start at 1, got {position}")

        locations = self._index.get(item)
        if locations is None:
            locations = self._index[item] = {}
            bisect.insort(self._terms, item)

        positions = locations.setdefault(location, set())
        if position in positions:
            return False

        positions.add(position)
        self._word_counts[location] = self._word_counts.get(location, 0) + 1
        return True

    def add_all(self, other: 'InvertedIndex'):
        """
        Merge another index into this one. Position sets are united and each
        location's word count grows by the positions that were new to it.
        """
        for item, other_locations in other._index.items():
            locations = self._index.get(item)
            if locations is None:
                locations = self._index[item] = {}
                bisect.insort(self._terms, item)

            for location, other_positions in other_locations.items():
                positions = locations.get(location)
                if positions is None:
                    added = len(other_positions)
                    locations[location] = set(other_positions)
                else:
                    added = len(other_positions - positions)
                    positions.update(other_positions)

                if added:
                    self._word_counts[location] = self._word_counts.get(location, 0) + added

    def get_word_count(self, location: str) -> int:
        """Total words indexed for location, 0 if it was never indexed."""
        return self._word_counts.get(location, 0)

    def get_word_counts(self) -> Dict[str, int]:
        """Copy of the word counts in location order."""
        return self._sorted_word_counts()

    def _sorted_word_counts(self) -> Dict[str, int]:
        return {location: self._word_counts[location] for location in sorted(self._word_counts)}

    def get_all_items(self) -> List[str]:
        """All indexed terms in sorted order."""
        return list(self._terms)

    def get_item_paths(self, item: str) -> List[str]:
        """Sorted locations where item occurs."""
        return sorted(self._index.get(item, ()))

    def get_item_positions(self, item: str, location: str) -> List[int]:
        """Sorted positions of item in location."""
        return sorted(self._index.get(item, {}).get(location, ()))

    def get_item_counts_by_path(self, item: str, location: str) -> int:
        """Number of occurrences of item in location."""
        return len(self._index.get(item, {}).get(location, ()))

    def has_item(self, item: str) -> bool:
        return item in self._index

    def has_path(self, item: str, location: str) -> bool:
        return location in self._index.get(item, {})

    def has_position(self, item: str, location: str, position: int) -> bool:
        return position in self._index.get(item, {}).get(location, ())

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, item: str) -> bool:
        return item in self._index

    def __eq__(self, other) -> bool:
        if not isinstance(other, InvertedIndex):
            return NotImplemented
        return self._index == other._index and self._word_counts == other._word_counts

    def _sorted_view(self) -> Dict[str, Dict[str, List[int]]]:
        return {
            item: {location: sorted(positions) for location, positions in sorted(self._index[item].items())}
            for item in self._terms
        }

    def to_json(self) -> str:
        """The index as pretty JSON."""
        return json_writer.to_string(json_writer.as_inverted_index, self._sorted_view())

    def write_json(self, output_path: Union[str, Path]):
        """Write the index as pretty JSON to output_path."""
        json_writer.write_file(json_writer.as_inverted_index, self._sorted_view(), output_path)

    def write_word_counts(self, output_path: Union[str, Path]):
        """Write the word counts as pretty JSON to output_path."""
        json_writer.write_file(json_writer.as_object, self._sorted_word_counts(), output_path)

    def __str__(self) -> str:
        return self.to_json()

    def search(self, queries: Iterable[str], exact: bool) -> List[QueryResult]:
        """Run an exact or partial search for the query terms."""
        return self.exact_search(queries) if exact else self.partial_search(queries)

    def _add_results(self, item: str, results: List[QueryResult], lookup: Dict[str, QueryResult]):
        for location, positions in self._index[item].items():
            result = lookup.get(location)
            if result is None:
                result = lookup[location] = QueryResult(location)
                results.append(result)
            result.update(len(positions), self._word_counts[location])

    def exact_search(self, queries: Iterable[str]) -> List[QueryResult]:
        """Rank locations containing any of the query terms exactly."""
        results: List[QueryResult] = []
        lookup: Dict[str, QueryResult] = {}

        for query in queries:
            if query in self._index:
                self._add_results(query, results, lookup)

        results.sort()
        return results

    def partial_search(self, queries: Iterable[str]) -> List[QueryResult]:
        """Rank locations containing any term that starts with a query term."""
        results: List[QueryResult] = []
        lookup: Dict[str, QueryResult] = {}

        for query in queries:
            start = bisect.bisect_left(self._terms, query)
            for match in islice(self._terms, start, None):
                if not match.startswith(query):
                    break
                self._add_results(match, results, lookup)

        results.sort()
        return results
