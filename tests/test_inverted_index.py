import json
import random

import pytest

from searchindex.storage.inverted_index import InvertedIndex, QueryResult


def build(entries):
    index = InvertedIndex()
    for item, location, position in entries:
        index.add_item(item, location, position)
    return index


@pytest.fixture
def index():
    return build([
        ("compute", "a", 1), ("computer", "a", 2), ("cat", "a", 3), ("dog", "a", 4),
        ("company", "b", 1), ("dog", "b", 2),
        ("run", "c", 1), ("jump", "c", 2), ("jump", "c", 3), ("jump", "c", 4), ("jump", "c", 5),
    ])


class TestAdd:

    def test_add_item_is_idempotent(self):
        index = InvertedIndex()

        assert index.add_item("hello", "a.txt", 1)
        assert not index.add_item("hello", "a.txt", 1)
        assert index.get_word_count("a.txt") == 1
        assert index.get_item_positions("hello", "a.txt") == [1]

    def test_rejects_empty_term_and_bad_position(self):
        index = InvertedIndex()

        with pytest.raises(ValueError):
            index.add_item("", "a.txt", 1)
        with pytest.raises(ValueError):
            index.add_item("hello", "a.txt", 0)

        assert len(index) == 0

    def test_terms_stay_sorted(self, index):
        assert index.get_all_items() == sorted(index.get_all_items())
        assert index.get_all_items()[0] == "cat"

    def test_add_all_merges_positions_and_counts(self):
        first = build([("x", "a", 1), ("y", "b", 1)])
        second = build([("x", "a", 2), ("x", "c", 1), ("z", "a", 3)])

        first.add_all(second)

        assert first.get_item_positions("x", "a") == [1, 2]
        assert first.get_item_paths("x") == ["a", "c"]
        assert first.get_word_counts() == {"a": 3, "b": 1, "c": 1}
        assert first.get_all_items() == ["x", "y", "z"]

    def test_add_all_does_not_share_position_sets(self):
        first = InvertedIndex()
        second = build([("x", "a", 1)])

        first.add_all(second)
        second.add_item("x", "a", 2)

        assert first.get_item_positions("x", "a") == [1]

    def test_add_all_counts_shared_positions_once(self):
        first = build([("x", "loc", 1)])
        second = build([("x", "loc", 1), ("y", "loc", 2)])

        first.add_all(second)

        assert first.get_word_count("loc") == 2
        assert first == build([("x", "loc", 1), ("y", "loc", 2)])
        assert first.exact_search(["y"]) == [QueryResult("loc", 1, 0.5)]


class TestAccessors:

    def test_missing_lookups_are_empty(self, index):
        assert index.get_word_count("nowhere") == 0
        assert index.get_item_paths("zebra") == []
        assert index.get_item_positions("zebra", "a") == []
        assert index.get_item_counts_by_path("dog", "c") == 0

    def test_membership(self, index):
        assert index.has_item("dog")
        assert "dog" in index
        assert index.has_path("dog", "b")
        assert not index.has_path("dog", "c")
        assert index.has_position("jump", "c", 4)
        assert not index.has_position("jump", "c", 6)

    def test_counts(self, index):
        assert len(index) == 7
        assert index.get_item_counts_by_path("jump", "c") == 4
        assert index.get_word_counts() == {"a": 4, "b": 2, "c": 5}

    def test_word_counts_are_a_copy(self, index):
        counts = index.get_word_counts()
        counts["a"] = 100
        assert index.get_word_count("a") == 4

    def test_equality(self):
        entries = [("x", "a", 1), ("y", "a", 2)]
        assert build(entries) == build(reversed(entries))
        assert build(entries) != build(entries[:1])


class TestSearch:

    def test_score_is_matches_over_word_count(self, index):
        assert index.exact_search(["run"]) == [QueryResult("c", 1, 0.2)]

    def test_exact_search_ignores_prefixes(self, index):
        assert index.exact_search(["comp"]) == []
        assert index.exact_search(["zebra"]) == []

    def test_partial_search_matches_prefixes(self, index):
        results = index.partial_search(["comp"])

        assert [result.where for result in results] == ["a", "b"]
        assert results[0].count == 2
        assert results[0].score == pytest.approx(0.5)
        assert results[1].count == 1
        assert results[1].score == pytest.approx(0.5)

    def test_results_accumulate_across_terms(self, index):
        results = index.exact_search(["dog", "jump"])

        assert results == [
            QueryResult("c", 4, 0.8),
            QueryResult("b", 1, 0.5),
            QueryResult("a", 1, 0.25),
        ]

    def test_search_dispatches_on_exact(self, index):
        assert index.search(["comp"], exact=True) == []
        assert len(index.search(["comp"], exact=False)) == 2

    def test_empty_query_has_no_results(self, index):
        assert index.search([], exact=False) == []


class TestQueryResult:

    def test_ordering(self):
        results = sorted([
            QueryResult("c", 1, 0.5),
            QueryResult("a", 1, 0.5),
            QueryResult("z", 1, 0.9),
            QueryResult("b", 2, 0.5),
            QueryResult("b2", 1, 0.5),
        ])

        assert [result.where for result in results] == ["z", "b", "a", "b2", "c"]

    def test_update(self):
        result = QueryResult("a")
        result.update(1, 4)
        result.update(2, 4)

        assert result.count == 3
        assert result.score == pytest.approx(0.75)

    def test_to_dict(self):
        assert QueryResult("a", 2, 0.5).to_dict() == {"where": "a", "count": 2, "score": 0.5}


class TestJson:

    def test_to_json_layout(self):
        index = build([("hello", "a.txt", 1)])
        assert index.to_json() == '{\n\t"hello": {\n\t\t"a.txt": [\n\t\t\t1\n\t\t]\n\t}\n}'

    def test_empty_index(self):
        assert InvertedIndex().to_json() == "{\n}"
        assert str(InvertedIndex()) == "{\n}"

    def test_write_json_is_sorted(self, tmp_path, index):
        path = tmp_path / "index.json"
        index.write_json(path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert list(data) == index.get_all_items()
        assert data["dog"] == {"a": [4], "b": [2]}
        assert data["jump"]["c"] == [2, 3, 4, 5]

    def test_write_word_counts(self, tmp_path, index):
        path = tmp_path / "counts.json"
        index.write_word_counts(path)

        assert json.loads(path.read_text(encoding="utf-8")) == {"a": 4, "b": 2, "c": 5}


VOCABULARY = [
    "c", "co", "com", "comp", "compa", "company", "compute", "computer", "compz",
    "con", "decomposed", "dog", "zeta",
]

PREFIXES = ["c", "co", "com", "comp", "compa", "compz", "comq", "con", "d", "de", "z", "zz", "a"]


def random_entries(rng, count, locations=("a", "b", "c", "d")):
    return [(rng.choice(VOCABULARY), rng.choice(locations), rng.randint(1, 12)) for _ in range(count)]


def brute_force_partial(index, queries):
    """Rank by scanning every term instead of stopping at the first miss."""
    counts = {}
    for query in queries:
        for item in index.get_all_items():
            if item.startswith(query):
                for location in index.get_item_paths(item):
                    counts[location] = counts.get(location, 0) + index.get_item_counts_by_path(item, location)

    return sorted(QueryResult(where, count, count / index.get_word_count(where)) for where, count in counts.items())


class TestSearchProperties:

    @pytest.mark.parametrize("queries", [
        ["comp"], ["compa"], ["compz"], ["con"], ["co"], ["de"], ["comq"], ["zz"],
        ["comp", "com"], ["compa", "d"], ["c", "z", "a"],
    ])
    def test_partial_search_matches_full_scan_table(self, queries):
        index = build([(item, location, position)
                       for position, item in enumerate(VOCABULARY, start=1)
                       for location in ("a", "b") if position % 2 or location == "a"])

        assert index.partial_search(queries) == brute_force_partial(index, queries)

    @pytest.mark.parametrize("seed", range(25))
    def test_partial_search_matches_full_scan_random(self, seed):
        rng = random.Random(seed)
        index = build(random_entries(rng, 40))
        queries = rng.sample(PREFIXES, rng.randint(1, 4))

        assert index.partial_search(queries) == brute_force_partial(index, queries)

    @pytest.mark.parametrize("seed", range(25))
    def test_merge_order_does_not_change_results(self, seed):
        rng = random.Random(seed)
        first_entries = random_entries(rng, 20)
        second_entries = random_entries(rng, 20) + first_entries[:5]

        forward = build(first_entries)
        forward.add_all(build(second_entries))
        backward = build(second_entries)
        backward.add_all(build(first_entries))
        single = build(first_entries + second_entries)

        assert forward == single
        assert backward == single
        for queries in (["comp"], ["c", "dog"], ["zeta", "con"], ["decomposed"]):
            for exact in (True, False):
                expected = single.search(queries, exact)
                assert forward.search(queries, exact) == expected
                assert backward.search(queries, exact) == expected
