"""
Tests for result merging (dedup by id, order by score).
"""

import pytest

from searchagg.merge import filter_repeats, order_by_score, merge_results
from searchagg.result import InvalidResultError, ScoredResult
from conftest import make_results


def ids(results):
    return [r.id for r in results]


def scores(results):
    return [r.score for r in results]


class TestFilterRepeats:
    """Test deduplication by id."""

    def test_keeps_highest_score_per_id(self):
        results = make_results((1, 5), (2, 9), (1, 7), (3, 2))
        filtered = filter_repeats(results)

        assert len(filtered) == 3
        by_id = {r.id: r for r in filtered}
        assert by_id[1].score == 7
        assert by_id[1].object == "obj-1-7"

    def test_first_seen_order(self):
        """Output follows first occurrence of each id, even when a later entry wins."""
        results = make_results((3, 1), (1, 2), (3, 8), (2, 4))
        assert ids(filter_repeats(results)) == [3, 1, 2]

    def test_first_max_wins_ties(self):
        first = ScoredResult(id="x", object="first", score=4)
        second = ScoredResult(id="x", object="second", score=4)
        filtered = filter_repeats([first, second])

        assert filtered == [first]

    def test_same_provider_duplicates(self):
        results = make_results(("a", 1), ("a", 3), ("a", 2))
        filtered = filter_repeats(results)
        assert len(filtered) == 1
        assert filtered[0].score == 3

    def test_empty(self):
        assert filter_repeats([]) == []


class TestOrderByScore:
    """Test descending sort."""

    def test_descending(self):
        results = make_results((1, 0.2), (2, 0.9), (3, 0.5))
        assert scores(order_by_score(results)) == [0.9, 0.5, 0.2]

    def test_ties_keep_input_order(self):
        """Equal scores stay in the order they arrived."""
        results = make_results(("a", 1), ("b", 3), ("c", 1), ("d", 3))
        assert ids(order_by_score(results)) == ["b", "d", "a", "c"]

    def test_mixed_int_and_float(self):
        results = make_results((1, 2), (2, 2.5), (3, -1))
        assert ids(order_by_score(results)) == [2, 1, 3]


class TestMergeResults:
    """Test the full merge."""

    def test_two_provider_example(self):
        """id 1 from the second provider wins with 7 over 5."""
        merged = merge_results(make_results((1, 5), (2, 9), (1, 7), (3, 2)))

        assert [(r.id, r.score) for r in merged] == [(2, 9), (1, 7), (3, 2)]

    def test_completeness(self):
        results = make_results(("a", 1), ("b", 2), ("a", 3), ("c", 0), ("b", 1))
        merged = merge_results(results)

        assert set(ids(merged)) == {"a", "b", "c"}
        assert len(merged) == 3

    def test_ordering_property(self):
        results = make_results(*[(i % 7, (i * 37) % 11) for i in range(40)])
        merged = merge_results(results)

        for x, y in zip(merged, merged[1:]):
            assert x.score >= y.score

    def test_winner_is_max_score(self):
        pairs = [(i % 5, (i * 13) % 17) for i in range(30)]
        merged = merge_results(make_results(*pairs))

        for r in merged:
            assert r.score == max(s for i, s in pairs if i == r.id)

    def test_idempotent(self):
        merged = merge_results(make_results((1, 5), (2, 9), (1, 7), (3, 2), (4, 2)))
        assert merge_results(merged) == merged

    def test_accepts_generator(self):
        merged = merge_results(r for r in make_results((1, 1), (2, 2)))
        assert ids(merged) == [2, 1]

    def test_empty(self):
        assert merge_results([]) == []

    def test_missing_id_rejected(self):
        results = make_results((1, 5)) + [ScoredResult(id=None, object=None, score=3)]
        with pytest.raises(InvalidResultError):
            merge_results(results)

    def test_non_numeric_score_rejected(self):
        results = make_results((1, 5)) + [ScoredResult(id=2, object=None, score="high")]
        with pytest.raises(InvalidResultError, match="score"):
            merge_results(results)

    def test_plain_dict_rejected(self):
        """Raw payloads must be converted with ScoredResult.from_dict first."""
        with pytest.raises(InvalidResultError):
            merge_results([{"id": 1, "score": 2}])
