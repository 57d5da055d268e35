"""Tests for score normalization, ranking and sorting."""

import math

import pytest

from bibfind.core.errors import CategoryMismatchError
from bibfind.core.flatten import build
from bibfind.core.models import SearchableRecord
from bibfind.core.scoring import rank, rank_weighted, scan, score_map


def table_matcher(table):
    """Matcher answering from a {(query, candidate): raw_score} table; missing means no match."""
    def match(query, candidate):
        return table.get((query, candidate))
    return match


class TestScoreMap:
    def test_zero_maps_to_half(self):
        assert score_map(0) == 0.5

    def test_strictly_increasing(self):
        xs = [x / 4 for x in range(-80, 81)]
        values = [score_map(x) for x in xs]
        assert all(a < b for a, b in zip(values, values[1:]))

    def test_open_unit_interval(self):
        for x in range(-20, 21):
            assert 0.0 < score_map(x) < 1.0

    def test_symmetry(self):
        for x in (0.5, 1.0, 3.0, 7.5):
            assert score_map(x) + score_map(-x) == pytest.approx(1.0)

    def test_extreme_inputs_do_not_overflow(self):
        assert score_map(-1000.0) >= 0.0
        assert score_map(1000.0) <= 1.0
        assert score_map(-math.inf) == 0.0


class TestRank:
    record = SearchableRecord(id=0, categories=("title text", "author text"))

    def test_sum_of_mapped_scores(self):
        matcher = table_matcher({("t", "title text"): 0.0, ("a", "author text"): 2.0})
        score = rank(self.record, ["t", "a"], matcher)
        assert score == pytest.approx(0.5 + score_map(2.0))

    def test_undefined_when_any_category_fails(self):
        matcher = table_matcher({("t", "title text"): 3.0})
        assert rank(self.record, ["t", "a"], matcher) is None

    def test_undefined_when_all_categories_fail(self):
        assert rank(self.record, ["x", "y"], table_matcher({})) is None

    def test_query_count_mismatch_fails_fast(self):
        with pytest.raises(CategoryMismatchError):
            rank(self.record, ["only one"], table_matcher({}))


class TestRankWeighted:
    record = SearchableRecord(id=0, categories=("title text", "author text"))
    matcher = staticmethod(table_matcher({("t", "title text"): 1.5, ("a", "author text"): -0.5}))

    def test_unit_weights_equal_rank(self):
        weighted = rank_weighted(self.record, ["t", "a"], [1.0, 1.0], self.matcher)
        assert weighted == pytest.approx(rank(self.record, ["t", "a"], self.matcher))

    def test_weights_scale_each_category(self):
        weighted = rank_weighted(self.record, ["t", "a"], [2.0, 0.0], self.matcher)
        assert weighted == pytest.approx(2.0 * score_map(1.5))

    def test_undefined_propagates(self):
        assert rank_weighted(self.record, ["t", "zzz"], [1.0, 1.0], self.matcher) is None

    def test_weights_length_mismatch_fails_fast(self):
        with pytest.raises(CategoryMismatchError) as excinfo:
            rank_weighted(self.record, ["t", "a"], [1.0], self.matcher)
        assert isinstance(excinfo.value, ValueError)
        assert excinfo.value.expected == 2
        assert excinfo.value.actual == 1


class TestScan:
    def test_sorted_best_first_with_id_tiebreak(self):
        records = [SearchableRecord(id=i, categories=(f"r{i}",)) for i in range(5)]
        matcher = table_matcher({
            ("q", "r0"): 1.0,
            ("q", "r1"): 3.0,
            ("q", "r2"): 1.0,
            ("q", "r4"): -2.0,
        })

        entries = scan(records, ["q"], matcher)

        assert [e.record.id for e in entries] == [1, 0, 2, 4]
        scores = [e.score for e in entries]
        assert scores == sorted(scores, reverse=True)

    def test_weighted_scan(self):
        records = [
            SearchableRecord(id=0, categories=("a", "x")),
            SearchableRecord(id=1, categories=("b", "y")),
        ]
        matcher = table_matcher({
            ("q", "a"): 2.0, ("r", "x"): -2.0,
            ("q", "b"): -2.0, ("r", "y"): 2.0,
        })

        # Second category dominates
        entries = scan(records, ["q", "r"], matcher, weights=[0.1, 10.0])
        assert [e.record.id for e in entries] == [1, 0]

    def test_quantum_scenario(self):
        """Only the record whose title matches the query is ranked."""
        categories = [["title"]]
        records = [
            build(0, {"title": "Quantum Computing"}, categories),
            build(1, {"title": "Classical Mechanics"}, categories),
        ]

        entries = scan(records, ["quant"])

        assert [e.record.id for e in entries] == [0]
        assert 0.0 < entries[0].score < 1.0
