from __future__ import annotations

from collections import Counter
import itertools
import unittest

from fairpick.models import CandidateSnapshot, HistoricalPickRecord, PickedCandidateRef
from fairpick.selection.draw import uniform_choice, weighted_choice
from fairpick.selection.grouping import (
    fisher_yates,
    group_cost,
    order_by_score,
    random_groups,
)
from fairpick.selection.history import pair_counts, recent_records


def _sequence(*values: float):
    cycle = itertools.cycle(values)
    return lambda: next(cycle)


def _candidates(*ids: str, **overrides) -> list[CandidateSnapshot]:
    return [CandidateSnapshot(id=cid, name=cid.upper(), **overrides) for cid in ids]


class DrawPrimitiveTests(unittest.TestCase):
    def test_weighted_choice_walks_in_list_order(self) -> None:
        pool = _candidates("a", "b", "c")
        weights = {"a": 1.0, "b": 2.0, "c": 1.0}
        self.assertEqual(weighted_choice(pool, weights, _sequence(0.0)).id, "a")
        self.assertEqual(weighted_choice(pool, weights, _sequence(0.5)).id, "b")
        self.assertEqual(weighted_choice(pool, weights, _sequence(0.8)).id, "c")

    def test_weighted_choice_falls_back_to_last(self) -> None:
        pool = _candidates("a", "b")
        weights = {"a": 1.0, "b": 1.0}
        self.assertEqual(weighted_choice(pool, weights, _sequence(1.0)).id, "b")

    def test_uniform_choice_index_is_clamped(self) -> None:
        pool = _candidates("a", "b", "c")
        self.assertEqual(uniform_choice(pool, _sequence(0.34)).id, "b")
        self.assertEqual(uniform_choice(pool, _sequence(1.0)).id, "c")


class GroupingPrimitiveTests(unittest.TestCase):
    def test_fisher_yates_is_driven_by_random_source(self) -> None:
        shuffled = fisher_yates(["a", "b", "c", "d"], _sequence(0.0))
        self.assertEqual(shuffled, ["b", "c", "d", "a"])

    def test_fisher_yates_does_not_mutate_input(self) -> None:
        items = ["a", "b", "c"]
        fisher_yates(items, _sequence(0.0))
        self.assertEqual(items, ["a", "b", "c"])

    def test_random_groups_deal_round_robin(self) -> None:
        groups = random_groups(_candidates("a", "b", "c", "d", "e"), 2, _sequence(0.99))
        self.assertEqual([len(group) for group in groups], [3, 2])

    def test_tie_swap_pass(self) -> None:
        tied = _candidates("a", "b", "c", score=5)
        swapped = order_by_score(tied, _sequence(0.0))
        kept = order_by_score(tied, _sequence(0.9))
        self.assertEqual([c.id for c in swapped], ["b", "c", "a"])
        self.assertEqual([c.id for c in kept], ["a", "b", "c"])

    def test_order_by_score_is_descending(self) -> None:
        pool = [
            CandidateSnapshot(id="low", name="L", score=-2),
            CandidateSnapshot(id="high", name="H", score=7),
            CandidateSnapshot(id="mid", name="M", score=3),
        ]
        self.assertEqual(
            [c.id for c in order_by_score(pool, _sequence(0.0))], ["high", "mid", "low"]
        )

    def test_group_cost_components(self) -> None:
        candidate = CandidateSnapshot(id="x", name="X")
        group = [
            CandidateSnapshot(id="a", name="A", score=4),
            CandidateSnapshot(id="b", name="B", score=-1),
        ]
        pairs = Counter({("a", "x"): 2})
        self.assertEqual(group_cost(candidate, group, pairs), 3 + 200 + 20)


class HistoryWindowTests(unittest.TestCase):
    def test_recent_records_sorted_and_scoped(self) -> None:
        history = [
            HistoricalPickRecord(id="1", timestamp="2024-01-01T00:00:00Z", class_id="c"),
            HistoricalPickRecord(id="2", timestamp="2024-03-01T00:00:00Z", class_id="c"),
            HistoricalPickRecord(id="3", timestamp="2024-02-01T00:00:00Z", class_id="c"),
            HistoricalPickRecord(id="4", timestamp="2024-04-01T00:00:00Z", class_id="x"),
        ]
        self.assertEqual([r.id for r in recent_records(history, "c", 2)], ["2", "3"])
        self.assertEqual(recent_records(history, "c", 0), [])

    def test_pair_counts_from_picked_lists_and_groups(self) -> None:
        picked = HistoricalPickRecord(
            id="p",
            timestamp="2024-01-01T00:00:00Z",
            class_id="c",
            picked=(PickedCandidateRef(id="b"), PickedCandidateRef(id="a")),
        )
        grouped = HistoricalPickRecord(
            id="g",
            timestamp="2024-01-02T00:00:00Z",
            class_id="c",
            picked=tuple(PickedCandidateRef(id=i) for i in "abcd"),
            groups=(("a", "b"), ("c", "d")),
        )
        counts = pair_counts([picked, grouped])
        self.assertEqual(counts[("a", "b")], 2)
        self.assertEqual(counts[("c", "d")], 1)
        self.assertEqual(counts[("a", "c")], 0)


if __name__ == "__main__":
    unittest.main()
