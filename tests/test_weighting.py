from __future__ import annotations

import unittest

from fairpick.models import (
    CandidateSnapshot,
    HistoricalPickRecord,
    PickedCandidateRef,
    SelectionPolicy,
    SelectionTrace,
)
from fairpick.selection.strategies import StrategyRegistry
from fairpick.selection.weighting import assign_weights


def _record(record_id: str, timestamp: str, *picked_ids: str, class_id: str = "c1"):
    return HistoricalPickRecord(
        id=record_id,
        timestamp=timestamp,
        class_id=class_id,
        picked=tuple(PickedCandidateRef(id=pid) for pid in picked_ids),
    )


class AssignWeightsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = StrategyRegistry()

    def _assign(self, candidates, policy, history=()):
        traces = {c.id: SelectionTrace.for_candidate(c) for c in candidates}
        weights = assign_weights(candidates, policy, list(history), "c1", self.registry, traces)
        return weights, traces

    def test_falsy_weight_is_treated_as_one(self) -> None:
        candidate = CandidateSnapshot(id="a", name="A", weight=0)
        weights, traces = self._assign([candidate], SelectionPolicy(weighted_random=True))
        self.assertEqual(weights["a"], 1.0)
        self.assertEqual(traces["a"].base_weight, 1.0)

    def test_balance_by_term_dampens_by_pick_count(self) -> None:
        candidate = CandidateSnapshot(id="a", name="A", pick_count=4)
        weights, traces = self._assign(
            [candidate], SelectionPolicy(weighted_random=True, balance_by_term=True)
        )
        self.assertAlmostEqual(weights["a"], 0.5)
        self.assertIn("balance_target_boost", traces["a"].reasons)

    def test_stage_fairness_counts_recent_class_records(self) -> None:
        candidates = [CandidateSnapshot(id="a", name="A"), CandidateSnapshot(id="b", name="B")]
        history = [
            _record("h1", "2024-05-01T08:00:00.000Z", "a"),
            _record("h2", "2024-05-02T08:00:00.000Z", "a"),
            _record("h3", "2024-05-03T08:00:00.000Z", "b", class_id="c2"),
        ]
        weights, traces = self._assign(
            candidates,
            SelectionPolicy(weighted_random=True, stage_fairness_rounds=2),
            history,
        )
        self.assertAlmostEqual(weights["a"], 1 / 1.8)
        self.assertEqual(weights["b"], 1.0)
        self.assertIn("stage_fairness_boost", traces["a"].reasons)
        self.assertNotIn("stage_fairness_boost", traces["b"].reasons)

    def test_weight_is_floored(self) -> None:
        candidate = CandidateSnapshot(id="a", name="A", pick_count=100)
        weights, _ = self._assign(
            [candidate], SelectionPolicy(weighted_random=True, strategy_preset="balanced")
        )
        self.assertEqual(weights["a"], 0.1)

    def test_reason_tags_by_mode(self) -> None:
        candidate = CandidateSnapshot(id="a", name="A", score=4)
        _, momentum = self._assign(
            [candidate], SelectionPolicy(weighted_random=True, strategy_preset="momentum")
        )
        _, classic = self._assign([candidate], SelectionPolicy(weighted_random=True))
        _, uniform = self._assign([candidate], SelectionPolicy())
        self.assertEqual(momentum["a"].reasons, ["eligible", "weighted", "strategy_adjusted"])
        self.assertEqual(classic["a"].reasons, ["eligible", "weighted"])
        self.assertEqual(uniform["a"].reasons, ["eligible", "fallback_random"])
        self.assertAlmostEqual(momentum["a"].final_weight, 1.2)

    def test_unknown_preset_uses_classic(self) -> None:
        candidate = CandidateSnapshot(id="a", name="A", weight=2)
        with self.assertLogs("fairpick.selection.strategies", level="WARNING"):
            weights, traces = self._assign(
                [candidate], SelectionPolicy(weighted_random=True, strategy_preset="nope")
            )
        self.assertEqual(weights["a"], 2.0)
        self.assertNotIn("strategy_adjusted", traces["a"].reasons)


if __name__ == "__main__":
    unittest.main()
