from __future__ import annotations

import itertools
import json
from pathlib import Path
import sys
import tempfile
import unittest

from fairpick.models import HistoricalPickRecord, SelectionPolicy
from fairpick.selection import SelectionEngine, StrategyRegistry, load_strategy_plugins
from fairpick.workflows import (
    build_group_history_record,
    build_group_summary,
    build_history_selection_meta,
    build_pick_history_record,
    build_pick_request,
    run_group,
    run_pick,
)

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "scripts"))
from sign_plugin import sign_plugins  # noqa: E402


def _sequence(*values: float):
    cycle = itertools.cycle(values)
    return lambda: next(cycle)


CLASS_GROUP = {
    "id": "class-1",
    "name": "Class One",
    "students": [
        {"id": "a", "name": "Alice", "pickCount": 0, "score": 5, "weight": 1, "status": "active"},
        {"id": "b", "name": "Bob", "pickCount": 2, "score": 1, "weight": 1, "status": "active"},
        {"id": "c", "name": "Cleo", "pickCount": 1, "score": 3, "weight": 1, "status": "absent"},
    ],
}


class RequestBuilderTests(unittest.TestCase):
    def test_build_pick_request_from_stored_data(self) -> None:
        request = build_pick_request(
            CLASS_GROUP,
            [
                {
                    "id": "h1",
                    "timestamp": "2024-05-01T08:00:00.000Z",
                    "classId": "class-1",
                    "pickedStudents": [{"id": "a", "name": "Alice"}],
                }
            ],
            {"preventRepeat": True, "cooldownRounds": 1},
            1,
            manual_excluded_ids=["b"],
        )
        self.assertEqual(request.mode, "pick")
        self.assertEqual([c.id for c in request.candidates], ["a", "b", "c"])
        self.assertEqual(request.candidates[0].class_name, "Class One")
        self.assertIsInstance(request.history[0], HistoricalPickRecord)
        self.assertEqual(request.policy.manual_excluded_ids, ("b",))
        self.assertTrue(request.policy.cooldown_active)


class RunWorkflowTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = SelectionEngine()

    def test_pick_history_record_feeds_cooldown(self) -> None:
        policy = SelectionPolicy(prevent_repeat=True, cooldown_rounds=1)
        first = run_pick(
            self.engine, CLASS_GROUP, [], policy, 1,
            rng=_sequence(0.0), now="2024-05-01T08:00:00.000Z",
        )
        self.assertEqual([w.id for w in first.winners], ["a"])
        record = build_pick_history_record(
            first, record_id="h1", class_id="class-1", class_name="Class One"
        )
        second = run_pick(
            self.engine, CLASS_GROUP, [record], policy, 1,
            rng=_sequence(0.0), now="2024-05-02T08:00:00.000Z",
        )
        self.assertEqual([w.id for w in second.winners], ["b"])
        self.assertEqual(second.cooldown_excluded_ids, ["a"])

    def test_history_selection_meta_shape(self) -> None:
        result = run_pick(
            self.engine, CLASS_GROUP, [], {"weightedRandom": True}, 5,
            rng=_sequence(0.4), now="2024-05-01T08:00:00.000Z",
        )
        meta = build_history_selection_meta(result)
        self.assertEqual(meta["requestedCount"], 5)
        self.assertEqual(meta["actualCount"], 2)
        self.assertEqual(meta["generatedAt"], "2024-05-01T08:00:00.000Z")
        self.assertEqual(meta["cooldownExcludedIds"], [])
        self.assertEqual(meta["fallbackNotes"], [])
        self.assertTrue(meta["policySnapshot"]["weightedRandom"])
        json.dumps(result.to_json())

    def test_history_selection_meta_explains_winners(self) -> None:
        result = run_pick(
            self.engine, CLASS_GROUP, [], {"weightedRandom": True, "balanceByTerm": True}, 1,
            rng=_sequence(0.4), now="2024-05-01T08:00:00.000Z",
        )
        explanations = build_history_selection_meta(result)["winnerExplanations"]
        self.assertEqual(len(explanations), 1)
        alice = explanations[0]
        self.assertEqual(alice["id"], "a")
        self.assertEqual(alice["name"], "Alice")
        self.assertEqual(alice["baseWeight"], 1)
        self.assertAlmostEqual(alice["finalWeight"], 1.0)
        # Bob is damped to 1 / 1.5 by his two earlier picks; Cleo is absent.
        self.assertAlmostEqual(alice["estimatedProbability"], 0.6)
        self.assertEqual(alice["reasons"], ["eligible", "balance_target_boost", "weighted"])

    def test_group_summary_and_history_record(self) -> None:
        result = run_group(
            self.engine, CLASS_GROUP, [], {"groupStrategy": "balanced-score"}, 2,
            rng=_sequence(0.9), now="2024-05-01T08:00:00.000Z",
        )
        summary = build_group_summary(result)
        self.assertEqual(summary["groupCount"], 2)
        self.assertEqual(
            [group["studentIds"] for group in summary["groups"]], [["a"], ["b"]]
        )
        record = build_group_history_record(
            result, record_id="g1", class_id="class-1", class_name="Class One"
        )
        parsed = HistoricalPickRecord.from_mapping(record)
        self.assertEqual(parsed.groups, (("a",), ("b",)))
        self.assertEqual(parsed.picked_ids, ["a", "b"])


class SignPluginScriptTests(unittest.TestCase):
    def test_sign_plugins_writes_signatures(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "plugins.json"
            path.write_text(
                json.dumps([{"id": "tuned", "name": "Tuned", "baseMultiplier": 1.5}]),
                encoding="utf-8",
            )
            entries = sign_plugins(path, write=True)
            stored = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(stored[0]["signature"], entries[0]["signature"])

        registry = StrategyRegistry()
        report = load_strategy_plugins(registry, stored, app_version="1.0.0")
        self.assertEqual(report.loaded, 1)


if __name__ == "__main__":
    unittest.main()
