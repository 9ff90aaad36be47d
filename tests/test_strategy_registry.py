from __future__ import annotations

import unittest

from fairpick.models import CandidateSnapshot
from fairpick.selection.strategies import (
    CLASSIC_STRATEGY,
    StrategyDescriptor,
    StrategyRegistry,
    is_safe_strategy_id,
)


def _candidate(**overrides) -> CandidateSnapshot:
    values = {"id": "s1", "name": "Alice"}
    values.update(overrides)
    return CandidateSnapshot(**values)


class BuiltinStrategyTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = StrategyRegistry()

    def test_new_registry_contains_only_builtins(self) -> None:
        ids = [strategy.id for strategy in self.registry.list_strategies()]
        self.assertEqual(ids, ["classic", "balanced", "momentum"])

    def test_classic_returns_base_weight(self) -> None:
        classic = self.registry.get("classic")
        self.assertEqual(classic.adjust(_candidate(pick_count=9, score=50), 2.0), 2.0)

    def test_balanced_divides_by_pick_count(self) -> None:
        balanced = self.registry.get("balanced")
        self.assertAlmostEqual(balanced.adjust(_candidate(pick_count=3), 2.0), 0.5)

    def test_momentum_boosts_positive_scores_only(self) -> None:
        momentum = self.registry.get("momentum")
        self.assertAlmostEqual(momentum.adjust(_candidate(score=10), 1.0), 1.5)
        self.assertAlmostEqual(momentum.adjust(_candidate(score=-4), 1.0), 1.0)


class RegistryMutationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = StrategyRegistry()
        self.custom = StrategyDescriptor(
            id="double-up",
            name="Double Up",
            adjust_weight=lambda candidate, base: base * 2,
        )

    def test_register_and_get(self) -> None:
        self.registry.register(self.custom)
        self.assertIs(self.registry.get("double-up"), self.custom)
        self.assertIn("double-up", self.registry)

    def test_duplicate_requires_replace(self) -> None:
        self.registry.register(self.custom)
        with self.assertRaises(ValueError):
            self.registry.register(self.custom)
        self.registry.register(self.custom, replace=True)

    def test_builtin_cannot_be_overridden(self) -> None:
        impostor = StrategyDescriptor(
            id="classic", name="Impostor", adjust_weight=lambda c, b: 99.0
        )
        with self.assertRaises(ValueError):
            self.registry.register(impostor, replace=True)
        self.assertIs(self.registry.get("classic"), CLASSIC_STRATEGY)

    def test_is_builtin_flags_only_shipped_strategies(self) -> None:
        self.assertTrue(CLASSIC_STRATEGY.is_builtin)
        self.assertTrue(self.registry.get("momentum").is_builtin)
        custom = StrategyDescriptor(id="double-up", name="Double", adjust_weight=lambda c, b: b * 2)
        self.assertFalse(custom.is_builtin)

    def test_unsafe_id_rejected(self) -> None:
        self.assertFalse(is_safe_strategy_id("Bad_ID"))
        self.assertFalse(is_safe_strategy_id("x"))
        self.assertTrue(is_safe_strategy_id("ok-2"))
        with self.assertRaises(ValueError):
            self.registry.register(
                StrategyDescriptor(id="Bad_ID", name="Bad", adjust_weight=lambda c, b: b)
            )

    def test_missing_name_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.registry.register(
                StrategyDescriptor(id="nameless", name="", adjust_weight=lambda c, b: b)
            )

    def test_get_unknown_raises_key_error(self) -> None:
        with self.assertRaises(KeyError):
            self.registry.get("missing")

    def test_resolve_unknown_falls_back_to_classic(self) -> None:
        with self.assertLogs("fairpick.selection.strategies", level="WARNING"):
            resolved = self.registry.resolve("missing")
        self.assertIs(resolved, CLASSIC_STRATEGY)

    def test_reset_restores_exactly_builtins(self) -> None:
        self.registry.register(self.custom)
        self.registry.reset()
        self.assertEqual(
            set(self.registry.available_strategies()), {"classic", "balanced", "momentum"}
        )

    def test_registries_are_independent(self) -> None:
        self.registry.register(self.custom)
        self.assertNotIn("double-up", StrategyRegistry())


if __name__ == "__main__":
    unittest.main()
