"""Fairness policy configuration."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping

from .utils import non_negative_int

GROUP_STRATEGIES = ("random", "balanced-score")


@dataclass(frozen=True)
class SelectionPolicy:
    """Options controlling eligibility, weighting, drawing and grouping.

    Attributes
    ----------
    weighted_random : bool
        Draw proportionally to final weights instead of uniformly.
    prevent_repeat : bool
        Enable the cooldown stage.
    cooldown_rounds : int
        Number of most recent class history records whose picks are barred.
    strategy_preset : str
        Registry key of the weighting strategy.
    balance_by_term : bool
        Dampen weight by cumulative ``pick_count``.
    stage_fairness_rounds : int
        Lookback window used to dampen weight by recent pick frequency.
    prioritize_unpicked_count : int
        Winners reserved for candidates that were never picked.
    group_strategy : str
        ``"random"`` or ``"balanced-score"``.
    pair_avoid_rounds : int
        Lookback window penalizing repeated co-grouping.
    auto_relax_on_conflict : bool
        Relax manual exclusions when they would empty the pool.
    manual_excluded_ids : tuple[str, ...]
        Ids temporarily barred for a single draw.
    """

    weighted_random: bool = False
    prevent_repeat: bool = False
    cooldown_rounds: int = 0
    strategy_preset: str = "classic"
    balance_by_term: bool = False
    stage_fairness_rounds: int = 0
    prioritize_unpicked_count: int = 0
    group_strategy: str = "random"
    pair_avoid_rounds: int = 0
    auto_relax_on_conflict: bool = True
    manual_excluded_ids: tuple[str, ...] = ()

    @property
    def cooldown_active(self) -> bool:
        return self.prevent_repeat and self.cooldown_rounds > 0

    def with_manual_exclusions(self, ids: Iterable[str]) -> "SelectionPolicy":
        """Return a copy barring ``ids`` for the next draw only."""
        return replace(self, manual_excluded_ids=tuple(str(item) for item in ids))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SelectionPolicy":
        """Merge a partial camelCase settings mapping over the defaults.

        Unknown keys are ignored, negative counts are clamped to zero and an
        unrecognized ``groupStrategy`` resolves to ``"random"``.
        """
        defaults = cls()
        group_strategy = str(data.get("groupStrategy") or defaults.group_strategy)
        if group_strategy not in GROUP_STRATEGIES:
            group_strategy = defaults.group_strategy

        def flag(key: str, default: bool) -> bool:
            value = data.get(key)
            return default if value is None else bool(value)

        return cls(
            weighted_random=flag("weightedRandom", defaults.weighted_random),
            prevent_repeat=flag("preventRepeat", defaults.prevent_repeat),
            cooldown_rounds=non_negative_int(data.get("cooldownRounds")),
            strategy_preset=str(data.get("strategyPreset") or defaults.strategy_preset),
            balance_by_term=flag("balanceByTerm", defaults.balance_by_term),
            stage_fairness_rounds=non_negative_int(data.get("stageFairnessRounds")),
            prioritize_unpicked_count=non_negative_int(
                data.get("prioritizeUnpickedCount")
            ),
            group_strategy=group_strategy,
            pair_avoid_rounds=non_negative_int(data.get("pairAvoidRounds")),
            auto_relax_on_conflict=flag(
                "autoRelaxOnConflict", defaults.auto_relax_on_conflict
            ),
            manual_excluded_ids=tuple(
                str(item) for item in data.get("manualExcludedIds") or ()
            ),
        )

    @classmethod
    def for_activity(cls, name: str) -> "SelectionPolicy":
        """Return the policy of a named activity preset.

        Raises
        ------
        KeyError
            If ``name`` is not one of :data:`ACTIVITY_PRESETS`.
        """
        try:
            return ACTIVITY_PRESETS[name]
        except KeyError as exc:
            raise KeyError(f"Unknown activity preset '{name}'") from exc

    def to_json(self) -> dict:
        return {
            "weightedRandom": self.weighted_random,
            "preventRepeat": self.prevent_repeat,
            "cooldownRounds": self.cooldown_rounds,
            "strategyPreset": self.strategy_preset,
            "balanceByTerm": self.balance_by_term,
            "stageFairnessRounds": self.stage_fairness_rounds,
            "prioritizeUnpickedCount": self.prioritize_unpicked_count,
            "groupStrategy": self.group_strategy,
            "pairAvoidRounds": self.pair_avoid_rounds,
            "autoRelaxOnConflict": self.auto_relax_on_conflict,
            "manualExcludedIds": list(self.manual_excluded_ids),
        }


ACTIVITY_PRESETS: dict[str, SelectionPolicy] = {
    "quick-pick": SelectionPolicy(),
    "deep-focus": SelectionPolicy(
        weighted_random=True,
        prevent_repeat=True,
        cooldown_rounds=2,
        strategy_preset="balanced",
    ),
    "group-battle": SelectionPolicy(
        weighted_random=True,
        strategy_preset="momentum",
    ),
}


__all__ = ["ACTIVITY_PRESETS", "GROUP_STRATEGIES", "SelectionPolicy"]
