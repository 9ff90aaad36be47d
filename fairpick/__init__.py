"""Fairness-aware candidate selection and grouping."""

from .models import (
    CandidateSnapshot,
    GroupRequest,
    GroupResult,
    HistoricalPickRecord,
    PickRequest,
    PickResult,
    PickedCandidateRef,
    SelectionPolicy,
    SelectionTrace,
)
from .selection import (
    ENGINE_VERSION,
    PluginLoadReport,
    SelectionEngine,
    StrategyDescriptor,
    StrategyPluginConfig,
    StrategyRegistry,
    load_strategy_plugins,
)

__all__ = [
    "CandidateSnapshot",
    "ENGINE_VERSION",
    "GroupRequest",
    "GroupResult",
    "HistoricalPickRecord",
    "PickRequest",
    "PickResult",
    "PickedCandidateRef",
    "PluginLoadReport",
    "SelectionEngine",
    "SelectionPolicy",
    "SelectionTrace",
    "StrategyDescriptor",
    "StrategyPluginConfig",
    "StrategyRegistry",
    "load_strategy_plugins",
]
