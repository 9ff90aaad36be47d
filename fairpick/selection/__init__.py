"""Selection pipeline: strategies, plugins, eligibility, weighting, drawing and grouping."""

from .engine import ENGINE_VERSION, SelectionEngine
from .plugins import (
    PluginLoadDetail,
    PluginLoadReport,
    StrategyPluginConfig,
    compare_versions,
    compute_plugin_signature,
    load_strategy_plugins,
)
from .strategies import (
    BUILTIN_STRATEGY_IDS,
    StrategyDescriptor,
    StrategyRegistry,
)

__all__ = [
    "BUILTIN_STRATEGY_IDS",
    "ENGINE_VERSION",
    "PluginLoadDetail",
    "PluginLoadReport",
    "SelectionEngine",
    "StrategyDescriptor",
    "StrategyPluginConfig",
    "StrategyRegistry",
    "compare_versions",
    "compute_plugin_signature",
    "load_strategy_plugins",
]
