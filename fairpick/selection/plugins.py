"""Loading of externally supplied weighting-strategy plugins.

A plugin is data, not code: its numeric tuning parameters are compiled into a
closed-form weighting function. Each config carries a checksum signature that
deters accidental edits; it is not an authentication mechanism.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
import logging
import math
from typing import Any, Iterable, Mapping, Optional

from ..config import current_app_version
from ..models import CandidateSnapshot
from .strategies import BUILTIN_STRATEGY_IDS, StrategyDescriptor, StrategyRegistry

logger = logging.getLogger(__name__)

STATUS_LOADED = "loaded"
STATUS_DISABLED = "disabled"
STATUS_VERSION_GATED = "version_gated"
STATUS_UNSIGNED = "unsigned"
STATUS_SIGNATURE_MISMATCH = "signature_mismatch"
STATUS_BUILTIN_CONFLICT = "builtin_conflict"
STATUS_INVALID = "invalid"

_SKIPPED_STATUSES = frozenset({STATUS_DISABLED, STATUS_VERSION_GATED, STATUS_UNSIGNED})

_NUMERIC_FIELDS = (
    ("baseMultiplier", "base_multiplier"),
    ("scoreFactor", "score_factor"),
    ("pickDecayFactor", "pick_decay_factor"),
    ("minWeight", "min_weight"),
    ("maxWeight", "max_weight"),
)


@dataclass(frozen=True)
class StrategyPluginConfig:
    """Externally supplied description of a weighting strategy.

    Attributes
    ----------
    id : str
        Strategy id; must not collide with a built-in.
    name : str
        Human-readable label.
    description : Optional[str]
        Optional summary shown alongside the strategy.
    enabled : bool
        Disabled plugins are skipped.
    min_app_version : Optional[str]
        Dotted-integer version the application must reach for the plugin to load.
    signature : Optional[str]
        Checksum computed by :func:`compute_plugin_signature`.
    base_multiplier, score_factor, pick_decay_factor, min_weight, max_weight
        Tuning parameters of the weight formula. ``None`` means absent.
    """

    id: str
    name: str
    description: Optional[str] = None
    enabled: bool = True
    min_app_version: Optional[str] = None
    signature: Optional[str] = None
    base_multiplier: Optional[float] = None
    score_factor: Optional[float] = None
    pick_decay_factor: Optional[float] = None
    min_weight: Optional[float] = None
    max_weight: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Any) -> "StrategyPluginConfig":
        """Parse a camelCase plugin mapping.

        Raises
        ------
        TypeError
            If ``data`` is not a mapping.
        ValueError
            If ``id`` or ``name`` is missing, or a tuning parameter is not a number.
        """
        if not isinstance(data, Mapping):
            raise TypeError("plugin config is not an object")
        plugin_id = data.get("id")
        name = data.get("name")
        if not plugin_id or not name:
            raise ValueError("plugin config is missing id or name")

        numbers: dict[str, Optional[float]] = {}
        for key, attr in _NUMERIC_FIELDS:
            value = data.get(key)
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, (int, float))
            ):
                raise ValueError(f"'{key}' must be a number, got {value!r}")
            numbers[attr] = value

        description = data.get("description")
        min_app_version = data.get("minAppVersion")
        signature = data.get("signature")
        return cls(
            id=str(plugin_id),
            name=str(name),
            description=None if description is None else str(description),
            enabled=data.get("enabled") is not False,
            min_app_version=None if min_app_version is None else str(min_app_version),
            signature=None if signature is None else str(signature),
            **numbers,
        )

    def adjust_weight(self, candidate: CandidateSnapshot, base_weight: float) -> float:
        """Apply the plugin weight formula to ``candidate``."""
        base_multiplier = 1 if self.base_multiplier is None else self.base_multiplier
        score_factor = self.score_factor or 0
        pick_decay_factor = self.pick_decay_factor or 0
        min_weight = 0.1 if self.min_weight is None else self.min_weight

        score_boost = 1 + max(0, candidate.score or 0) * score_factor
        pick_decay = 1 + max(0, candidate.pick_count or 0) * pick_decay_factor
        raw = base_weight * base_multiplier * score_boost / pick_decay
        weight = max(min_weight, raw)
        if self.max_weight is not None:
            weight = min(self.max_weight, weight)
        return weight

    def to_descriptor(self) -> StrategyDescriptor:
        return StrategyDescriptor(
            id=self.id,
            name=self.name,
            adjust_weight=self.adjust_weight,
            description=self.description or "Provided by a strategy plugin.",
        )


@dataclass(frozen=True)
class PluginLoadDetail:
    """Outcome for one entry of a plugin batch."""

    index: int
    plugin_id: Optional[str]
    status: str
    message: str = ""


@dataclass
class PluginLoadReport:
    """Aggregated outcome of :func:`load_strategy_plugins`."""

    loaded: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    details: list[PluginLoadDetail] = field(default_factory=list)

    def record(self, detail: PluginLoadDetail) -> None:
        self.details.append(detail)
        if detail.status == STATUS_LOADED:
            self.loaded += 1
        elif detail.status in _SKIPPED_STATUSES:
            self.skipped += 1
        else:
            label = f"plugins[{detail.index}]"
            if detail.plugin_id:
                label += f" '{detail.plugin_id}'"
            self.errors.append(f"{label}: {detail.message}")


def format_js_number(value: float) -> str:
    """Render ``value`` the way JavaScript's ``String(number)`` does.

    Signatures are also produced by JavaScript clients, so ``1.0``
    must render as ``"1"`` and ``1e-07`` as ``"1e-7"``.
    """
    if isinstance(value, bool):
        raise TypeError("booleans are not numeric plugin parameters")
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    power = int(exponent)
    if -7 < power < 21:
        return format(Decimal(text), "f")
    return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def _signature_payload(config: StrategyPluginConfig) -> str:
    def number(value: Optional[float]) -> str:
        return "" if value is None else format_js_number(value)

    return "|".join(
        [
            config.id,
            config.name,
            config.description or "",
            number(config.base_multiplier),
            number(config.score_factor),
            number(config.pick_decay_factor),
            number(config.min_weight),
            number(config.max_weight),
            config.min_app_version or "",
        ]
    )


def rolling_hash(text: str) -> str:
    """Return the 31-multiplier rolling hash of ``text`` as lowercase hex.

    Characters are consumed as UTF-16 code units and the accumulator wraps as
    a signed 32-bit integer; the absolute value is rendered unpadded.
    """
    encoded = text.encode("utf-16-le")
    value = 0
    for offset in range(0, len(encoded), 2):
        code_unit = encoded[offset] | (encoded[offset + 1] << 8)
        value = (value * 31 + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return format(abs(value), "x")


def compute_plugin_signature(config: StrategyPluginConfig) -> str:
    """Return the checksum a plugin config must carry in ``signature``."""
    return rolling_hash(_signature_payload(config))


def _version_parts(version: str) -> list[int]:
    parts = []
    for component in version.strip().split("."):
        component = component.strip()
        parts.append(int(component) if component.isdigit() else 0)
    return parts


def compare_versions(left: str, right: str) -> int:
    """Compare dotted-integer versions component-wise.

    Missing and non-numeric components count as ``0``. Returns ``-1``, ``0``
    or ``1``.
    """
    left_parts = _version_parts(left)
    right_parts = _version_parts(right)
    width = max(len(left_parts), len(right_parts))
    left_parts += [0] * (width - len(left_parts))
    right_parts += [0] * (width - len(right_parts))
    if left_parts < right_parts:
        return -1
    if left_parts > right_parts:
        return 1
    return 0


def _evaluate_plugin(
    registry: StrategyRegistry,
    config: StrategyPluginConfig,
    index: int,
    app_version: str,
) -> PluginLoadDetail:
    def detail(status: str, message: str) -> PluginLoadDetail:
        return PluginLoadDetail(index=index, plugin_id=config.id, status=status, message=message)

    if not config.enabled:
        return detail(STATUS_DISABLED, "plugin is disabled")
    if config.min_app_version and compare_versions(app_version, config.min_app_version) < 0:
        return detail(
            STATUS_VERSION_GATED,
            f"requires app version {config.min_app_version}, running {app_version}",
        )
    if not config.signature:
        return detail(STATUS_UNSIGNED, "plugin is unsigned")
    if compute_plugin_signature(config) != config.signature:
        return detail(STATUS_SIGNATURE_MISMATCH, "signature mismatch")
    if config.id in BUILTIN_STRATEGY_IDS:
        return detail(
            STATUS_BUILTIN_CONFLICT,
            f"id '{config.id}' collides with a built-in strategy",
        )
    registry.register(config.to_descriptor(), replace=True)
    return detail(STATUS_LOADED, "registered")


def load_strategy_plugins(
    registry: StrategyRegistry,
    configs: Iterable[Any],
    *,
    app_version: Optional[str] = None,
) -> PluginLoadReport:
    """Validate a batch of plugin configs and register the acceptable ones.

    Each entry is evaluated independently: disabled, version-gated and
    unsigned plugins are skipped; signature mismatches, built-in collisions
    and malformed entries are reported as errors. A bad entry never aborts
    the rest of the batch.

    Parameters
    ----------
    registry : StrategyRegistry
        Registry receiving the compiled strategies.
    configs : Iterable[Any]
        :class:`StrategyPluginConfig` instances or raw camelCase mappings.
    app_version : Optional[str], default: None
        Current application version. Falls back to ``FAIRPICK_APP_VERSION``.

    Returns
    -------
    PluginLoadReport
        Counts, error strings and one detail per input entry.
    """
    version = current_app_version(app_version)
    report = PluginLoadReport()
    for index, raw in enumerate(configs):
        try:
            config = (
                raw
                if isinstance(raw, StrategyPluginConfig)
                else StrategyPluginConfig.from_mapping(raw)
            )
            outcome = _evaluate_plugin(registry, config, index, version)
        except (TypeError, ValueError) as exc:
            plugin_id = raw.get("id") if isinstance(raw, Mapping) else getattr(raw, "id", None)
            outcome = PluginLoadDetail(
                index=index,
                plugin_id=None if plugin_id is None else str(plugin_id),
                status=STATUS_INVALID,
                message=str(exc),
            )

        report.record(outcome)
        if outcome.status == STATUS_LOADED:
            continue
        if outcome.status in _SKIPPED_STATUSES:
            logger.debug(f"Skipped plugin #{index} '{outcome.plugin_id}': {outcome.message}")
        else:
            logger.warning(f"Rejected plugin #{index} '{outcome.plugin_id}': {outcome.message}")

    logger.info(
        f"Strategy plugins processed: {report.loaded} loaded, "
        f"{report.skipped} skipped, {len(report.errors)} errors"
    )
    return report


__all__ = [
    "PluginLoadDetail",
    "PluginLoadReport",
    "StrategyPluginConfig",
    "compare_versions",
    "compute_plugin_signature",
    "format_js_number",
    "load_strategy_plugins",
    "rolling_hash",
]
