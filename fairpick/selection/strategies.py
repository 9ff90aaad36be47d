"""Weighting strategies and the registry that resolves them."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
import threading
from typing import Callable, Dict, Optional

from ..models import CandidateSnapshot

logger = logging.getLogger(__name__)

CLASSIC_STRATEGY_ID = "classic"
BUILTIN_STRATEGY_IDS = frozenset({"classic", "balanced", "momentum"})

_SAFE_STRATEGY_ID = re.compile(r"^[a-z0-9-]{2,40}$")


@dataclass(frozen=True)
class StrategyDescriptor:
    """Definition of a weighting strategy.

    Attributes
    ----------
    id : str
        Registry key used to identify the strategy. Unique across built-ins
        and plugins; matched against :attr:`SelectionPolicy.strategy_preset`.
    name : str
        Human-readable label.
    adjust_weight : Callable[[CandidateSnapshot, float], float]
        Pure function mapping a candidate and its base weight to an adjusted
        weight.
    description : Optional[str]
        Summary of the strategy's behaviour.
    """

    id: str
    name: str
    adjust_weight: Callable[[CandidateSnapshot, float], float]
    description: Optional[str] = None

    @property
    def is_builtin(self) -> bool:
        return self.id in BUILTIN_STRATEGY_IDS

    def adjust(self, candidate: CandidateSnapshot, base_weight: float) -> float:
        """Return the adjusted weight for ``candidate`` as a float."""
        return float(self.adjust_weight(candidate, base_weight))


def _classic(candidate: CandidateSnapshot, base_weight: float) -> float:
    return base_weight


def _balanced(candidate: CandidateSnapshot, base_weight: float) -> float:
    return base_weight / (1 + (candidate.pick_count or 0))


def _momentum(candidate: CandidateSnapshot, base_weight: float) -> float:
    score_boost = max(0, candidate.score or 0) * 0.05
    return base_weight * (1 + score_boost)


CLASSIC_STRATEGY = StrategyDescriptor(
    id="classic",
    name="Classic",
    adjust_weight=_classic,
    description="Draw strictly by the configured weight.",
)
BALANCED_STRATEGY = StrategyDescriptor(
    id="balanced",
    name="Balanced",
    adjust_weight=_balanced,
    description="The more often a candidate was picked, the lower its weight.",
)
MOMENTUM_STRATEGY = StrategyDescriptor(
    id="momentum",
    name="Momentum",
    adjust_weight=_momentum,
    description="Candidates with a positive score receive a 5% boost per point.",
)

BUILTIN_STRATEGIES = (CLASSIC_STRATEGY, BALANCED_STRATEGY, MOMENTUM_STRATEGY)


def is_safe_strategy_id(strategy_id: str) -> bool:
    """Return ``True`` when ``strategy_id`` is 2-40 lowercase letters, digits or dashes."""
    return bool(_SAFE_STRATEGY_ID.match(strategy_id or ""))


class StrategyRegistry:
    """Mutable registry mapping strategy ids to descriptors.

    A new registry holds exactly the built-in strategies. Built-ins cannot be
    replaced; plugins may be registered and later discarded with
    :meth:`reset`. Mutations are serialized with a lock so a registry can be
    shared between threads.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._strategies: Dict[str, StrategyDescriptor] = {}
        self._install_builtins()

    def _install_builtins(self) -> None:
        self._strategies = {strategy.id: strategy for strategy in BUILTIN_STRATEGIES}

    def register(self, descriptor: StrategyDescriptor, *, replace: bool = False) -> None:
        """Register a strategy under its id.

        Parameters
        ----------
        descriptor : StrategyDescriptor
            Strategy to add to the registry.
        replace : bool, default: False
            When ``True`` an existing non-built-in registration with the same
            id is overwritten. Otherwise a duplicate raises :class:`ValueError`.

        Raises
        ------
        ValueError
            If the id collides with a built-in, is not a safe id, the name is
            empty, or the id is already registered and ``replace`` is false.
        """
        if not descriptor.name:
            raise ValueError(f"Strategy '{descriptor.id}' must have a name")
        if descriptor.is_builtin:
            raise ValueError(f"Built-in strategy '{descriptor.id}' cannot be overridden")
        if not is_safe_strategy_id(descriptor.id):
            raise ValueError(
                f"Strategy id '{descriptor.id}' must be 2-40 lowercase letters, "
                "digits or dashes"
            )
        with self._lock:
            if not replace and descriptor.id in self._strategies:
                raise ValueError(f"Strategy '{descriptor.id}' is already registered")
            self._strategies[descriptor.id] = descriptor
        logger.info(f"Registered strategy '{descriptor.id}'")

    def get(self, strategy_id: str) -> StrategyDescriptor:
        """Return the strategy registered under ``strategy_id``."""
        with self._lock:
            try:
                return self._strategies[strategy_id]
            except KeyError as exc:
                raise KeyError(f"Unknown weighting strategy '{strategy_id}'") from exc

    def resolve(self, strategy_id: Optional[str]) -> StrategyDescriptor:
        """Return the strategy for ``strategy_id``, falling back to ``classic``.

        The fallback is not reported to the caller; it is logged so that it
        can be monitored.
        """
        with self._lock:
            descriptor = self._strategies.get(strategy_id or CLASSIC_STRATEGY_ID)
        if descriptor is None:
            logger.warning(
                f"Unknown strategy preset '{strategy_id}', falling back to 'classic'"
            )
            return CLASSIC_STRATEGY
        return descriptor

    def __contains__(self, strategy_id: object) -> bool:
        with self._lock:
            return strategy_id in self._strategies

    def available_strategies(self) -> Dict[str, StrategyDescriptor]:
        """Return a copy of the registered strategies keyed by id."""
        with self._lock:
            return dict(self._strategies)

    def list_strategies(self) -> list[StrategyDescriptor]:
        """Return registered strategies, built-ins first, in registration order."""
        with self._lock:
            return list(self._strategies.values())

    def reset(self) -> None:
        """Discard every plugin and restore exactly the built-in strategies."""
        with self._lock:
            discarded = len(self._strategies) - len(BUILTIN_STRATEGIES)
            self._install_builtins()
        logger.info(f"Strategy registry reset; discarded {discarded} plugin strategies")


__all__ = [
    "BALANCED_STRATEGY",
    "BUILTIN_STRATEGIES",
    "BUILTIN_STRATEGY_IDS",
    "CLASSIC_STRATEGY",
    "CLASSIC_STRATEGY_ID",
    "MOMENTUM_STRATEGY",
    "StrategyDescriptor",
    "StrategyRegistry",
    "is_safe_strategy_id",
]
