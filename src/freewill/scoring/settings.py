#!/usr/bin/env python3
"""Scoring settings - circuit breakers, colony policy offsets and engine tuning.

Settings may be loaded from a JSON document. Missing keys take the hardcoded
defaults below. A document that cannot be parsed, or holds any malformed
value, is discarded as a whole in favour of those defaults.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from .quantizer import DEFAULT_PRIORITY_LEVELS, PriorityScale

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════

DEFAULT_VALUE: Final[float] = 0.2

DEFAULT_SETTINGS_PATH: Final[Path] = Path(__file__).parent / "default_settings.json"

# breaker name -> default weight; every breaker's neutral weight is 0.0
DEFAULT_BREAKER_WEIGHTS: Final[dict[str, float]] = {
    "movement_speed": 1.0,
    "food_poisoning": 1.0,
    "own_room": 1.0,
    "plants_blighted": 1.0,
    "tree_pruning": 1.0,
    "hunting_weapon": 1.0,
    "brawlers_not_hunting": 1.0,
}


# ═══════════════════════════════════════════════════════════════════════════
# CIRCUIT BREAKERS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass
class CircuitBreaker:
    """Runtime toggle for a fault-prone consideration.

    The weight doubles as the consideration's strength. A breaker is active
    while its weight differs from ``neutral``. ``trip`` moves it to neutral
    and nothing moves it back, so a faulting consideration is skipped by
    every later evaluation.
    """

    name: str
    weight: float = 1.0
    neutral: float = 0.0

    @property
    def active(self) -> bool:
        return self.weight != self.neutral

    def trip(self) -> None:
        # plain attribute write; concurrent trips converge on the same value
        if self.active:
            logger.warning("consideration %s disabled in settings to avoid future errors", self.name)
        self.weight = self.neutral


class BreakerSet(Mapping[str, CircuitBreaker]):
    """Named circuit breakers. Unknown names are created at their default weight."""

    def __init__(self, weights: Mapping[str, float] | None = None) -> None:
        merged = dict(DEFAULT_BREAKER_WEIGHTS)
        merged.update(weights or {})
        self._breakers = {name: CircuitBreaker(name, float(w)) for name, w in merged.items()}
        self._lock = threading.Lock()

    def __getitem__(self, name: str) -> CircuitBreaker:
        breaker = self._breakers.get(name)
        if breaker is None:
            with self._lock:
                breaker = self._breakers.setdefault(name, CircuitBreaker(name))
        return breaker

    def __contains__(self, name: object) -> bool:
        return name in self._breakers

    def __iter__(self) -> Iterator[str]:
        return iter(self._breakers)

    def __len__(self) -> int:
        return len(self._breakers)

    def weights(self) -> dict[str, float]:
        return {name: b.weight for name, b in self._breakers.items()}


# ═══════════════════════════════════════════════════════════════════════════
# COLONY POLICY
# ═══════════════════════════════════════════════════════════════════════════


class PolicyAdjustments:
    """Colony-wide additive offset per task category.

    A missing entry is not an error: it is inserted as 0.0 and the caller
    carries on. The insert is guarded so concurrent first reads of the same
    key agree.
    """

    def __init__(self, offsets: Mapping[str, float] | None = None) -> None:
        self._offsets: dict[str, float] = {k: float(v) for k, v in (offsets or {}).items()}
        self._lock = threading.Lock()

    def get(self, task: str) -> float:
        try:
            return self._offsets[task]
        except KeyError:
            with self._lock:
                if task not in self._offsets:
                    logger.debug("no colony policy for %s, defaulting to 0", task)
                return self._offsets.setdefault(task, 0.0)

    def set(self, task: str, offset: float) -> None:
        with self._lock:
            self._offsets[task] = float(offset)

    def __contains__(self, task: object) -> bool:
        return task in self._offsets

    def as_dict(self) -> dict[str, float]:
        with self._lock:
            return dict(self._offsets)


# ═══════════════════════════════════════════════════════════════════════════
# SETTINGS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass
class FreeWillSettings:
    """Everything the scoring pipeline is configured with."""

    priority_levels: int = DEFAULT_PRIORITY_LEVELS
    default_value: float = DEFAULT_VALUE
    verbose: bool = False
    breakers: BreakerSet = field(default_factory=BreakerSet)
    policy: PolicyAdjustments = field(default_factory=PolicyAdjustments)
    version: str = "hardcoded"
    scale: PriorityScale = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.default_value <= 1.0:
            raise ValueError(f"default_value must be in [0.0, 1.0], got {self.default_value}")
        self.scale = PriorityScale(self.priority_levels)


def _settings_from_dict(data: Mapping[str, Any]) -> FreeWillSettings:
    return FreeWillSettings(
        priority_levels=int(data.get("priority_levels", DEFAULT_PRIORITY_LEVELS)),
        default_value=float(data.get("default_value", DEFAULT_VALUE)),
        verbose=bool(data.get("verbose", False)),
        breakers=BreakerSet(data.get("considerations", {})),
        policy=PolicyAdjustments(data.get("colony_policy", {})),
        version=str(data.get("version", "unknown")),
    )


def load_settings(settings_path: Path | None = None) -> FreeWillSettings:
    """Load settings from file or use defaults.

    Args:
        settings_path: Path to a settings JSON file. If None, uses defaults.

    Returns:
        FreeWillSettings instance. A fresh instance on every call, since
        breakers and policy offsets are mutated during scoring.
    """
    if settings_path is None or not settings_path.exists():
        return FreeWillSettings()

    try:
        with settings_path.open("r") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("settings document must be a JSON object")
        return _settings_from_dict(data)
    except Exception as err:
        logger.warning("could not load settings from %s, using defaults: %s", settings_path, err)
        return FreeWillSettings()
