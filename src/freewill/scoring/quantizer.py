"""Quantizer - maps a continuous desirability score onto discrete priority levels.

Levels run 1..L with 1 the most urgent; 0 means "off". The bottom
``cutoff`` percent of the continuous range is the off band, and the rest is
split into L equal-width bands in reverse order, so a higher score gives a
lower (more urgent) level number.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Final

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY_LEVELS: Final[int] = 4
OFF: Final[int] = 0


@dataclass(frozen=True)
class PriorityScale:
    """Geometry of the host's discrete priority scale."""

    levels: int = DEFAULT_PRIORITY_LEVELS

    def __post_init__(self) -> None:
        if self.levels < 1:
            raise ValueError(f"levels must be >= 1, got {self.levels}")

    @property
    def cutoff(self) -> int:
        """Percentage at or below which a task is off (20 when L=4)."""
        return 100 // (self.levels + 1)

    @property
    def active_width(self) -> int:
        """Width of the percentage range that maps onto levels 1..L (80 when L=4)."""
        return 100 - self.cutoff

    @property
    def step_width(self) -> float:
        """Width of one level band in percent (20.0 when L=4)."""
        return self.active_width / self.levels

    @property
    def lowest(self) -> int:
        """Least urgent level that is still on."""
        return self.levels

    def quantize(self, value: float, enabled: bool = False, disabled: bool = False) -> int:
        """Convert a finalized score and its override flags into a level.

        Args:
            value: Continuous desirability (0-1)
            enabled: Sticky "always do" override
            disabled: Sticky "never do" override

        Returns:
            Level in 0..L, where 0 is off and 1 is most urgent
        """
        percent = min(100, max(0, round(value * 100)))
        if percent <= self.cutoff:
            return self.lowest if enabled else OFF
        if disabled:
            return OFF

        inverted = self.active_width - (percent - self.cutoff)
        level = math.floor(inverted / self.step_width) + 1
        if level < 1 or level > self.levels:
            logger.error(
                "calculated an invalid priority level of %d for value %.4f", level, value
            )
            level = min(self.levels, max(1, level))
        return level

    def value_for_level(self, level: int) -> float:
        """Continuous value that a manually assigned level stands for.

        This is the inverse informational mapping: level 1 is 1.0 and each
        further level is one band lower. Level 0 (off) maps to 0.0.
        """
        if level < OFF or level > self.levels:
            raise ValueError(f"level must be in [0, {self.levels}], got {level}")
        if level == OFF:
            return 0.0
        return (100 - self.step_width * (level - 1)) / 100

    def band(self, level: int) -> tuple[float, float]:
        """Range of continuous values (low, high] that quantize to ``level``.

        Flags are ignored. The off band is returned as [0, cutoff].
        """
        if level == OFF:
            return (0.0, self.cutoff / 100)
        if level < 1 or level > self.levels:
            raise ValueError(f"level must be in [0, {self.levels}], got {level}")
        high = 100 - self.step_width * (level - 1)
        low = 100 - self.step_width * level
        return (low / 100, high / 100)


DEFAULT_SCALE: Final[PriorityScale] = PriorityScale()


def quantize(
    value: float,
    enabled: bool = False,
    disabled: bool = False,
    scale: PriorityScale = DEFAULT_SCALE,
) -> int:
    """Module-level shortcut for :meth:`PriorityScale.quantize`."""
    return scale.quantize(value, enabled=enabled, disabled=disabled)
