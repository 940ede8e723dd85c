"""Score state - the accumulator threaded through one evaluation.

Every primitive returns a new ``ScoreState``; the pipeline folds
considerations over it, so a consideration that fails part way through
simply never hands back a changed state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .quantizer import DEFAULT_SCALE, OFF, PriorityScale

RESET_MARKER = "-- reset --"
ENABLED_LABEL = "Enabled"
DISABLED_LABEL = "Disabled"


def clamp01(x: float) -> float:
    """Clamp ``x`` into [0, 1]."""
    return min(1.0, max(0.0, x))


def format_percent(x: float) -> str:
    """Whole-percent rendering used in explanation entries."""
    return f"{x * 100:.0f}%"


@dataclass(frozen=True)
class ScoreState:
    """Value, override flags and explanation trail for one evaluation.

    Invariants:
    - ``value`` is always within [0, 1]
    - ``enabled`` and ``disabled`` are never both true
    - ``log`` only grows between resets
    """

    value: float = 0.0
    enabled: bool = False
    disabled: bool = False
    log: tuple[str, ...] = ()
    scale: PriorityScale = field(default=DEFAULT_SCALE, compare=False)
    verbose: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if self.enabled and self.disabled:
            raise ValueError("enabled and disabled cannot both be set")
        if not 0.0 <= self.value <= 1.0:
            object.__setattr__(self, "value", clamp01(self.value))

    @property
    def level(self) -> int:
        """Discrete level this state would quantize to right now."""
        return self.scale.quantize(self.value, enabled=self.enabled, disabled=self.disabled)

    def is_disabled(self) -> bool:
        return self.disabled

    def reset(self, x: float, reason: str) -> ScoreState:
        """Overwrite the value, restarting the explanation trail.

        In verbose mode the previous trail is kept and a reset marker is
        appended instead.
        """
        value = clamp01(x)
        entry = f"{format_percent(value)} ({reason})"
        if self.verbose and self.log:
            log = (*self.log, RESET_MARKER, entry)
        else:
            log = (entry,)
        return replace(self, value=value, log=log)

    def add(self, delta: float, reason: str) -> ScoreState:
        """Saturating additive adjustment; a no-op once disabled."""
        if self.disabled:
            return self
        new_value = clamp01(self.value + delta)
        change = new_value - self.value
        # exact comparison: both operands come out of clamp01
        if new_value > self.value:
            entry = f"+{format_percent(change)} ({reason})"
        elif new_value < self.value:
            entry = f"{format_percent(change)} ({reason})"
        elif self.verbose:
            entry = f"+{format_percent(change)} ({reason})"
        else:
            return self
        return replace(self, value=new_value, log=(*self.log, entry))

    def multiply(self, factor: float, reason: str) -> ScoreState:
        """Saturating multiplicative adjustment, logged as the equivalent addition."""
        if self.disabled:
            return self
        return self.add(clamp01(self.value * factor) - self.value, reason)

    def force_enable(self, reason: str) -> ScoreState:
        """Mark the task as "always do", clearing any disable.

        Only logged when it changes the outcome a reader would notice: in
        verbose mode, when lifting a disable, or when the task was off.
        """
        if self.enabled:
            return self
        log = self.log
        if self.verbose or self.disabled or self.level == OFF:
            log = (*log, f"{ENABLED_LABEL} ({reason})")
        return replace(self, enabled=True, disabled=False, log=log)

    def force_disable(self, reason: str) -> ScoreState:
        """Mark the task as "never do", clearing any enable."""
        if self.disabled:
            return self
        log = (*self.log, f"{DISABLED_LABEL} ({reason})")
        return replace(self, enabled=False, disabled=True, log=log)
