"""Finalized evaluation results, their ordering, and applying them to the host."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from .quantizer import OFF
from .state import ScoreState

TOOLTIP_SEPARATOR = "-" * 30


class EvaluationStage(StrEnum):
    """Pipeline stages an evaluation moves through."""

    GATED = "gated"
    INITIALIZED = "initialized"
    EVALUATING = "evaluating"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class PriorityResult:
    """Read-only outcome of scoring one task category for one agent.

    Results order by ``value`` alone through ``<``, ``<=``, ``>`` and ``>=``;
    ties are left to the caller's stable sort. ``==`` compares every field.
    """

    agent_id: str
    task: str
    value: float
    enabled: bool
    disabled: bool
    level: int
    log: tuple[str, ...]
    autonomous: bool = True
    stage: EvaluationStage = EvaluationStage.FINALIZED

    @classmethod
    def from_state(
        cls, agent_id: str, task: str, state: ScoreState, autonomous: bool = True
    ) -> PriorityResult:
        return cls(
            agent_id=agent_id,
            task=task,
            value=state.value,
            enabled=state.enabled,
            disabled=state.disabled,
            level=state.level,
            log=state.log,
            autonomous=autonomous,
        )

    def __lt__(self, other: PriorityResult) -> bool:
        if not isinstance(other, PriorityResult):
            return NotImplemented
        return self.value < other.value

    def __gt__(self, other: PriorityResult) -> bool:
        if not isinstance(other, PriorityResult):
            return NotImplemented
        return self.value > other.value

    def __le__(self, other: PriorityResult) -> bool:
        if not isinstance(other, PriorityResult):
            return NotImplemented
        return self.value <= other.value

    def __ge__(self, other: PriorityResult) -> bool:
        if not isinstance(other, PriorityResult):
            return NotImplemented
        return self.value >= other.value

    @property
    def is_off(self) -> bool:
        return self.level == OFF

    def tooltip(self, description: str = "") -> str:
        """Explanation text for display: description, level, then the trail."""
        lines = [description or self.task]
        if not self.disabled:
            lines.append(f"Priority {self.level}")
            lines.append(TOOLTIP_SEPARATOR)
        lines.extend(self.log)
        return "\n".join(lines)


def compare_priorities(a: PriorityResult | None, b: PriorityResult | None) -> int:
    """Three-way comparison by value. ``None`` sorts below any result."""
    if a is None and b is None:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1
    if a.value < b.value:
        return -1
    if a.value > b.value:
        return 1
    return 0


def sort_key(result: PriorityResult) -> float:
    return result.value


class WorkAssignmentStore(Protocol):
    """The host's per-agent task-assignment store."""

    use_work_priorities: bool

    def set_priority(self, agent_id: str, task: str, level: int) -> None: ...


def apply_priority(result: PriorityResult, store: WorkAssignmentStore) -> None:
    """Write the result's level into the store, switching on manual priorities if needed.

    Applying the same result twice leaves the store unchanged.
    """
    if not store.use_work_priorities:
        store.use_work_priorities = True
    store.set_priority(result.agent_id, result.task, result.level)
