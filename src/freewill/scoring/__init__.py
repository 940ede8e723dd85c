"""Task-category desirability scoring and priority quantization."""

from .considerations import EvaluationContext, consideration
from .dispatch import DEFAULT, DISPATCH_TABLE, considerations_for
from .pipeline import ScoringPipeline
from .quantizer import PriorityScale, quantize
from .result import (
    EvaluationStage,
    PriorityResult,
    WorkAssignmentStore,
    apply_priority,
    compare_priorities,
    sort_key,
)
from .settings import CircuitBreaker, FreeWillSettings, PolicyAdjustments, load_settings
from .signals import AgentSignals, Passion, RoomSignals, TaskCategory, Thought, WorldSignals
from .state import ScoreState

__all__ = [
    "ScoringPipeline",
    "ScoreState",
    "PriorityScale",
    "quantize",
    "PriorityResult",
    "EvaluationStage",
    "compare_priorities",
    "sort_key",
    "apply_priority",
    "WorkAssignmentStore",
    "EvaluationContext",
    "consideration",
    "considerations_for",
    "DISPATCH_TABLE",
    "DEFAULT",
    "FreeWillSettings",
    "CircuitBreaker",
    "PolicyAdjustments",
    "load_settings",
    "AgentSignals",
    "WorldSignals",
    "RoomSignals",
    "Thought",
    "TaskCategory",
    "Passion",
]
