"""Read-only agent and world signals consumed by considerations.

These are snapshots produced by the host's aggregators. The scoring core
only ever reads them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from types import MappingProxyType
from typing import Final


class TaskCategory(StrEnum):
    """Task categories with dedicated handling. Any other name is scored with the default list."""

    FIREFIGHTER = "Firefighter"
    PATIENT = "Patient"
    DOCTOR = "Doctor"
    PATIENT_BED_REST = "PatientBedRest"
    BASIC_WORKER = "BasicWorker"
    WARDEN = "Warden"
    HANDLING = "Handling"
    COOKING = "Cooking"
    HUNTING = "Hunting"
    CONSTRUCTION = "Construction"
    GROWING = "Growing"
    MINING = "Mining"
    PLANT_CUTTING = "PlantCutting"
    SMITHING = "Smithing"
    TAILORING = "Tailoring"
    ART = "Art"
    CRAFTING = "Crafting"
    HAULING = "Hauling"
    CLEANING = "Cleaning"
    RESEARCH = "Research"
    HAULING_URGENT = "HaulingUrgent"


HAULING_TASKS: Final[frozenset[str]] = frozenset({"Hauling", "HaulingUrgent"})
CARE_TASKS: Final[frozenset[str]] = frozenset({"Patient", "PatientBedRest"})
CRAFTING_TASKS: Final[frozenset[str]] = frozenset({"Smithing", "Tailoring", "Art", "Crafting"})


class Passion(IntEnum):
    """Preference tiers. Values above CRITICAL come from the interests framework."""

    NONE = 0
    MINOR = 1
    MAJOR = 2
    APATHY = 3
    NATURAL = 4
    CRITICAL = 5


# skill average used when a task category has no relevant skills
DEFAULT_SKILL_AVERAGE: Final[float] = 3.0


def _frozen(mapping: Mapping | None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Thought:
    """A mood thought currently affecting an agent."""

    name: str
    stage: str = ""
    mood_effect: float = 0.0


@dataclass(frozen=True)
class RoomSignals:
    """The room an agent is standing in."""

    touches_map_edge: bool = False
    is_huge: bool = False
    has_meal_source: bool = False
    food_poison_chance: float = 0.0
    owners: frozenset[str] = frozenset()


@dataclass(frozen=True)
class AgentSignals:
    """Everything the considerations may ask about one agent."""

    agent_id: str
    name: str = ""
    free_will: bool = True
    manual_priorities: Mapping[str, int] = field(default_factory=dict)
    disabled_tasks: frozenset[str] = frozenset()
    downed: bool = False
    idle: bool = False
    current_task: str | None = None
    skills: Mapping[str, float] = field(default_factory=dict)
    passions: Mapping[str, int] = field(default_factory=dict)
    mood: float = 0.5
    thoughts: tuple[Thought, ...] = ()
    inspiration_tasks: frozenset[str] | None = None
    move_speed: float = 4.6
    carrying_capacity: float = 75.0
    health: float = 1.0
    needs_tending: bool = False
    self_tend: bool = False
    immunizable_not_immune: bool = False
    has_hunting_weapon: bool = True
    traits: frozenset[str] = frozenset()
    in_home_area: bool = True
    room: RoomSignals | None = None
    expectation: str = "Moderate"
    beauty: str = "Neutral"
    tree_prune_due: bool | None = None
    allergic_reaction: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "manual_priorities", _frozen(self.manual_priorities))
        object.__setattr__(self, "skills", _frozen(self.skills))
        object.__setattr__(self, "passions", _frozen(self.passions))

    @property
    def label(self) -> str:
        return self.name or self.agent_id

    def manual_priority(self, task: str) -> int:
        return self.manual_priorities.get(task, 0)

    def thought(self, name: str) -> Thought | None:
        """First thought with the given name, if any."""
        for t in self.thoughts:
            if t.name == name:
                return t
        return None

    def average_skill(self, relevant: tuple[str, ...]) -> float:
        if not relevant:
            return DEFAULT_SKILL_AVERAGE
        return sum(self.skills.get(s, 0.0) for s in relevant) / len(relevant)


@dataclass(frozen=True)
class WorldSignals:
    """Colony-wide aggregates for the map the agent lives on."""

    num_agents: int = 1
    percent_downed: float = 0.0
    percent_needing_treatment: float = 0.0
    pets_needing_treatment: int = 0
    total_food: float = 100.0
    home_fire: bool = False
    map_fires: int = 0
    refuel_needed: bool = False
    refuel_needed_now: bool = False
    things_deteriorating: bool = False
    plants_blighted: bool = False
    need_warm_clothes: bool = False
    colonist_left_unburied: bool = False
    active_workers: Mapping[str, frozenset[str]] = field(default_factory=dict)
    relevant_skills: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    task_descriptions: Mapping[str, str] = field(default_factory=dict)
    interest_labels: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "active_workers", _frozen(self.active_workers))
        object.__setattr__(self, "relevant_skills", _frozen(self.relevant_skills))
        object.__setattr__(self, "task_descriptions", _frozen(self.task_descriptions))

    def skills_for(self, task: str) -> tuple[str, ...]:
        return tuple(self.relevant_skills.get(task, ()))

    def workers_for(self, task: str) -> frozenset[str]:
        return frozenset(self.active_workers.get(task, ()))

    def describe(self, task: str) -> str:
        return self.task_descriptions.get(task, task)

    @property
    def has_interests_framework(self) -> bool:
        return self.interest_labels is not None
