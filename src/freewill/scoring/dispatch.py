"""Task-category dispatch table.

Maps each task category to the ordered considerations that score it. Order
is part of the contract:
- resets (category defaults, skills, beauty expectations) run first and
  establish the base value
- additive and multiplicative rules build on that base
- ``completing_task`` forces the task on and boosts it before the treatment
  caps can pull the value back down
- treatment, downed-colonist and policy rules run last so their overrides
  win

Categories without an entry use ``DEFAULT``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final

from . import considerations as c
from .considerations import Consideration
from .signals import TaskCategory as T

# Checked before any dispatch list; a disable here ends the evaluation.
PRECONDITIONS: Final[tuple[Consideration, ...]] = (c.consider_permanently_unavailable,)

_SHARED = (
    c.consider_carrying_capacity,
    c.consider_anyone_else_doing,
    c.consider_passion,
    c.consider_thoughts,
    c.consider_inspiration,
    c.consider_refueling,
    c.consider_injured_pets,
    c.consider_low_food,
    c.consider_warm_clothes,
    c.consider_colonist_left_unburied,
)

_CONDITION = (
    c.consider_health,
    c.consider_ate_raw_food,
    c.consider_things_deteriorating,
    c.consider_bored,
)

_TREATMENT_AND_POLICY = (
    c.consider_colonists_needing_treatment,
    c.consider_downed_colonists,
    c.consider_colony_policy,
)

_TAIL = (
    c.consider_fire,
    c.consider_building_immunity,
    c.consider_completing_task,
    *_TREATMENT_AND_POLICY,
)

_CARE_TAIL = (
    c.consider_building_immunity,
    c.consider_completing_task,
    c.consider_colonists_needing_treatment,
)

SKILLED: Final[tuple[Consideration, ...]] = (
    c.consider_relevant_skills,
    *_SHARED,
    *_CONDITION,
    *_TAIL,
)

DEFAULT: Final[tuple[Consideration, ...]] = (
    c.consider_relevant_skills,
    c.consider_movement_speed,
    *_SHARED,
    *_CONDITION,
    *_TAIL,
)

FIREFIGHTER: Final[tuple[Consideration, ...]] = (
    c.consider_firefighting_default,
    c.consider_agent_downed,
    c.consider_fire,
    c.consider_building_immunity,
    c.consider_completing_task,
    *_TREATMENT_AND_POLICY,
)

PATIENT: Final[tuple[Consideration, ...]] = (
    c.consider_patient_default,
    c.consider_health,
    *_CARE_TAIL,
    c.consider_downed_colonists,
    c.consider_colony_policy,
)

PATIENT_BED_REST: Final[tuple[Consideration, ...]] = (
    c.consider_bed_rest_default,
    c.consider_health,
    *_CARE_TAIL,
    c.consider_bored,
    c.consider_downed_colonists,
    c.consider_colony_policy,
)

BASIC_WORKER: Final[tuple[Consideration, ...]] = (
    c.consider_basic_work_default,
    c.consider_thoughts,
    c.consider_warm_clothes,
    c.consider_health,
    c.consider_bored,
    c.consider_agent_downed,
    c.consider_building_immunity,
    c.consider_completing_task,
    *_TREATMENT_AND_POLICY,
)

COOKING: Final[tuple[Consideration, ...]] = (
    c.consider_relevant_skills,
    *_SHARED,
    c.consider_food_poisoning,
    *_CONDITION,
    *_TAIL,
)

HUNTING: Final[tuple[Consideration, ...]] = (
    c.consider_relevant_skills,
    c.consider_movement_speed,
    *_SHARED,
    *_CONDITION,
    c.consider_hunting_weapon,
    c.consider_brawlers_not_hunting,
    *_TAIL,
)

PLANT_CUTTING: Final[tuple[Consideration, ...]] = (
    c.consider_relevant_skills,
    c.consider_anyone_else_doing,
    c.consider_passion,
    c.consider_thoughts,
    c.consider_inspiration,
    c.consider_tree_pruning,
    c.consider_low_food,
    c.consider_health,
    c.consider_plants_blighted,
    c.consider_bored,
    *_TAIL,
)

HAULING: Final[tuple[Consideration, ...]] = (
    c.consider_beauty_expectations,
    c.consider_movement_speed,
    *_SHARED,
    *_CONDITION,
    *_TAIL,
)

CLEANING: Final[tuple[Consideration, ...]] = (
    c.consider_beauty_expectations,
    c.consider_anyone_else_doing,
    c.consider_thoughts,
    c.consider_own_room,
    c.consider_food_poisoning,
    c.consider_health,
    c.consider_bored,
    c.consider_not_in_home_area,
    c.consider_building_immunity,
    c.consider_completing_task,
    *_TREATMENT_AND_POLICY,
)

# no completing_task: the current task never forces research on
RESEARCH: Final[tuple[Consideration, ...]] = (
    c.consider_relevant_skills,
    *_SHARED[1:],
    *_CONDITION,
    c.consider_fire,
    c.consider_building_immunity,
    *_TREATMENT_AND_POLICY,
)

DISPATCH_TABLE: Final = MappingProxyType(
    {
        T.FIREFIGHTER.value: FIREFIGHTER,
        T.PATIENT.value: PATIENT,
        T.DOCTOR.value: SKILLED,
        T.PATIENT_BED_REST.value: PATIENT_BED_REST,
        T.BASIC_WORKER.value: BASIC_WORKER,
        T.WARDEN.value: SKILLED,
        T.HANDLING.value: DEFAULT,
        T.COOKING.value: COOKING,
        T.HUNTING.value: HUNTING,
        T.CONSTRUCTION.value: SKILLED,
        T.GROWING.value: SKILLED,
        T.MINING.value: SKILLED,
        T.PLANT_CUTTING.value: PLANT_CUTTING,
        T.SMITHING.value: SKILLED,
        T.TAILORING.value: SKILLED,
        T.ART.value: SKILLED,
        T.CRAFTING.value: SKILLED,
        T.HAULING.value: HAULING,
        T.CLEANING.value: CLEANING,
        T.RESEARCH.value: RESEARCH,
        T.HAULING_URGENT.value: HAULING,
    }
)


def considerations_for(task: str) -> tuple[Consideration, ...]:
    """Ordered considerations for a task category, falling back to ``DEFAULT``."""
    return DISPATCH_TABLE.get(task, DEFAULT)
