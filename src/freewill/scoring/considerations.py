#!/usr/bin/env python3
"""Considerations - the individual rules that nudge a task's desirability.

Each consideration takes the current ``ScoreState`` and an
``EvaluationContext`` and returns the next state. Considerations that do not
apply return the state they were given.

Families:
- base value (reset): category defaults, skills, beauty expectations
- preference/mood: passions, interests, hunger, inspiration
- urgency: fire, food, refueling, injured or downed colonists, decay
- overrides: force_disable on hard preconditions, force_enable on demand
- policy: colony-wide offset per task category
- caps: crafting and general caps while others need treatment

Considerations backed by a circuit breaker are declared with
``@consideration(breaker=...)``. A fault in one of those trips the breaker
and hands back the input state. Faults in any other consideration propagate
to the pipeline, which skips that rule.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

from .settings import FreeWillSettings
from .signals import (
    CARE_TASKS,
    CRAFTING_TASKS,
    HAULING_TASKS,
    AgentSignals,
    Passion,
    TaskCategory,
    WorldSignals,
)
from .state import ScoreState, clamp01

logger = logging.getLogger(__name__)

T = TaskCategory


@dataclass(frozen=True)
class EvaluationContext:
    """Inputs for one (agent, task category) evaluation."""

    agent: AgentSignals
    world: WorldSignals
    task: str
    settings: FreeWillSettings

    @property
    def is_hauling(self) -> bool:
        return self.task in HAULING_TASKS

    @property
    def is_care(self) -> bool:
        return self.task in CARE_TASKS


Consideration = Callable[[ScoreState, EvaluationContext], ScoreState]


def consideration(
    func: Callable[..., ScoreState] | None = None, *, breaker: str | None = None
) -> Consideration | Callable[[Callable[..., ScoreState]], Consideration]:
    """Register a function as a consideration, optionally behind a circuit breaker.

    A breaker-gated function receives the breaker's weight as a third
    argument. It is skipped while the breaker is tripped, and a fault inside
    it trips the breaker.
    """

    def wrap(fn: Callable[..., ScoreState]) -> Consideration:
        if breaker is None:
            fn.breaker = None  # type: ignore[attr-defined]
            return fn

        @functools.wraps(fn)
        def guarded(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
            switch = ctx.settings.breakers[breaker]
            if not switch.active:
                return state
            try:
                return fn(state, ctx, switch.weight)
            except Exception:
                logger.exception(
                    "%s could not run %s to adjust %s", ctx.agent.label, fn.__name__, ctx.task
                )
                switch.trip()
                return state

        guarded.breaker = breaker  # type: ignore[attr-defined]
        return guarded

    if func is not None:
        return wrap(func)
    return wrap


def consideration_name(fn: Consideration) -> str:
    """Display name for a consideration (``consider_fire`` -> ``fire``)."""
    return fn.__name__.removeprefix("consider_")


# ═══════════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════

MAX_SKILL: Final[float] = 20.0
SKILL_BUCKET_VALUES: Final[tuple[float, ...]] = (0.1, 0.3, 0.5, 0.7, 0.9)

PASSION_WEIGHTS: Final[dict[int, tuple[float, str]]] = {
    Passion.MAJOR: (0.5, "major passion for"),
    Passion.MINOR: (0.25, "minor passion for"),
    Passion.APATHY: (0.15, "apathy passion for"),
    Passion.NATURAL: (0.4, "natural passion for"),
    Passion.CRITICAL: (0.75, "critical passion for"),
}

BASE_CARRYING_CAPACITY: Final[float] = 75.0
FOOD_PER_AGENT: Final[float] = 4.0
CURRENT_TASK_BOOST: Final[float] = 1.8
TREATMENT_CAP: Final[float] = 0.6
CRAFTING_TREATMENT_CAP: Final[float] = 0.3
ATE_RAW_FOOD_FLOOR: Final[float] = 0.6
BEAUTY_FALLBACK: Final[float] = 0.3

# expectation tier -> beauty category -> base desirability for cleaning/hauling
EXPECTATION_GRID: Final[dict[str, dict[str, float]]] = {
    "ExtremelyLow": {"Hideous": 0.3, "VeryUgly": 0.2, "Ugly": 0.1, "Neutral": 0.0,
                     "Pretty": 0.0, "VeryPretty": 0.0, "Beautiful": 0.0},
    "VeryLow": {"Hideous": 0.5, "VeryUgly": 0.3, "Ugly": 0.2, "Neutral": 0.1,
                "Pretty": 0.0, "VeryPretty": 0.0, "Beautiful": 0.0},
    "Low": {"Hideous": 0.7, "VeryUgly": 0.5, "Ugly": 0.3, "Neutral": 0.2,
            "Pretty": 0.1, "VeryPretty": 0.0, "Beautiful": 0.0},
    "Moderate": {"Hideous": 0.8, "VeryUgly": 0.7, "Ugly": 0.5, "Neutral": 0.3,
                 "Pretty": 0.2, "VeryPretty": 0.1, "Beautiful": 0.0},
    "High": {"Hideous": 0.9, "VeryUgly": 0.8, "Ugly": 0.7, "Neutral": 0.5,
             "Pretty": 0.3, "VeryPretty": 0.2, "Beautiful": 0.1},
    "SkyHigh": {"Hideous": 1.0, "VeryUgly": 0.9, "Ugly": 0.8, "Neutral": 0.7,
                "Pretty": 0.5, "VeryPretty": 0.3, "Beautiful": 0.2},
    "Noble": {"Hideous": 1.0, "VeryUgly": 1.0, "Ugly": 0.9, "Neutral": 0.8,
              "Pretty": 0.7, "VeryPretty": 0.5, "Beautiful": 0.3},
    "Royal": {"Hideous": 1.0, "VeryUgly": 1.0, "Ugly": 1.0, "Neutral": 0.9,
              "Pretty": 0.8, "VeryPretty": 0.7, "Beautiful": 0.5},
}

# upper bound (exclusive) of each band -> reason
EXPECTATION_REASONS: Final[tuple[tuple[float, str], ...]] = (
    (0.2, "expectations exceeded"),
    (0.4, "expectations met"),
    (0.6, "expectations unmet"),
    (0.8, "expectations let down"),
)

# compulsion thought -> stage label -> bonus before dividing by skill count
COMPULSION_STAGES: Final[dict[str, dict[str, float]]] = {
    "CompulsionUnmet": {
        "compulsive itch": 0.2,
        "compulsive need": 0.4,
        "compulsive obsession": 0.6,
    },
    "NeuroticCompulsionUnmet": {
        "compulsive itch": 0.3,
        "compulsive demand": 0.6,
        "compulsive withdrawal": 0.9,
    },
    "VeryNeuroticCompulsionUnmet": {
        "compulsive yearning": 0.4,
        "compulsive tantrum": 0.8,
        "compulsive hysteria": 1.2,
    },
}

ALLERGIC_STAGES: Final[dict[str, float]] = {
    "initial": -0.2,
    "itching": -0.5,
    "sneezing": -0.8,
    "swelling": -1.1,
}

# interest labels that carry no scoring effect
INERT_INTERESTS: Final[frozenset[str]] = frozenset(
    {"DInspiring", "DStagnant", "DForgetful", "DVocalHatred", "DNaturalGenius"}
)


# ═══════════════════════════════════════════════════════════════════════════
# OVERRIDES AND CATEGORY DEFAULTS
# ═══════════════════════════════════════════════════════════════════════════


@consideration
def consider_permanently_unavailable(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Disable task categories this agent can never perform."""
    if ctx.task in ctx.agent.disabled_tasks:
        return state.force_disable("permanently unavailable")
    return state


@consideration
def consider_firefighting_default(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    return state.reset(0.0, "firefighting default").force_enable("firefighting default")


@consideration
def consider_patient_default(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    return state.reset(0.0, "patient default").force_enable("patient default")


@consideration
def consider_bed_rest_default(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    return state.reset(0.0, "bed rest default").force_enable("bed rest default")


@consideration
def consider_basic_work_default(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    return state.reset(0.5, "basic work default")


@consideration
def consider_agent_downed(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    if ctx.agent.downed:
        return state.force_disable("agent downed")
    return state


@consideration
def consider_not_in_home_area(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    if not ctx.agent.in_home_area:
        return state.force_disable("not in home area")
    return state


@consideration
def consider_bored(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Idle agents take up anything they are allowed to do."""
    if ctx.agent.idle:
        return state.force_enable("bored")
    return state


@consideration
def consider_anyone_else_doing(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Force the task on when no other able agent has it active.

    ``active_workers`` is expected to list only agents that are awake, not
    downed and hold a non-zero priority for the task.
    """
    others = ctx.world.workers_for(ctx.task) - {ctx.agent.agent_id}
    if others:
        return state
    return state.force_enable("no one else is doing this")


@consideration
def consider_completing_task(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Agents keep at, and prefer, the work they are already doing."""
    if ctx.agent.current_task != ctx.task:
        return state
    return state.force_enable("currently doing").multiply(CURRENT_TASK_BOOST, "currently doing")


@consideration(breaker="hunting_weapon")
def consider_hunting_weapon(state: ScoreState, ctx: EvaluationContext, weight: float) -> ScoreState:
    if ctx.task != T.HUNTING:
        return state
    if not ctx.agent.has_hunting_weapon:
        return state.force_disable("no hunting weapon")
    return state


@consideration(breaker="brawlers_not_hunting")
def consider_brawlers_not_hunting(
    state: ScoreState, ctx: EvaluationContext, weight: float
) -> ScoreState:
    if ctx.task != T.HUNTING:
        return state
    if "Brawler" in ctx.agent.traits:
        return state.force_disable("brawler")
    return state


# ═══════════════════════════════════════════════════════════════════════════
# BASE VALUE
# ═══════════════════════════════════════════════════════════════════════════


def skill_cutoffs(num_agents: int) -> tuple[float, float, float, float]:
    """Bad/good/great/excellent cutoffs on the 0-20 skill scale.

    The bad cutoff is ``min(3, num_agents)``; each later cutoff closes half
    the remaining distance to 20.
    """
    bad = min(3.0, float(num_agents))
    good = bad + (MAX_SKILL - bad) / 2
    great = good + (MAX_SKILL - good) / 2
    excellent = great + (MAX_SKILL - great) / 2
    return (bad, good, great, excellent)


@consideration
def consider_relevant_skills(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Establish the base value from the agent's average relevant skill."""
    avg = ctx.agent.average_skill(ctx.world.skills_for(ctx.task))
    reason = f"skill level {avg:.0f}"
    bucket = sum(1 for cutoff in skill_cutoffs(ctx.world.num_agents) if avg >= cutoff)
    return state.reset(SKILL_BUCKET_VALUES[bucket], reason)


@consideration
def consider_beauty_expectations(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Base value for cleaning and hauling from how let down the agent is by its surroundings."""
    if ctx.task not in (T.CLEANING, *HAULING_TASKS):
        return state
    try:
        e = EXPECTATION_GRID[ctx.agent.expectation][ctx.agent.beauty]
    except (KeyError, TypeError):
        return state.reset(BEAUTY_FALLBACK, "beauty default")
    for upper, reason in EXPECTATION_REASONS:
        if e < upper:
            return state.reset(e, reason)
    return state.reset(e, "expectations ignored")


# ═══════════════════════════════════════════════════════════════════════════
# PREFERENCE AND MOOD
# ═══════════════════════════════════════════════════════════════════════════


@consideration
def consider_passion(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Mood-scaled bonus for every relevant skill the agent is passionate about."""
    skills = ctx.world.skills_for(ctx.task)
    count = len(skills)
    for skill in skills:
        tier = ctx.agent.passions.get(skill, Passion.NONE)
        if tier == Passion.NONE:
            continue
        if tier in PASSION_WEIGHTS:
            weight, label = PASSION_WEIGHTS[tier]
            state = state.add(ctx.agent.mood * weight / count, f"{label} {skill}")
            continue
        state = consider_interest(state, ctx, skill, tier, count)
    return state


def consider_interest(
    state: ScoreState, ctx: EvaluationContext, skill: str, tier: int, skill_count: int
) -> ScoreState:
    """Adjust for an interests-framework tier on one relevant skill."""
    labels = ctx.world.interest_labels
    if labels is None:
        return state
    try:
        if tier < 0:
            raise IndexError(tier)
        interest = labels[tier]
    except (IndexError, TypeError):
        logger.info("could not find interest for index %s", tier)
        return state

    mood = ctx.agent.mood
    if interest == "DMinorAversion":
        return state.add((1.0 - mood) * -0.25 / skill_count, f"minor aversion to {skill}")
    if interest == "DMajorAversion":
        return state.add((1.0 - mood) * -0.5 / skill_count, f"major aversion to {skill}")
    if interest == "DCompulsion":
        return _consider_compulsion(state, ctx, skill, skill_count)
    if interest == "DInvigorating":
        return state.add(0.1 / skill_count, f"invigorating {skill}")
    if interest == "DBored":
        if ctx.agent.idle:
            return state
        return state.force_disable(f"bored by {skill}")
    if interest == "DAllergic":
        reaction = ctx.agent.allergic_reaction
        if reaction is None:
            return state.add(0.1 / skill_count, f"no reaction to {skill}")
        if reaction == "anaphylaxis":
            return state.force_disable(f"anaphylaxis from {skill}")
        if reaction in ALLERGIC_STAGES:
            return state.add(ALLERGIC_STAGES[reaction] / skill_count, f"{reaction} from {skill}")
        return state.add(0.1 / skill_count, f"no reaction to {skill}")
    if interest in INERT_INTERESTS:
        return state
    logger.info("did not recognize interest: %s", interest)
    return state


def _consider_compulsion(
    state: ScoreState, ctx: EvaluationContext, skill: str, skill_count: int
) -> ScoreState:
    for thought in ctx.agent.thoughts:
        stages = COMPULSION_STAGES.get(thought.name)
        if stages is None:
            continue
        bonus = stages.get(thought.stage)
        if bonus is None:
            logger.info("could not read compulsion label %r", thought.stage)
            return state
        return state.add(bonus / skill_count, f"{thought.stage} for {skill}")
    return state


@consideration
def consider_thoughts(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Hunger pushes agents towards food work and away from everything else."""
    hunger = ctx.agent.thought("NeedFood")
    if hunger is None:
        return state
    if ctx.task == T.COOKING:
        return state.add(-0.01 * hunger.mood_effect, "hunger level")
    if ctx.task in (T.HUNTING, T.PLANT_CUTTING):
        return state.add(-0.005 * hunger.mood_effect, "hunger level")
    return state.add(0.005 * hunger.mood_effect, "hunger level")


@consideration
def consider_inspiration(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    tasks = ctx.agent.inspiration_tasks
    if tasks is not None and ctx.task in tasks:
        return state.add(0.4, "inspired")
    return state


@consideration
def consider_ate_raw_food(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    if ctx.task != T.COOKING:
        return state
    if ctx.agent.thought("AteRawFood") is not None and state.value < ATE_RAW_FOOD_FLOOR:
        return state.reset(ATE_RAW_FOOD_FLOOR, "ate raw food")
    return state


@consideration(breaker="own_room")
def consider_own_room(state: ScoreState, ctx: EvaluationContext, weight: float) -> ScoreState:
    if ctx.task != T.CLEANING:
        return state
    room = ctx.agent.room
    if room is None or ctx.agent.agent_id not in room.owners:
        return state
    return state.multiply(weight * 2.0, "own room")


# ═══════════════════════════════════════════════════════════════════════════
# AGENT CONDITION
# ═══════════════════════════════════════════════════════════════════════════


@consideration
def consider_health(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Sick agents favour care and scale everything else by their health."""
    health = ctx.agent.health
    if ctx.is_care:
        return state.add(1 - health**7, "health")
    return state.multiply(health, "health")


@consideration(breaker="movement_speed")
def consider_movement_speed(state: ScoreState, ctx: EvaluationContext, weight: float) -> ScoreState:
    return state.multiply(weight * 0.25 * ctx.agent.move_speed, "movement speed")


@consideration
def consider_carrying_capacity(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    if not ctx.is_hauling:
        return state
    capacity = ctx.agent.carrying_capacity
    if capacity >= BASE_CARRYING_CAPACITY:
        return state
    return state.multiply(capacity / BASE_CARRYING_CAPACITY, "carrying capacity")


@consideration
def consider_building_immunity(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Agents fighting off a disease should rest rather than work."""
    try:
        if not ctx.agent.immunizable_not_immune:
            return state
        if ctx.task == T.PATIENT_BED_REST:
            return state.add(0.4, "building immunity")
        if ctx.task == T.PATIENT:
            return state
        return state.add(-0.2, "building immunity")
    except Exception:
        logger.info("could not consider %s building immunity", ctx.agent.label)
        return state


# ═══════════════════════════════════════════════════════════════════════════
# URGENCY
# ═══════════════════════════════════════════════════════════════════════════


@consideration
def consider_fire(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """A fire in the home area makes firefighting everyone's top priority."""
    world = ctx.world
    if world.home_fire:
        if ctx.task != T.FIREFIGHTER:
            return state.add(-0.2, "fire in home area")
        return state.reset(1.0, "fire in home area")
    if world.map_fires > 0 and ctx.task == T.FIREFIGHTER:
        return state.add(clamp01(world.map_fires * 0.01), "fire on map")
    return state


@consideration
def consider_refueling(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    if not ctx.is_hauling:
        return state
    if ctx.world.refuel_needed_now:
        return state.add(0.25, "refueling")
    if ctx.world.refuel_needed:
        return state.add(0.10, "refueling")
    return state


@consideration
def consider_injured_pets(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    if ctx.task != T.DOCTOR:
        return state
    n = ctx.world.num_agents
    if n == 0:
        return state
    return state.add(clamp01(ctx.world.pets_needing_treatment / n) * 0.5, "pets injured")


@consideration
def consider_low_food(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Food below four meals per agent boosts the food chain."""
    world = ctx.world
    if world.total_food >= FOOD_PER_AGENT * world.num_agents:
        return state
    if ctx.task == T.COOKING:
        return state.add(0.4, "low food")
    if ctx.task in (T.HUNTING, T.PLANT_CUTTING):
        return state.add(0.2, "low food")
    if ctx.is_hauling and world.things_deteriorating:
        return state.add(0.15, "low food")
    return state


@consideration
def consider_warm_clothes(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    if ctx.task == T.TAILORING and ctx.world.need_warm_clothes:
        return state.add(0.2, "need warm clothes")
    return state


@consideration
def consider_colonist_left_unburied(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    if ctx.world.colonist_left_unburied and ctx.is_hauling:
        return state.add(0.4, "colonist left unburied")
    return state


@consideration
def consider_things_deteriorating(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    if ctx.is_hauling and ctx.world.things_deteriorating:
        return state.add(0.2, "things deteriorating")
    return state


@consideration(breaker="food_poisoning")
def consider_food_poisoning(state: ScoreState, ctx: EvaluationContext, weight: float) -> ScoreState:
    """A filthy room with a meal source wants cleaning, and is a bad place to cook."""
    if ctx.task not in (T.CLEANING, T.COOKING):
        return state
    room = ctx.agent.room
    if room is None or room.touches_map_edge or room.is_huge:
        return state
    if not room.has_meal_source:
        return state
    adjustment = weight * 20.0 * room.food_poison_chance
    if ctx.task == T.CLEANING:
        return state.add(adjustment, "filthy cooking area")
    return state.add(-adjustment, "filthy cooking area")


@consideration(breaker="plants_blighted")
def consider_plants_blighted(state: ScoreState, ctx: EvaluationContext, weight: float) -> ScoreState:
    if ctx.world.plants_blighted:
        return state.add(0.4 * weight, "blight")
    return state


@consideration(breaker="tree_pruning")
def consider_tree_pruning(state: ScoreState, ctx: EvaluationContext, weight: float) -> ScoreState:
    if ctx.task != T.PLANT_CUTTING:
        return state
    if not ctx.agent.tree_prune_due:
        return state
    return state.multiply(2.0 * weight, "prune connected tree")


# ═══════════════════════════════════════════════════════════════════════════
# TREATMENT AND DOWNED COLONISTS
# ═══════════════════════════════════════════════════════════════════════════


@consideration
def consider_colonists_needing_treatment(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """React to anyone in the colony needing medical attention.

    When this agent is the one needing it, care becomes mandatory and other
    work stops. When someone else needs it, doctoring rises, research stops
    and every other task is capped so the doctors are not starved of time.
    """
    if ctx.world.percent_needing_treatment <= 0.0:
        return state
    if ctx.agent.needs_tending:
        return _this_agent_needs_treatment(state, ctx)
    return _another_agent_needs_treatment(state, ctx)


def _this_agent_needs_treatment(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    if ctx.is_care:
        return state.force_enable("needs treatment").reset(1.0, "needs treatment")
    if ctx.task == T.DOCTOR:
        if ctx.agent.self_tend:
            reason = "needs treatment, can self tend"
            return state.force_enable(reason).reset(1.0, reason)
        return state
    return state.force_disable("needs treatment")


def _another_agent_needs_treatment(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    reason = "others need treatment"
    if ctx.task in (T.FIREFIGHTER, T.PATIENT_BED_REST):
        return state
    if ctx.task == T.DOCTOR:
        return state.add(ctx.world.percent_needing_treatment, reason)
    if ctx.task == T.RESEARCH:
        return state.force_disable(reason)
    cap = CRAFTING_TREATMENT_CAP if ctx.task in CRAFTING_TASKS else TREATMENT_CAP
    if state.value > cap:
        return state.add(-(state.value - cap), reason)
    return state


@consideration
def consider_downed_colonists(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    if ctx.agent.downed:
        if ctx.is_care:
            return state.force_enable("agent downed").reset(1.0, "agent downed")
        return state.force_disable("agent downed")
    percent = ctx.world.percent_downed
    if percent <= 0.0:
        return state
    if ctx.task == T.DOCTOR:
        return state.add(percent, "other agents downed")
    if ctx.task in CRAFTING_TASKS or ctx.task == T.RESEARCH:
        return state.force_disable("other agents downed")
    return state


# ═══════════════════════════════════════════════════════════════════════════
# POLICY
# ═══════════════════════════════════════════════════════════════════════════


@consideration
def consider_colony_policy(state: ScoreState, ctx: EvaluationContext) -> ScoreState:
    """Apply the colony-wide offset configured for this task category."""
    return state.add(ctx.settings.policy.get(ctx.task), "colony policy")
