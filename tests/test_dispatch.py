"""Tests for the task-category dispatch table."""

from __future__ import annotations

import pytest

from freewill.scoring import considerations as c
from freewill.scoring.considerations import consideration_name
from freewill.scoring.dispatch import (
    DEFAULT,
    DISPATCH_TABLE,
    PRECONDITIONS,
    RESEARCH,
    SKILLED,
    considerations_for,
)
from freewill.scoring.signals import TaskCategory


def names(task: str) -> list[str]:
    return [consideration_name(rule) for rule in considerations_for(task)]


def test_every_category_has_an_entry() -> None:
    for task in TaskCategory:
        assert task.value in DISPATCH_TABLE


def test_unknown_task_uses_default() -> None:
    assert considerations_for("Childcare") == DEFAULT


def test_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        DISPATCH_TABLE["Cooking"] = DEFAULT  # type: ignore[index]


@pytest.mark.parametrize("task", sorted(DISPATCH_TABLE))
def test_policy_runs_last(task: str) -> None:
    assert names(task)[-1] == "colony_policy"


@pytest.mark.parametrize("task", sorted(DISPATCH_TABLE))
def test_no_duplicate_rules(task: str) -> None:
    rules = names(task)
    assert len(rules) == len(set(rules))


def test_preconditions() -> None:
    assert PRECONDITIONS == (c.consider_permanently_unavailable,)


def test_firefighter_order() -> None:
    assert names("Firefighter") == [
        "firefighting_default",
        "agent_downed",
        "fire",
        "building_immunity",
        "completing_task",
        "colonists_needing_treatment",
        "downed_colonists",
        "colony_policy",
    ]


def test_patient_order() -> None:
    assert names("Patient") == [
        "patient_default",
        "health",
        "building_immunity",
        "completing_task",
        "colonists_needing_treatment",
        "downed_colonists",
        "colony_policy",
    ]


def test_bed_rest_lets_bored_agents_rest() -> None:
    rules = names("PatientBedRest")
    assert rules[0] == "bed_rest_default"
    assert rules.index("bored") < rules.index("downed_colonists")


def test_basic_worker_order() -> None:
    assert names("BasicWorker")[:6] == [
        "basic_work_default",
        "thoughts",
        "warm_clothes",
        "health",
        "bored",
        "agent_downed",
    ]


def test_skilled_categories_share_a_list() -> None:
    for task in ("Doctor", "Warden", "Construction", "Growing", "Mining", "Smithing", "Art"):
        assert considerations_for(task) == SKILLED


def test_skills_establish_base_first() -> None:
    for task in ("Doctor", "Cooking", "Hunting", "PlantCutting", "Research"):
        assert names(task)[0] == "relevant_skills"


def test_cooking_checks_food_poisoning_before_condition() -> None:
    rules = names("Cooking")
    assert rules.index("colonist_left_unburied") < rules.index("food_poisoning")
    assert rules.index("food_poisoning") < rules.index("health")


def test_hunting_guards() -> None:
    rules = names("Hunting")
    assert rules[1] == "movement_speed"
    assert rules.index("bored") < rules.index("hunting_weapon")
    assert rules.index("brawlers_not_hunting") < rules.index("fire")


def test_plant_cutting_order() -> None:
    rules = names("PlantCutting")
    assert rules.index("tree_pruning") < rules.index("low_food")
    assert rules.index("health") < rules.index("plants_blighted")
    assert "carrying_capacity" not in rules


def test_hauling_starts_from_beauty() -> None:
    assert names("Hauling")[:2] == ["beauty_expectations", "movement_speed"]
    assert considerations_for("HaulingUrgent") == considerations_for("Hauling")


def test_cleaning_order() -> None:
    assert names("Cleaning")[:8] == [
        "beauty_expectations",
        "anyone_else_doing",
        "thoughts",
        "own_room",
        "food_poisoning",
        "health",
        "bored",
        "not_in_home_area",
    ]


def test_research_never_forced_by_current_task() -> None:
    rules = [consideration_name(rule) for rule in RESEARCH]
    assert "completing_task" not in rules
    assert "carrying_capacity" not in rules


def test_completing_task_precedes_treatment_caps() -> None:
    for task in ("Cooking", "Mining", "Hauling", "Cleaning"):
        rules = names(task)
        assert rules.index("completing_task") < rules.index("colonists_needing_treatment")
