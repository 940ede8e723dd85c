"""Tests for colony snapshot parsing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from freewill.colony.snapshot import load_snapshot, snapshot_from_dict
from freewill.scoring.signals import TaskCategory

SNAPSHOT = {
    "world": {
        "num_agents": 2,
        "home_fire": True,
        "active_workers": {"Cooking": ["a2"]},
        "relevant_skills": {"Cooking": ["Cooking"]},
        "interest_labels": ["DNone", "DMinor"],
    },
    "tasks": ["Firefighter", "Cooking"],
    "agents": [
        {
            "agent_id": "a1",
            "name": "Tynan",
            "skills": {"Cooking": 8},
            "disabled_tasks": ["Art"],
            "thoughts": [{"name": "NeedFood", "mood_effect": -6}, "AteRawFood"],
            "room": {"has_meal_source": True, "owners": ["a1"]},
        },
        {"agent_id": "a2", "free_will": False, "manual_priorities": {"Cooking": 1}},
    ],
}


def test_parses_world_and_agents() -> None:
    colony = snapshot_from_dict(SNAPSHOT)
    assert colony.tasks == ("Firefighter", "Cooking")
    assert colony.world.home_fire
    assert colony.world.workers_for("Cooking") == frozenset({"a2"})
    assert colony.world.skills_for("Cooking") == ("Cooking",)
    assert colony.world.has_interests_framework

    tynan = colony.agent("a1")
    assert tynan.label == "Tynan"
    assert tynan.disabled_tasks == frozenset({"Art"})
    assert tynan.thought("NeedFood").mood_effect == -6
    assert tynan.thought("AteRawFood") is not None
    assert tynan.room is not None and "a1" in tynan.room.owners
    assert colony.agent("a2").manual_priority("Cooking") == 1


def test_tasks_default_to_all_categories() -> None:
    colony = snapshot_from_dict({"agents": [{"agent_id": "a1"}]})
    assert colony.tasks == tuple(t.value for t in TaskCategory)


def test_unknown_agent() -> None:
    with pytest.raises(KeyError):
        snapshot_from_dict(SNAPSHOT).agent("a9")


def test_unknown_field_named() -> None:
    with pytest.raises(ValueError, match="wings"):
        snapshot_from_dict({"agents": [{"agent_id": "a1", "wings": 2}]})


def test_agent_id_required() -> None:
    with pytest.raises(ValueError, match="agent_id"):
        snapshot_from_dict({"agents": [{"name": "Tynan"}]})


def test_not_an_object() -> None:
    with pytest.raises(ValueError):
        snapshot_from_dict(["a1"])  # type: ignore[arg-type]


def test_load_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "colony.json"
    path.write_text(json.dumps(SNAPSHOT))
    assert len(load_snapshot(path).agents) == 2
