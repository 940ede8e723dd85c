"""Colony snapshots - build read-only signals from JSON documents.

A snapshot document looks like::

    {
      "world": {"num_agents": 3, "home_fire": false, ...},
      "tasks": ["Firefighter", "Doctor", "Cooking"],
      "agents": [{"agent_id": "a1", "skills": {"Cooking": 8}, ...}]
    }

``tasks`` is optional and defaults to every known task category.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from freewill.scoring.signals import AgentSignals, RoomSignals, TaskCategory, Thought, WorldSignals


@dataclass(frozen=True)
class ColonySnapshot:
    """Signals for one world plus the agents and task categories to score."""

    world: WorldSignals
    agents: tuple[AgentSignals, ...]
    tasks: tuple[str, ...]

    def agent(self, agent_id: str) -> AgentSignals:
        for agent in self.agents:
            if agent.agent_id == agent_id:
                return agent
        raise KeyError(agent_id)


def _check_keys(kind: str, data: Mapping[str, Any], cls: type) -> None:
    allowed = {f.name for f in fields(cls)}
    unknown = set(data) - allowed
    if unknown:
        raise ValueError(f"unknown {kind} field(s): {', '.join(sorted(unknown))}")


def _thought(data: Mapping[str, Any] | str) -> Thought:
    if isinstance(data, str):
        return Thought(name=data)
    _check_keys("thought", data, Thought)
    return Thought(
        name=str(data["name"]),
        stage=str(data.get("stage", "")),
        mood_effect=float(data.get("mood_effect", 0.0)),
    )


def _room(data: Mapping[str, Any]) -> RoomSignals:
    _check_keys("room", data, RoomSignals)
    return RoomSignals(
        touches_map_edge=bool(data.get("touches_map_edge", False)),
        is_huge=bool(data.get("is_huge", False)),
        has_meal_source=bool(data.get("has_meal_source", False)),
        food_poison_chance=float(data.get("food_poison_chance", 0.0)),
        owners=frozenset(data.get("owners", ())),
    )


def agent_from_dict(data: Mapping[str, Any]) -> AgentSignals:
    """Build ``AgentSignals`` from a plain mapping."""
    _check_keys("agent", data, AgentSignals)
    if "agent_id" not in data:
        raise ValueError("agent is missing agent_id")

    values = dict(data)
    for key in ("disabled_tasks", "traits"):
        if key in values:
            values[key] = frozenset(values[key])
    if values.get("inspiration_tasks") is not None:
        values["inspiration_tasks"] = frozenset(values["inspiration_tasks"])
    if "thoughts" in values:
        values["thoughts"] = tuple(_thought(t) for t in values["thoughts"])
    if values.get("room") is not None:
        values["room"] = _room(values["room"])
    if "manual_priorities" in values:
        values["manual_priorities"] = {k: int(v) for k, v in values["manual_priorities"].items()}
    return AgentSignals(**values)


def world_from_dict(data: Mapping[str, Any]) -> WorldSignals:
    """Build ``WorldSignals`` from a plain mapping."""
    _check_keys("world", data, WorldSignals)
    values = dict(data)
    if "active_workers" in values:
        values["active_workers"] = {k: frozenset(v) for k, v in values["active_workers"].items()}
    if "relevant_skills" in values:
        values["relevant_skills"] = {k: tuple(v) for k, v in values["relevant_skills"].items()}
    if values.get("interest_labels") is not None:
        values["interest_labels"] = tuple(values["interest_labels"])
    return WorldSignals(**values)


def snapshot_from_dict(data: Mapping[str, Any]) -> ColonySnapshot:
    """Build a ``ColonySnapshot`` from a parsed document.

    Raises:
        ValueError: If the document is malformed.
    """
    if not isinstance(data, Mapping):
        raise ValueError("snapshot must be a JSON object")
    try:
        world = world_from_dict(data.get("world", {}))
        agents = tuple(agent_from_dict(a) for a in data.get("agents", []))
    except (TypeError, AttributeError) as err:
        raise ValueError(f"malformed snapshot: {err}") from err

    tasks = data.get("tasks")
    if tasks is None:
        tasks = [t.value for t in TaskCategory]
    return ColonySnapshot(world=world, agents=agents, tasks=tuple(str(t) for t in tasks))


def load_snapshot(path: Path) -> ColonySnapshot:
    """Read a snapshot document from disk."""
    with path.open("r") as f:
        data = json.load(f)
    return snapshot_from_dict(data)
