"""Shared fixtures for the scoring tests."""

from __future__ import annotations

import pytest

from freewill.scoring.considerations import EvaluationContext
from freewill.scoring.settings import FreeWillSettings
from freewill.scoring.signals import AgentSignals, WorldSignals


def make_ctx(
    task: str,
    agent: AgentSignals | None = None,
    world: WorldSignals | None = None,
    settings: FreeWillSettings | None = None,
) -> EvaluationContext:
    return EvaluationContext(
        agent=agent or AgentSignals(agent_id="a1"),
        world=world or WorldSignals(),
        task=task,
        settings=settings or FreeWillSettings(),
    )


@pytest.fixture
def settings() -> FreeWillSettings:
    return FreeWillSettings()


@pytest.fixture
def cook() -> AgentSignals:
    return AgentSignals(agent_id="a1", name="Tynan", skills={"Cooking": 12})


@pytest.fixture
def world() -> WorldSignals:
    """Ten agents, cooking covered by someone else, nothing urgent going on."""
    return WorldSignals(
        num_agents=10,
        relevant_skills={"Cooking": ("Cooking",), "Research": ("Intellectual",)},
        active_workers={"Cooking": frozenset({"a2"}), "Research": frozenset({"a2"})},
        task_descriptions={"Cooking": "cook meals"},
    )
