"""Tests for the scoring pipeline."""

from __future__ import annotations

import logging

import pytest

from freewill.colony.store import InMemoryWorkStore
from freewill.scoring import considerations as c
from freewill.scoring.pipeline import ScoringPipeline
from freewill.scoring.result import PriorityResult, apply_priority, compare_priorities
from freewill.scoring.settings import FreeWillSettings
from freewill.scoring.signals import AgentSignals, WorldSignals
from freewill.scoring.state import ScoreState


def test_skilled_cook(cook: AgentSignals, world: WorldSignals) -> None:
    result = ScoringPipeline(world).evaluate(cook, "Cooking")
    assert result.value == pytest.approx(0.5)
    assert result.level == 3
    assert result.autonomous
    assert result.log == ("50% (skill level 12)",)


def test_fire_in_home_area(cook: AgentSignals, world: WorldSignals) -> None:
    burning = WorldSignals(
        num_agents=world.num_agents,
        relevant_skills=world.relevant_skills,
        active_workers=world.active_workers,
        home_fire=True,
    )
    pipeline = ScoringPipeline(burning)

    firefighting = pipeline.evaluate(cook, "Firefighter")
    assert firefighting.value == 1.0
    assert firefighting.enabled
    assert firefighting.level == 1
    assert firefighting.log[-1] == "100% (fire in home area)"

    cooking = pipeline.evaluate(cook, "Cooking")
    assert cooking.value == pytest.approx(0.3)
    assert cooking.level == 4
    assert "-20% (fire in home area)" in cooking.log

    ranked = pipeline.rank(cook, ["Cooking", "Firefighter"])
    assert [r.task for r in ranked] == ["Firefighter", "Cooking"]


def test_permanently_unavailable_short_circuits(world: WorldSignals) -> None:
    agent = AgentSignals(
        agent_id="a1", disabled_tasks=frozenset({"Cooking"}), current_task="Cooking"
    )
    result = ScoringPipeline(world).evaluate(agent, "Cooking")
    assert result.disabled
    assert result.level == 0
    assert result.is_off
    assert result.log == ("20% (global default)", "Disabled (permanently unavailable)")


class TestManualPriorities:
    def test_level_is_kept(self, world: WorldSignals) -> None:
        agent = AgentSignals(agent_id="a1", free_will=False, manual_priorities={"Cooking": 2})
        result = ScoringPipeline(world).evaluate(agent, "Cooking")
        assert not result.autonomous
        assert result.value == pytest.approx(0.8)
        assert result.level == 2
        assert result.log == ("80% (no free will)",)

    def test_unassigned_is_off(self, world: WorldSignals) -> None:
        agent = AgentSignals(agent_id="a1", free_will=False)
        result = ScoringPipeline(world).evaluate(agent, "Cooking")
        assert result.value == 0.0
        assert result.is_off

    def test_invalid_level_falls_back_to_scoring(
        self, cook: AgentSignals, world: WorldSignals, caplog: pytest.LogCaptureFixture
    ) -> None:
        agent = AgentSignals(
            agent_id="a1", free_will=False, manual_priorities={"Cooking": 9}, skills=cook.skills
        )
        with caplog.at_level(logging.ERROR):
            result = ScoringPipeline(world).evaluate(agent, "Cooking")
        assert result.autonomous
        assert result.value == pytest.approx(0.5)
        assert "could not set Cooking priority" in caplog.text


class TestFaults:
    @staticmethod
    def explode(state: ScoreState, ctx: c.EvaluationContext) -> ScoreState:
        raise RuntimeError("boom")

    def pipeline(self, world: WorldSignals) -> ScoringPipeline:
        rules = (c.consider_relevant_skills, self.explode, c.consider_inspiration)
        return ScoringPipeline(world, dispatch={"Cooking": rules})

    def test_faulting_rule_is_skipped(self, world: WorldSignals) -> None:
        agent = AgentSignals(
            agent_id="a1", skills={"Cooking": 12}, inspiration_tasks=frozenset({"Cooking"})
        )
        result = self.pipeline(world).evaluate(agent, "Cooking")
        assert result.value == pytest.approx(0.9)

    def test_fault_logged_once_per_rule_and_task(
        self, cook: AgentSignals, world: WorldSignals, caplog: pytest.LogCaptureFixture
    ) -> None:
        pipeline = self.pipeline(world)
        with caplog.at_level(logging.ERROR, logger="freewill.scoring.pipeline"):
            pipeline.evaluate(cook, "Cooking")
            pipeline.evaluate(cook, "Cooking")
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "explode" in errors[0].getMessage()

    def test_tripped_breaker_survives_evaluations(self, world: WorldSignals) -> None:
        settings = FreeWillSettings()
        agent = AgentSignals(agent_id="a1", room="not a room")  # type: ignore[arg-type]
        pipeline = ScoringPipeline(world, settings)
        pipeline.evaluate(agent, "Cleaning")
        assert not settings.breakers["own_room"].active
        assert not settings.breakers["food_poisoning"].active
        assert settings.breakers["movement_speed"].active


def test_unknown_task_uses_default_list(cook: AgentSignals, world: WorldSignals) -> None:
    result = ScoringPipeline(world).evaluate(cook, "Childcare")
    # default average skill, then sped up by movement speed 4.6
    assert result.value == pytest.approx(0.3 * 0.25 * 4.6)
    assert result.enabled


def test_deterministic(cook: AgentSignals, world: WorldSignals) -> None:
    pipeline = ScoringPipeline(world)
    assert pipeline.evaluate(cook, "Cooking") == pipeline.evaluate(cook, "Cooking")


def test_batch_matches_sequential(cook: AgentSignals, world: WorldSignals) -> None:
    other = AgentSignals(agent_id="a2", skills={"Intellectual": 15}, passions={"Intellectual": 2})
    tasks = ["Cooking", "Research", "Firefighter", "Hauling"]
    pipeline = ScoringPipeline(world)

    sequential = pipeline.evaluate_batch([cook, other], tasks, max_workers=1)
    threaded = pipeline.evaluate_batch([cook, other], tasks, max_workers=4)

    assert threaded == sequential
    assert [(r.agent_id, r.task) for r in threaded] == [
        (agent, task) for agent in ("a1", "a2") for task in tasks
    ]


def test_verbose_keeps_full_trail(cook: AgentSignals, world: WorldSignals) -> None:
    settings = FreeWillSettings(verbose=True)
    result = ScoringPipeline(world, settings).evaluate(cook, "Cooking")
    assert result.log[0] == "20% (global default)"
    assert "-- reset --" in result.log
    assert "+0% (colony policy)" in result.log


class TestResults:
    def result(self, value: float, task: str = "Cooking") -> PriorityResult:
        return PriorityResult.from_state("a1", task, ScoreState(value=value))

    def test_ordering_by_value(self) -> None:
        low, high = self.result(0.3), self.result(0.7)
        assert low < high
        assert high > low
        assert sorted([high, low]) == [low, high]

    def test_non_strict_ordering_by_value(self) -> None:
        cooking, mining = self.result(0.4), self.result(0.4, "Mining")
        assert cooking <= mining
        assert cooking >= mining
        assert not cooking < mining
        assert cooking != mining
        assert self.result(0.3) <= self.result(0.7)
        assert not self.result(0.3) >= self.result(0.7)

    def test_compare_handles_missing(self) -> None:
        result = self.result(0.1)
        assert compare_priorities(None, result) == -1
        assert compare_priorities(result, None) == 1
        assert compare_priorities(None, None) == 0
        assert compare_priorities(result, self.result(0.1, "Mining")) == 0

    def test_tooltip(self) -> None:
        state = ScoreState().reset(0.5, "skill level 12")
        text = PriorityResult.from_state("a1", "Cooking", state).tooltip("cook meals")
        assert text.splitlines() == [
            "cook meals",
            "Priority 3",
            "-" * 30,
            "50% (skill level 12)",
        ]

    def test_tooltip_when_disabled(self) -> None:
        state = ScoreState().force_disable("downed")
        text = PriorityResult.from_state("a1", "Cooking", state).tooltip()
        assert text.splitlines() == ["Cooking", "Disabled (downed)"]

    def test_apply_priority(self) -> None:
        store = InMemoryWorkStore()
        result = self.result(0.9)
        apply_priority(result, store)
        assert store.use_work_priorities
        assert store.get_priority("a1", "Cooking") == 1
        apply_priority(result, store)
        assert store.priorities == {"a1": {"Cooking": 1}}
