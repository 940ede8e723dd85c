"""Scoring pipeline - gate, reset, fold considerations, finalize.

One evaluation is strictly sequential. Independent evaluations share only
read-only signals, the policy offsets and the circuit breakers, so a batch
may be spread across threads.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor

from .considerations import Consideration, EvaluationContext, consideration_name
from .dispatch import DEFAULT, DISPATCH_TABLE, PRECONDITIONS
from .result import EvaluationStage, PriorityResult
from .settings import FreeWillSettings
from .signals import AgentSignals, WorldSignals
from .state import ScoreState

logger = logging.getLogger(__name__)

GLOBAL_DEFAULT_REASON = "global default"
NO_FREE_WILL_REASON = "no free will"


class ScoringPipeline:
    """
    Scores task categories for agents living in one world.

    Features:
    - Agents without free will keep their manually assigned level
    - One faulting consideration is skipped, never the whole evaluation
    - Concurrent batch evaluation with results in input order
    """

    def __init__(
        self,
        world: WorldSignals,
        settings: FreeWillSettings | None = None,
        dispatch: Mapping[str, Sequence[Consideration]] | None = None,
        default: Sequence[Consideration] = DEFAULT,
    ) -> None:
        self.world = world
        self.settings = settings or FreeWillSettings()
        self.dispatch = dispatch if dispatch is not None else DISPATCH_TABLE
        self.default = tuple(default)
        self._reported: set[tuple[str, str]] = set()
        self._report_lock = threading.Lock()

    def considerations_for(self, task: str) -> tuple[Consideration, ...]:
        return tuple(self.dispatch.get(task, self.default))

    def evaluate(self, agent: AgentSignals, task: str) -> PriorityResult:
        """Score one task category for one agent."""
        state = ScoreState(scale=self.settings.scale, verbose=self.settings.verbose)

        try:
            if not agent.free_will:
                logger.debug("%s/%s: %s", agent.label, task, EvaluationStage.GATED)
                state = self._manual_priority(state, agent, task)
                return PriorityResult.from_state(agent.agent_id, task, state, autonomous=False)
        except Exception:
            logger.exception("could not set %s priority for agent %s", task, agent.label)

        state = state.reset(self.settings.default_value, GLOBAL_DEFAULT_REASON)
        logger.debug("%s/%s: %s", agent.label, task, EvaluationStage.INITIALIZED)

        ctx = EvaluationContext(agent=agent, world=self.world, task=task, settings=self.settings)
        logger.debug("%s/%s: %s", agent.label, task, EvaluationStage.EVALUATING)
        state = self._fold(PRECONDITIONS, state, ctx)
        if not state.is_disabled():
            state = self._fold(self.considerations_for(task), state, ctx)

        logger.debug("%s/%s: %s at %.3f", agent.label, task, EvaluationStage.FINALIZED, state.value)
        return PriorityResult.from_state(agent.agent_id, task, state)

    def evaluate_agent(self, agent: AgentSignals, tasks: Iterable[str]) -> list[PriorityResult]:
        return [self.evaluate(agent, task) for task in tasks]

    def rank(self, agent: AgentSignals, tasks: Iterable[str]) -> list[PriorityResult]:
        """Task categories for one agent, most desirable first."""
        return sorted(self.evaluate_agent(agent, tasks), reverse=True)

    def evaluate_batch(
        self,
        agents: Sequence[AgentSignals],
        tasks: Sequence[str],
        max_workers: int | None = None,
    ) -> list[PriorityResult]:
        """
        Score every (agent, task) pair, optionally across worker threads.

        Args:
            agents: Agents to score
            tasks: Task categories to score for each agent
            max_workers: Thread count; 1 evaluates inline

        Returns:
            Results ordered agent by agent, then task by task
        """
        pairs = [(agent, task) for agent in agents for task in tasks]
        if max_workers == 1 or len(pairs) <= 1:
            return [self.evaluate(agent, task) for agent, task in pairs]

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(self.evaluate, agent, task) for agent, task in pairs]
            return [future.result() for future in futures]

    def _manual_priority(self, state: ScoreState, agent: AgentSignals, task: str) -> ScoreState:
        """Remap the externally assigned level onto the continuous scale."""
        level = agent.manual_priority(task)
        return state.reset(self.settings.scale.value_for_level(level), NO_FREE_WILL_REASON)

    def _fold(
        self, rules: Iterable[Consideration], state: ScoreState, ctx: EvaluationContext
    ) -> ScoreState:
        for rule in rules:
            try:
                state = rule(state, ctx)
            except Exception:
                self._report_fault(rule, ctx)
        return state

    def _report_fault(self, rule: Consideration, ctx: EvaluationContext) -> None:
        key = (consideration_name(rule), ctx.task)
        with self._report_lock:
            first = key not in self._reported
            self._reported.add(key)
        if first:
            logger.exception(
                "%s could not consider %s to adjust %s", ctx.agent.label, key[0], ctx.task
            )
        else:
            logger.debug("%s skipped %s for %s after a fault", ctx.agent.label, key[0], ctx.task)
