"""
Optimization environment for the Agent Lightning trainer.

The environment is the boundary between the learner and the modules that
actually touch content (meta-tag rewriting, structured-data injection,
performance tuning ...).  Those modules sit behind the
:class:`ScoreOptimizer` interface: given an action and the current
context they report how much each score moved.  The environment then
clamps the new scores to ``[0, 100]`` and prices the transition with the
:class:`RewardCalculator`.

:class:`SimulatedScoreOptimizer` is the default optimizer.  It applies the
fixed per-action deltas below and is what training runs against when no
live optimizer is plugged in:

=========================  ======================
Action                     Delta
=========================  ======================
optimizeMetaTags           seo +5
adjustKeywordDensity       aiSeo +3
addStructuredData          geo +7
improveContentStructure    geo +4, aio +2
optimizePerformance        aio +5
enhanceAccessibility       aio +3
=========================  ======================
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from agent_lightning.rl.actions import OptimizationAction, parse_action
from agent_lightning.rl.rewards import RewardCalculator
from agent_lightning.rl.state import ScoreState, clamp_score, is_terminal
from agent_lightning.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScoreDelta:
    """Pre-cap change to each score produced by one action."""

    seo: int = 0
    ai_seo: int = 0
    geo: int = 0
    aio: int = 0

    def apply(self, state: ScoreState) -> ScoreState:
        return ScoreState(
            seo=clamp_score(state.seo + self.seo),
            ai_seo=clamp_score(state.ai_seo + self.ai_seo),
            geo=clamp_score(state.geo + self.geo),
            aio=clamp_score(state.aio + self.aio),
        )


@dataclass
class StepResult:
    """Outcome of applying one action to one state."""

    next_state: ScoreState
    reward: float
    done: bool
    info: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Optimizers
# ---------------------------------------------------------------------------

class ScoreOptimizer(ABC):
    """Applies an optimization action and reports the resulting score change."""

    @abstractmethod
    def optimize(
        self,
        action: OptimizationAction,
        context: dict[str, Any],
    ) -> ScoreDelta:
        """Run *action* against the artifact described by *context*."""
        ...


SIMULATED_DELTAS: dict[OptimizationAction, ScoreDelta] = {
    OptimizationAction.OPTIMIZE_META_TAGS: ScoreDelta(seo=5),
    OptimizationAction.ADJUST_KEYWORD_DENSITY: ScoreDelta(ai_seo=3),
    OptimizationAction.ADD_STRUCTURED_DATA: ScoreDelta(geo=7),
    OptimizationAction.IMPROVE_CONTENT_STRUCTURE: ScoreDelta(geo=4, aio=2),
    OptimizationAction.OPTIMIZE_PERFORMANCE: ScoreDelta(aio=5),
    OptimizationAction.ENHANCE_ACCESSIBILITY: ScoreDelta(aio=3),
}


class SimulatedScoreOptimizer(ScoreOptimizer):
    """Deterministic stand-in that returns the fixed delta for each action."""

    def __init__(self, deltas: dict[OptimizationAction, ScoreDelta] | None = None) -> None:
        self.deltas = dict(deltas or SIMULATED_DELTAS)

    def optimize(
        self,
        action: OptimizationAction,
        context: dict[str, Any],
    ) -> ScoreDelta:
        return self.deltas[action]


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

class OptimizationEnvironment:
    """Steps a :class:`ScoreState` forward by applying optimization actions.

    Usage::

        env = OptimizationEnvironment()
        result = env.execute_action(initial_state(), OptimizationAction.OPTIMIZE_META_TAGS)
        result.next_state.seo   # 5
        result.reward           # 10
    """

    def __init__(
        self,
        optimizer: ScoreOptimizer | None = None,
        reward_calculator: RewardCalculator | None = None,
    ) -> None:
        self.optimizer = optimizer or SimulatedScoreOptimizer()
        self.reward_calculator = reward_calculator or RewardCalculator()

    def execute_action(
        self,
        state: ScoreState,
        action: str | OptimizationAction,
    ) -> StepResult:
        action = parse_action(action)
        delta = self.optimizer.optimize(action, {"state": state.to_dict()})
        next_state = delta.apply(state)
        reward = self.reward_calculator.compute(action, state, next_state)

        logger.debug(
            "action_executed",
            action=action.value,
            before=state.to_dict(),
            after=next_state.to_dict(),
            reward=reward,
        )
        return StepResult(
            next_state=next_state,
            reward=reward,
            done=is_terminal(next_state),
            info={"action": action.value},
        )
