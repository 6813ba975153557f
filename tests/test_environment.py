"""Tests for the optimization environment and reward rules."""

import pytest

from agent_lightning.rl.actions import OptimizationAction
from agent_lightning.rl.environment import (
    OptimizationEnvironment,
    ScoreDelta,
    ScoreOptimizer,
)
from agent_lightning.rl.rewards import RewardCalculator, RewardRule
from agent_lightning.rl.state import ScoreState


class TestTransitionTable:
    """The default simulated transitions from the all-zero state."""

    def setup_method(self):
        self.env = OptimizationEnvironment()

    @pytest.mark.parametrize(
        "action, expected_state, expected_reward",
        [
            ("optimizeMetaTags", ScoreState(seo=5), 10),
            ("adjustKeywordDensity", ScoreState(ai_seo=3), 8),
            ("addStructuredData", ScoreState(geo=7), 12),
            ("improveContentStructure", ScoreState(geo=4, aio=2), 10),
            ("optimizePerformance", ScoreState(aio=5), 8),
            ("enhanceAccessibility", ScoreState(aio=3), 6),
        ],
    )
    def test_from_zero(self, action, expected_state, expected_reward):
        result = self.env.execute_action(ScoreState(), action)
        assert result.next_state == expected_state
        assert result.reward == expected_reward
        assert result.done is False

    def test_input_state_is_not_mutated(self):
        state = ScoreState(seo=10)
        self.env.execute_action(state, OptimizationAction.OPTIMIZE_META_TAGS)
        assert state == ScoreState(seo=10)


class TestCapping:
    """Scores clamp at 100 and conditional rewards track real increases."""

    def setup_method(self):
        self.env = OptimizationEnvironment()

    def test_partial_increase_is_rewarded(self):
        result = self.env.execute_action(ScoreState(seo=98), "optimizeMetaTags")
        assert result.next_state.seo == 100
        assert result.reward == 10

    def test_no_increase_is_penalised(self):
        result = self.env.execute_action(ScoreState(seo=100), "optimizeMetaTags")
        assert result.next_state.seo == 100
        assert result.reward == -5

    def test_keyword_density_at_cap(self):
        result = self.env.execute_action(ScoreState(ai_seo=100), "adjustKeywordDensity")
        assert result.next_state.ai_seo == 100
        assert result.reward == -3

    def test_structured_data_at_cap(self):
        result = self.env.execute_action(ScoreState(geo=100), "addStructuredData")
        assert result.next_state.geo == 100
        assert result.reward == -5

    def test_flat_rewards_paid_even_at_cap(self):
        state = ScoreState(geo=100, aio=100)
        assert self.env.execute_action(state, "improveContentStructure").reward == 10
        assert self.env.execute_action(state, "optimizePerformance").reward == 8
        assert self.env.execute_action(state, "enhanceAccessibility").reward == 6

    def test_content_structure_caps_each_dimension(self):
        result = self.env.execute_action(ScoreState(geo=98, aio=99), "improveContentStructure")
        assert result.next_state == ScoreState(geo=100, aio=100)

    def test_done_when_step_reaches_terminal(self):
        result = self.env.execute_action(ScoreState(seo=78, ai_seo=80, geo=80, aio=80), "optimizeMetaTags")
        assert result.next_state.seo == 83
        assert result.done is True


class RecordingOptimizer(ScoreOptimizer):
    def __init__(self, delta: ScoreDelta):
        self.delta = delta
        self.calls = []

    def optimize(self, action, context):
        self.calls.append((action, context))
        return self.delta


class TestPluggableOptimizer:
    """Real optimizers can replace the simulated deltas."""

    def test_optimizer_delta_is_applied_and_clamped(self):
        optimizer = RecordingOptimizer(ScoreDelta(seo=-20, aio=150))
        env = OptimizationEnvironment(optimizer=optimizer)

        result = env.execute_action(ScoreState(seo=10, aio=10), "optimizeMetaTags")

        assert result.next_state == ScoreState(seo=0, aio=100)
        assert result.reward == -5
        action, context = optimizer.calls[0]
        assert action is OptimizationAction.OPTIMIZE_META_TAGS
        assert context == {"state": {"seo": 10, "aiSeo": 0, "geo": 0, "aio": 10}}

    def test_custom_reward_rules(self):
        rules = {action: RewardRule(1) for action in OptimizationAction}
        env = OptimizationEnvironment(reward_calculator=RewardCalculator(rules))
        assert env.execute_action(ScoreState(seo=100), "optimizeMetaTags").reward == 1

    def test_unknown_action_is_rejected(self):
        with pytest.raises(ValueError):
            OptimizationEnvironment().execute_action(ScoreState(), "buyBacklinks")
