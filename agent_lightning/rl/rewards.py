"""
Reward rules for the Agent Lightning optimizer.

Each action is paid according to a :class:`RewardRule`.  Conditional
rules watch one score dimension and pay ``reward`` if that dimension
actually went up after capping, ``penalty`` otherwise.  Flat rules
always pay ``reward``.

The magnitudes are historical tuning constants and are kept as-is.
"""

from __future__ import annotations

from dataclasses import dataclass

from agent_lightning.rl.actions import OptimizationAction
from agent_lightning.rl.state import ScoreState


@dataclass(frozen=True)
class RewardRule:
    reward: float
    penalty: float | None = None
    watch: str | None = None  # ScoreState attribute for conditional rules

    @property
    def is_flat(self) -> bool:
        return self.watch is None


DEFAULT_REWARD_RULES: dict[OptimizationAction, RewardRule] = {
    OptimizationAction.OPTIMIZE_META_TAGS: RewardRule(10, -5, watch="seo"),
    OptimizationAction.ADJUST_KEYWORD_DENSITY: RewardRule(8, -3, watch="ai_seo"),
    OptimizationAction.ADD_STRUCTURED_DATA: RewardRule(12, -5, watch="geo"),
    OptimizationAction.IMPROVE_CONTENT_STRUCTURE: RewardRule(10),
    OptimizationAction.OPTIMIZE_PERFORMANCE: RewardRule(8),
    OptimizationAction.ENHANCE_ACCESSIBILITY: RewardRule(6),
}


class RewardCalculator:
    """Computes the scalar reward for a single transition."""

    def __init__(self, rules: dict[OptimizationAction, RewardRule] | None = None) -> None:
        self.rules = dict(rules or DEFAULT_REWARD_RULES)

    def compute(
        self,
        action: OptimizationAction,
        before: ScoreState,
        after: ScoreState,
    ) -> float:
        rule = self.rules[action]
        if rule.is_flat:
            return rule.reward
        increased = getattr(after, rule.watch) > getattr(before, rule.watch)
        return rule.reward if increased else rule.penalty
