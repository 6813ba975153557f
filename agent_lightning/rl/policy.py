"""Epsilon-greedy action selection over the Q-table."""

from __future__ import annotations

import random

from agent_lightning.rl.actions import ACTIONS, OptimizationAction
from agent_lightning.rl.q_table import QTable
from agent_lightning.rl.state import ScoreState, state_key


class EpsilonGreedyPolicy:
    """Explore with probability ``epsilon``, otherwise exploit the Q-table.

    Epsilon is fixed for the lifetime of the policy (no annealing).
    Greedy ties are broken in favour of the action that comes first in
    :data:`ACTIONS`.
    """

    def __init__(
        self,
        q_table: QTable,
        epsilon: float = 0.1,
        rng: random.Random | None = None,
    ) -> None:
        if not 0.0 <= epsilon <= 1.0:
            raise ValueError(f"epsilon must be within [0, 1], got {epsilon}")
        self.q_table = q_table
        self.epsilon = epsilon
        self.rng = rng or random.Random()

    def select_action(self, state: ScoreState) -> OptimizationAction:
        if self.rng.random() < self.epsilon:
            return self.rng.choice(ACTIONS)
        return self.best_action(state)

    def best_action(self, state: ScoreState) -> OptimizationAction:
        key = state_key(state)
        best_action = ACTIONS[0]
        best_q = self.q_table.get(key, best_action)
        for action in ACTIONS[1:]:
            q_value = self.q_table.get(key, action)
            if q_value > best_q:
                best_q = q_value
                best_action = action
        return best_action
