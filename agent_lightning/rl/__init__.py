"""Reinforcement learning module for Agent Lightning.

Key components:

- :class:`ScoreState` -- four bounded optimisation scores and their discretised key.
- :class:`OptimizationAction` -- the closed set of six optimization moves.
- :class:`QTable` -- file-backed tabular value store.
- :class:`EpsilonGreedyPolicy` -- action selection over the Q-table.
- :class:`OptimizationEnvironment` -- applies actions and prices transitions.
- :class:`QLearningTrainer` -- runs episodes and checkpoints the Q-table.
- :class:`OnlineLearningScheduler` -- background search-and-learn loop.
"""

from agent_lightning.rl.actions import ACTIONS, OptimizationAction
from agent_lightning.rl.environment import OptimizationEnvironment, ScoreDelta, ScoreOptimizer
from agent_lightning.rl.online import OnlineLearningScheduler
from agent_lightning.rl.policy import EpsilonGreedyPolicy
from agent_lightning.rl.q_table import QTable
from agent_lightning.rl.state import ScoreState, initial_state, is_terminal, state_key
from agent_lightning.rl.trainer import QLearningTrainer

__all__ = [
    "ACTIONS",
    "OptimizationAction",
    "OptimizationEnvironment",
    "ScoreDelta",
    "ScoreOptimizer",
    "OnlineLearningScheduler",
    "EpsilonGreedyPolicy",
    "QTable",
    "ScoreState",
    "initial_state",
    "is_terminal",
    "state_key",
    "QLearningTrainer",
]
