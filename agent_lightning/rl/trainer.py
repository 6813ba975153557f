"""
Q-learning trainer and episode runner for Agent Lightning.

Training is synchronous and strictly sequential: one episode at a time,
one step at a time.  Every episode starts from the all-zero state and runs
until every score reaches the terminal threshold or the step cap is hit.
After each step the Q-table is updated with the standard rule::

    Q(s, a) <- Q(s, a) + alpha * (r + gamma * max_a' Q(s', a') - Q(s, a))

The table is checkpointed every ``checkpoint_every`` episodes and once
more when the run finishes.  A failed checkpoint is logged and counted,
but does not stop training; an exception raised inside a step does.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from agent_lightning.rl.actions import OptimizationAction
from agent_lightning.rl.environment import OptimizationEnvironment
from agent_lightning.rl.policy import EpsilonGreedyPolicy
from agent_lightning.rl.q_table import QTable
from agent_lightning.rl.state import ScoreState, initial_state, is_terminal, state_key
from agent_lightning.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_LEARNING_RATE = 0.1
DEFAULT_DISCOUNT_FACTOR = 0.9
DEFAULT_MAX_STEPS = 50
DEFAULT_CHECKPOINT_EVERY = 10


@dataclass
class EpisodeSummary:
    """Summary of a completed episode."""

    total_reward: float
    steps: int
    terminal: bool
    final_state: ScoreState
    actions: list[OptimizationAction] = field(default_factory=list)


@dataclass
class TrainResult:
    """Result of a :meth:`QLearningTrainer.train` run."""

    episodes: int
    total_steps: int
    avg_reward: float
    best_reward: float
    worst_reward: float
    terminal_episodes: int
    saves: int
    failed_saves: int
    q_table_size: int
    started_at: datetime
    ended_at: datetime

    @property
    def checkpoint_stale(self) -> bool:
        """True if any checkpoint failed, so the file on disk may lag memory."""
        return self.failed_saves > 0


class QLearningTrainer:
    """Runs tabular Q-learning episodes against an :class:`OptimizationEnvironment`.

    The Q-table is owned by the caller and shared by reference with the
    policy; nothing here keeps global state.
    """

    def __init__(
        self,
        q_table: QTable,
        environment: OptimizationEnvironment | None = None,
        policy: EpsilonGreedyPolicy | None = None,
        epsilon: float = 0.1,
        learning_rate: float = DEFAULT_LEARNING_RATE,
        discount_factor: float = DEFAULT_DISCOUNT_FACTOR,
        max_steps: int = DEFAULT_MAX_STEPS,
        checkpoint_every: int = DEFAULT_CHECKPOINT_EVERY,
    ) -> None:
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        if checkpoint_every < 1:
            raise ValueError("checkpoint_every must be at least 1")
        self.q_table = q_table
        self.environment = environment or OptimizationEnvironment()
        self.policy = policy or EpsilonGreedyPolicy(q_table, epsilon=epsilon)
        self.learning_rate = learning_rate
        self.discount_factor = discount_factor
        self.max_steps = max_steps
        self.checkpoint_every = checkpoint_every

    # ------------------------------------------------------------------
    # Q-update
    # ------------------------------------------------------------------

    def update(
        self,
        state: ScoreState,
        action: OptimizationAction,
        reward: float,
        next_state: ScoreState,
    ) -> float:
        """Apply one Q-learning update and return the new Q-value."""
        key = state_key(state)
        current_q = self.q_table.get(key, action)
        max_next_q = self.q_table.max_value(state_key(next_state))

        td_target = reward + self.discount_factor * max_next_q
        new_q = current_q + self.learning_rate * (td_target - current_q)
        self.q_table.set(key, action, new_q)
        return new_q

    # ------------------------------------------------------------------
    # Episodes
    # ------------------------------------------------------------------

    def run_episode(self, start: ScoreState | None = None) -> EpisodeSummary:
        state = start if start is not None else initial_state()
        total_reward = 0.0
        step = 0
        actions: list[OptimizationAction] = []

        while step < self.max_steps and not is_terminal(state):
            action = self.policy.select_action(state)
            result = self.environment.execute_action(state, action)
            self.update(state, action, result.reward, result.next_state)

            actions.append(action)
            state = result.next_state
            total_reward += result.reward
            step += 1

        return EpisodeSummary(
            total_reward=total_reward,
            steps=step,
            terminal=is_terminal(state),
            final_state=state,
            actions=actions,
        )

    def train(self, episodes: int) -> TrainResult:
        """Load the Q-table, run *episodes* fresh episodes, and persist.

        Raises:
            ValueError: If *episodes* is negative.
            Exception: Anything raised while stepping aborts the run;
                checkpoints already written are left in place.
        """
        if episodes < 0:
            raise ValueError(f"episodes must be >= 0, got {episodes}")

        started_at = datetime.now(timezone.utc)
        self.q_table.load()
        logger.info(
            "training_started",
            episodes=episodes,
            epsilon=self.policy.epsilon,
            q_table_size=self.q_table.size(),
        )

        rewards: list[float] = []
        total_steps = 0
        terminal_episodes = 0
        saves = 0
        failed_saves = 0

        for episode in range(episodes):
            summary = self.run_episode(initial_state())
            rewards.append(summary.total_reward)
            total_steps += summary.steps
            terminal_episodes += int(summary.terminal)

            logger.debug(
                "episode_completed",
                episode=episode + 1,
                total_reward=summary.total_reward,
                steps=summary.steps,
                terminal=summary.terminal,
            )

            if (episode + 1) % self.checkpoint_every == 0:
                if self.q_table.save():
                    saves += 1
                else:
                    failed_saves += 1
                    logger.warning("checkpoint_failed", episode=episode + 1)

        if self.q_table.save():
            saves += 1
        else:
            failed_saves += 1
            logger.warning("final_save_failed", episodes=episodes)

        result = TrainResult(
            episodes=episodes,
            total_steps=total_steps,
            avg_reward=sum(rewards) / len(rewards) if rewards else 0.0,
            best_reward=max(rewards, default=0.0),
            worst_reward=min(rewards, default=0.0),
            terminal_episodes=terminal_episodes,
            saves=saves,
            failed_saves=failed_saves,
            q_table_size=self.q_table.size(),
            started_at=started_at,
            ended_at=datetime.now(timezone.utc),
        )
        logger.info(
            "training_completed",
            episodes=episodes,
            avg_reward=round(result.avg_reward, 4),
            terminal_episodes=terminal_episodes,
            q_table_size=result.q_table_size,
            checkpoint_stale=result.checkpoint_stale,
        )
        return result
