"""Agent Lightning service -- the entry points the rest of the system calls.

``AgentLightning`` wires the Q-table, trainer, online-learning scheduler
and document stores together over one data directory and exposes exactly
four operations: :meth:`train`, :meth:`enable_online_learning`,
:meth:`disable_online_learning` and :meth:`status`.

Usage::

    from agent_lightning.services.lightning import AgentLightning

    lightning = AgentLightning.get_instance()
    result = lightning.train(episodes=100)
    await lightning.enable_online_learning()
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path

from agent_lightning.config import settings
from agent_lightning.data.sources.base import SearchSource
from agent_lightning.data.sources.simulated import SimulatedSearchSource
from agent_lightning.data.sources.web_search import HttpSearchSource
from agent_lightning.models.lightning import LightningConfig
from agent_lightning.rl.environment import OptimizationEnvironment, ScoreOptimizer
from agent_lightning.rl.online import OnlineLearningScheduler
from agent_lightning.rl.policy import EpsilonGreedyPolicy
from agent_lightning.rl.q_table import QTable
from agent_lightning.rl.trainer import QLearningTrainer, TrainResult
from agent_lightning.services.storage import ConfigStore, SnapshotStore
from agent_lightning.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StatusSnapshot:
    """Read-only view returned by :meth:`AgentLightning.status`."""

    enabled: bool
    online_learning: bool
    q_table_size: int
    schedule: str
    scheduler_running: bool


class AgentLightning:
    """Service facade over one Agent Lightning data directory."""

    _instance: AgentLightning | None = None

    def __init__(
        self,
        data_dir: str | Path | None = None,
        source: SearchSource | None = None,
        optimizer: ScoreOptimizer | None = None,
        rng: random.Random | None = None,
        epsilon: float | None = None,
        interval_seconds: float | None = None,
    ) -> None:
        self.data_dir = Path(data_dir or settings.data_dir)
        self.config_store = ConfigStore(self.data_dir)
        self.snapshot_store = SnapshotStore(self.data_dir)
        self.q_table = QTable(self.data_dir)
        self.optimizer = optimizer
        self.rng = rng
        self.epsilon = settings.epsilon if epsilon is None else epsilon

        self.scheduler = OnlineLearningScheduler(
            q_table=self.q_table,
            config_store=self.config_store,
            snapshot_store=self.snapshot_store,
            source=source or self._default_source(),
            interval_seconds=(
                settings.online_interval_seconds
                if interval_seconds is None
                else interval_seconds
            ),
            lookup_timeout=settings.lookup_timeout,
            nudge=settings.insight_nudge,
        )

    @classmethod
    def get_instance(cls) -> AgentLightning:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def _default_source(self) -> SearchSource:
        if settings.search_endpoint:
            return HttpSearchSource(
                settings.search_endpoint,
                request_timeout=settings.lookup_timeout,
            )
        return SimulatedSearchSource(config_store=self.config_store)

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def build_trainer(self) -> QLearningTrainer:
        policy = EpsilonGreedyPolicy(self.q_table, epsilon=self.epsilon, rng=self.rng)
        return QLearningTrainer(
            q_table=self.q_table,
            environment=OptimizationEnvironment(optimizer=self.optimizer),
            policy=policy,
            learning_rate=settings.learning_rate,
            discount_factor=settings.discount_factor,
            max_steps=settings.max_steps,
            checkpoint_every=settings.checkpoint_every,
        )

    def train(self, episodes: int | None = None) -> TrainResult:
        """Run a training session.

        Args:
            episodes: Episode count; defaults to ``training.episodes`` from
                the stored config.

        Should not overlap with an online-learning cycle on the same data
        directory.  While it runs, online cycles skip their Q-table nudge.
        """
        if episodes is None:
            episodes = self.config_store.load().training.episodes
        if self.scheduler.in_cycle:
            logger.warning("training_overlaps_online_cycle", data_dir=str(self.data_dir))
        self.scheduler.training_in_progress.set()
        try:
            return self.build_trainer().train(episodes)
        finally:
            self.scheduler.training_in_progress.clear()

    # ------------------------------------------------------------------
    # Online learning
    # ------------------------------------------------------------------

    async def enable_online_learning(self, start_loop: bool = True) -> LightningConfig:
        """Persist ``onlineLearning=true`` and arm the background loop.

        Args:
            start_loop: Set to ``False`` to only persist the flag, e.g. when
                the caller runs a single cycle itself.

        Raises:
            StorageError: If the config document cannot be written.
        """
        config = self.config_store.load()
        config.online_learning = True
        config.enabled = True
        self.config_store.save(config)

        if start_loop:
            self.scheduler.start()
        logger.info("online_learning_enabled", data_dir=str(self.data_dir), loop_armed=start_loop)
        return config

    async def disable_online_learning(self) -> LightningConfig:
        """Persist ``onlineLearning=false`` and stop arming new cycles.

        Raises:
            StorageError: If the config document cannot be written.
        """
        config = self.config_store.load()
        config.online_learning = False
        self.config_store.save(config)

        await self.scheduler.stop()
        logger.info("online_learning_disabled", data_dir=str(self.data_dir))
        return config

    async def shutdown(self) -> None:
        """Stop the background loop without touching the stored config."""
        await self.scheduler.stop(wait=True)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> StatusSnapshot:
        config = self.config_store.load()
        q_table = QTable(self.q_table.path)
        q_table.load()
        return StatusSnapshot(
            enabled=config.enabled,
            online_learning=config.online_learning,
            q_table_size=q_table.size(),
            schedule=config.training.schedule,
            scheduler_running=self.scheduler.is_running,
        )
