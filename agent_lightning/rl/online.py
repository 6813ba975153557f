"""
Online-learning loop for Agent Lightning.

While enabled, a background task periodically searches the configured
keywords, distils the hits into a small set of qualitative insights,
optionally nudges the Q-table towards the actions those insights favour,
and writes a timestamped snapshot of the cycle.

Lifecycle:

* :meth:`OnlineLearningScheduler.start` arms an ``asyncio.Task`` whose
  first cycle runs immediately, then repeats every ``interval_seconds``.
* :meth:`OnlineLearningScheduler.stop` prevents any further cycle.  A task
  that is sleeping (or has not started yet) is cancelled outright; a cycle
  that is already running is allowed to finish, lookups included.

Nothing re-arms the loop on process start; callers must ``start()`` it.
The loop shares the Q-table file with the trainer.  While
``training_in_progress`` is set, a cycle records its insights but leaves
the Q-table alone.
"""

from __future__ import annotations

import asyncio
import contextlib
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from agent_lightning.data.sources.base import SearchSource, SourceRecord
from agent_lightning.models.lightning import Insight, LearningSnapshot
from agent_lightning.rl.actions import OptimizationAction
from agent_lightning.rl.q_table import QTable
from agent_lightning.services.storage import ConfigStore, SnapshotStore
from agent_lightning.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_INTERVAL_SECONDS = 24 * 60 * 60


# ---------------------------------------------------------------------------
# Insight extraction
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InsightRule:
    type: str
    terms: tuple[str, ...]
    description: str
    action: OptimizationAction


INSIGHT_RULES: tuple[InsightRule, ...] = (
    InsightRule(
        type="pattern",
        terms=("structured data", "schema.org"),
        description="Structured data usage is increasing",
        action=OptimizationAction.ADD_STRUCTURED_DATA,
    ),
    InsightRule(
        type="trend",
        terms=("ai seo", "generative ai"),
        description="AI SEO is gaining importance",
        action=OptimizationAction.ADJUST_KEYWORD_DENSITY,
    ),
)


def derive_insights(
    records: list[SourceRecord],
    rules: tuple[InsightRule, ...] = INSIGHT_RULES,
) -> list[Insight]:
    """Fire each rule at most once if any record mentions one of its terms."""
    corpus = [f"{r.title} {r.snippet}".lower() for r in records]
    insights: list[Insight] = []
    for rule in rules:
        if any(term in text for text in corpus for term in rule.terms):
            insights.append(
                Insight(
                    type=rule.type,
                    description=rule.description,
                    action=rule.action.value,
                )
            )
    return insights


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------

class OnlineLearningScheduler:
    """Owns the background online-learning task and its cancellable handle."""

    def __init__(
        self,
        q_table: QTable,
        config_store: ConfigStore,
        snapshot_store: SnapshotStore,
        source: SearchSource,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        lookup_timeout: float = 15.0,
        nudge: float = 1.0,
    ) -> None:
        self.q_table = q_table
        self.config_store = config_store
        self.snapshot_store = snapshot_store
        self.source = source
        self.interval_seconds = interval_seconds
        self.lookup_timeout = lookup_timeout
        self.nudge = nudge

        self._task: asyncio.Task | None = None
        self._stopping = False
        self._in_cycle = False
        self.training_in_progress = threading.Event()
        self.cycles_completed = 0
        self.last_snapshot_path: Path | None = None

    @property
    def is_running(self) -> bool:
        return (
            self._task is not None
            and not self._task.done()
            and not self._stopping
        )

    @property
    def in_cycle(self) -> bool:
        return self._in_cycle

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Arm the background loop.  Must be called from a running event loop.

        Returns:
            ``True`` if a new task was created, ``False`` if one was
            already alive (it keeps running).
        """
        if self._task is not None and not self._task.done():
            self._stopping = False
            return False

        self._stopping = False
        self._task = asyncio.create_task(self._run(), name="online-learning")
        logger.info("online_learning_started", interval_seconds=self.interval_seconds)
        return True

    async def stop(self, wait: bool = False) -> None:
        """Stop arming new cycles; an in-flight cycle runs to completion."""
        self._stopping = True
        task = self._task
        if task is None or task.done():
            self._task = None
            return

        in_flight = self._in_cycle
        if not in_flight:
            task.cancel()
            self._task = None
        logger.info("online_learning_stopped", cycle_in_flight=in_flight)

        if wait:
            with contextlib.suppress(asyncio.CancelledError):
                await task
            if self._task is task:
                self._task = None

    async def _run(self) -> None:
        while not self._stopping:
            self._in_cycle = True
            try:
                await self.search_and_learn()
            except Exception:
                logger.exception("online_learning_cycle_failed")
            finally:
                self._in_cycle = False
                self.cycles_completed += 1

            if self._stopping:
                break
            await asyncio.sleep(self.interval_seconds)

    # ------------------------------------------------------------------
    # One cycle
    # ------------------------------------------------------------------

    async def search_and_learn(self) -> LearningSnapshot:
        """Run a single search -> insights -> update -> snapshot cycle."""
        config = self.config_store.load()
        keywords = list(config.search.keywords) if config.search.enabled else []
        logger.info("online_learning_cycle_started", keywords=len(keywords))

        records: list[SourceRecord] = []
        failed = 0
        for keyword in keywords:
            try:
                hits = await asyncio.wait_for(
                    self.source.lookup(keyword), timeout=self.lookup_timeout
                )
            except Exception as exc:
                failed += 1
                logger.warning(
                    "search_lookup_failed",
                    keyword=keyword,
                    source=self.source.name,
                    error=str(exc) or type(exc).__name__,
                )
                continue
            records.extend(hits)

        insights = derive_insights(records)
        if insights and config.update.auto_update:
            self._apply_insights(insights)

        snapshot = LearningSnapshot(
            timestamp=datetime.now(timezone.utc).isoformat(),
            sources=[r.to_dict() for r in records],
            keywords=keywords,
            insights=insights,
        )
        self.last_snapshot_path = self.snapshot_store.save(snapshot)

        logger.info(
            "online_learning_cycle_completed",
            records=len(records),
            failed_lookups=failed,
            insights=len(insights),
        )
        return snapshot

    def _apply_insights(self, insights: list[Insight]) -> None:
        if self.training_in_progress.is_set():
            logger.warning(
                "q_table_nudge_skipped",
                reason="training_in_progress",
                insights=len(insights),
            )
            return

        self.q_table.load()
        adjusted = 0
        for insight in insights:
            count = self.q_table.nudge(insight.action, self.nudge)
            adjusted += count
            logger.info(
                "q_table_nudged",
                insight=insight.type,
                action=insight.action,
                entries=count,
                amount=self.nudge,
            )
        if adjusted:
            self.q_table.save()
