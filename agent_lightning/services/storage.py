"""
File-backed document storage for Agent Lightning.

Three kinds of documents live under ``settings.data_dir``:

* ``lightning-config.json`` -- the :class:`LightningConfig` document.
* ``q-table.json`` -- the flat Q-value mapping (see :mod:`agent_lightning.rl.q_table`).
* ``learning-<timestamp>.json`` -- one snapshot per online-learning cycle.

All writes go through :func:`write_json_atomic` (temp file + ``os.replace``)
so a crash mid-write never leaves a truncated document behind.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from agent_lightning.models.lightning import LearningSnapshot, LightningConfig
from agent_lightning.utils.logging import get_logger

logger = get_logger(__name__)

CONFIG_FILENAME = "lightning-config.json"
Q_TABLE_FILENAME = "q-table.json"
SNAPSHOT_PREFIX = "learning-"


class StorageError(Exception):
    """A document could not be written to durable storage."""


def write_json_atomic(path: Path, data: Any) -> None:
    """Serialise *data* to *path* without exposing partial writes.

    Raises:
        StorageError: If the directory cannot be created or the write fails.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
    except (OSError, TypeError, ValueError) as exc:
        raise StorageError(f"Failed to write {path}: {exc}") from exc


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


# ---------------------------------------------------------------------------
# Config document
# ---------------------------------------------------------------------------

class ConfigStore:
    """Loads and saves the Agent Lightning config document."""

    def __init__(self, data_dir: str | Path) -> None:
        self.path = Path(data_dir) / CONFIG_FILENAME

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> LightningConfig:
        """Return the stored config, or defaults if absent or unreadable.

        The defaults are *not* written back; the document only appears on
        disk once something explicitly saves it.
        """
        if not self.path.exists():
            return LightningConfig()
        try:
            return LightningConfig.model_validate(read_json(self.path))
        except (OSError, ValueError, ValidationError, RecursionError) as exc:
            logger.warning(
                "config_load_failed",
                path=str(self.path),
                error=str(exc),
                fallback="defaults",
            )
            return LightningConfig()

    def save(self, config: LightningConfig) -> None:
        write_json_atomic(self.path, config.to_document())
        logger.debug("config_saved", path=str(self.path))


# ---------------------------------------------------------------------------
# Learning snapshots
# ---------------------------------------------------------------------------

class SnapshotStore:
    """Writes one uniquely-named document per online-learning cycle."""

    def __init__(self, data_dir: str | Path) -> None:
        self.directory = Path(data_dir)

    def save(self, snapshot: LearningSnapshot, when: datetime | None = None) -> Path:
        """Persist *snapshot* and return the path it was written to.

        Existing snapshots are never overwritten; if the timestamped name
        is already taken a numeric suffix is appended.
        """
        when = when or datetime.now(timezone.utc)
        stem = f"{SNAPSHOT_PREFIX}{when.strftime('%Y%m%dT%H%M%S%fZ')}"
        path = self.directory / f"{stem}.json"
        counter = 1
        while path.exists():
            path = self.directory / f"{stem}-{counter}.json"
            counter += 1

        write_json_atomic(path, snapshot.model_dump())
        logger.info(
            "learning_snapshot_saved",
            path=str(path),
            insights=len(snapshot.insights),
            sources=len(snapshot.sources),
        )
        return path

    def list_snapshots(self) -> list[Path]:
        """Return stored snapshot paths, oldest first."""
        if not self.directory.exists():
            return []
        return sorted(self.directory.glob(f"{SNAPSHOT_PREFIX}*.json"))
