"""
Tabular value store (Q-table) for the Agent Lightning optimizer.

Entries are keyed by ``"<state_key>:<action>"`` -- e.g.
``"3:1:0:2:addStructuredData"`` -- and hold a float Q-value.  Missing
entries read as 0.0; nothing is materialised until it is first written.

The whole table is loaded into memory at once and written back whole.
Loading is forgiving (a broken file yields an empty table and a warning);
saving is best-effort (a failed write is logged and reported through the
return value so a training run can carry on).

A ``QTable`` is not safe for concurrent use: training runs and
online-learning cycles must not operate on the same file at the same time.
"""

from __future__ import annotations

import math
from pathlib import Path

from agent_lightning.rl.actions import ACTIONS, OptimizationAction, parse_action
from agent_lightning.rl.state import KEY_SEPARATOR
from agent_lightning.services.storage import (
    Q_TABLE_FILENAME,
    StorageError,
    read_json,
    write_json_atomic,
)
from agent_lightning.utils.logging import get_logger

logger = get_logger(__name__)


def entry_key(state_key: str, action: str | OptimizationAction) -> str:
    return f"{state_key}{KEY_SEPARATOR}{parse_action(action).value}"


class QTable:
    """In-memory Q-value mapping backed by a JSON document.

    Args:
        path: Location of the persisted table.  A directory may be given,
            in which case ``q-table.json`` inside it is used.
    """

    def __init__(self, path: str | Path) -> None:
        path = Path(path)
        if path.suffix != ".json":
            path = path / Q_TABLE_FILENAME
        self.path = path
        self._values: dict[str, float] = {}

    # ------------------------------------------------------------------
    # Lookup / update
    # ------------------------------------------------------------------

    def get(self, state_key: str, action: str | OptimizationAction) -> float:
        return self._values.get(entry_key(state_key, action), 0.0)

    def set(self, state_key: str, action: str | OptimizationAction, value: float) -> None:
        self._values[entry_key(state_key, action)] = float(value)

    def max_value(self, state_key: str) -> float:
        """Best Q-value over all actions; absent entries count as 0.0."""
        return max(self.get(state_key, action) for action in ACTIONS)

    def nudge(self, action: str | OptimizationAction, amount: float) -> int:
        """Add *amount* to every stored entry for *action*.

        Returns:
            The number of entries that were adjusted.
        """
        suffix = f"{KEY_SEPARATOR}{parse_action(action).value}"
        adjusted = 0
        for key in list(self._values):
            if key.endswith(suffix):
                self._values[key] += amount
                adjusted += 1
        return adjusted

    def size(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def as_dict(self) -> dict[str, float]:
        return dict(self._values)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> bool:
        """Replace the in-memory table with the persisted one.

        Returns:
            ``True`` if entries were read from disk, ``False`` if the table
            started empty (no file, or the file could not be used).
        """
        self._values = {}
        if not self.path.exists():
            logger.debug("q_table_missing", path=str(self.path))
            return False

        try:
            raw = read_json(self.path)
            if not isinstance(raw, dict):
                raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
            values: dict[str, float] = {}
            for key, value in raw.items():
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"non-numeric Q-value for {key!r}: {value!r}")
                number = float(value)
                if not math.isfinite(number):
                    raise ValueError(f"non-finite Q-value for {key!r}")
                values[str(key)] = number
        except (OSError, ValueError, OverflowError, RecursionError) as exc:
            logger.warning(
                "q_table_load_failed",
                path=str(self.path),
                error=str(exc),
                fallback="empty",
            )
            return False

        self._values = values
        logger.info("q_table_loaded", path=str(self.path), entries=len(values))
        return True

    def save(self) -> bool:
        """Write the full table to disk atomically.

        Returns:
            ``True`` on success.  Failures are logged and return ``False``
            instead of raising.
        """
        try:
            write_json_atomic(self.path, self._values)
        except StorageError as exc:
            logger.warning("q_table_save_failed", path=str(self.path), error=str(exc))
            return False
        logger.debug("q_table_saved", path=str(self.path), entries=len(self._values))
        return True
