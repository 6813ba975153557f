"""
Base search source interface for the online-learning loop.

Every connector normalises its results into :class:`SourceRecord` objects
so the insight extraction step can treat all sources the same way.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class SourceRecord:
    """One search hit returned for a keyword.

    Attributes:
        source: Where the hit came from (e.g. "google", "github").
        title: Headline of the page or post.
        url: Link back to the original resource.
        snippet: Short excerpt used for insight extraction.
        keyword: The keyword that produced this hit.
        fetched_at: When the record was retrieved.
    """

    source: str
    title: str
    url: str = ""
    snippet: str = ""
    keyword: str = ""
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["fetched_at"] = self.fetched_at.isoformat()
        return data


class SearchSource(ABC):
    """Abstract base class for keyword search connectors."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def lookup(self, keyword: str) -> list[SourceRecord]:
        """Return search hits for *keyword*."""
        ...
