"""Offline search source used when no search endpoint is configured."""

from __future__ import annotations

from urllib.parse import quote

from agent_lightning.data.sources.base import SearchSource, SourceRecord
from agent_lightning.services.storage import ConfigStore


class SimulatedSearchSource(SearchSource):
    """Returns one placeholder hit per configured source for every keyword.

    Args:
        sources: Fixed source names to attribute hits to.
        config_store: When given, ``search.sources`` is re-read from the
            stored config on every lookup and *sources* is ignored.
    """

    def __init__(
        self,
        sources: list[str] | None = None,
        config_store: ConfigStore | None = None,
    ) -> None:
        super().__init__(name="simulated")
        self.sources = list(sources) if sources else ["google"]
        self.config_store = config_store

    def current_sources(self) -> list[str]:
        if self.config_store is not None:
            return list(self.config_store.load().search.sources)
        return self.sources

    async def lookup(self, keyword: str) -> list[SourceRecord]:
        slug = quote(keyword.lower().replace(" ", "-"))
        return [
            SourceRecord(
                source=source,
                title=f"{keyword}: latest guide",
                url=f"https://example.com/{source}/{slug}",
                snippet=f"Up-to-date notes on {keyword}",
                keyword=keyword,
            )
            for source in self.current_sources()
        ]
