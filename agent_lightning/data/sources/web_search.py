"""
JSON search API connector.

Queries a configurable search endpoint (``settings.search_endpoint``) with
``?q=<keyword>`` and expects a JSON body shaped either as a list of hits
or as ``{"results": [...]}``.  Each hit may carry ``title``, ``url``,
``snippet`` and ``source`` fields; anything else is ignored.
"""

from __future__ import annotations

from typing import Any

import aiohttp

from agent_lightning.data.sources.base import SearchSource, SourceRecord
from agent_lightning.utils.logging import get_logger

logger = get_logger(__name__)


class HttpSearchSource(SearchSource):
    """Connector for a JSON search endpoint.

    Args:
        endpoint: Base URL of the search API.
        request_timeout: Per-request HTTP timeout in seconds.
        max_results: Hits kept per keyword.
    """

    def __init__(
        self,
        endpoint: str,
        request_timeout: float = 15.0,
        max_results: int = 10,
    ) -> None:
        super().__init__(name="http_search")
        self.endpoint = endpoint
        self.request_timeout = request_timeout
        self.max_results = max_results

    async def lookup(self, keyword: str) -> list[SourceRecord]:
        payload = await self._get_json(keyword)
        hits = payload.get("results", []) if isinstance(payload, dict) else payload
        if not isinstance(hits, list):
            raise ValueError(f"Unexpected search payload for {keyword!r}")

        records = [
            self._to_record(hit, keyword)
            for hit in hits[: self.max_results]
            if isinstance(hit, dict)
        ]
        logger.debug("search_lookup", keyword=keyword, hits=len(records))
        return records

    async def _get_json(self, keyword: str) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.request_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self.endpoint, params={"q": keyword}) as resp:
                resp.raise_for_status()
                return await resp.json(content_type=None)

    def _to_record(self, hit: dict[str, Any], keyword: str) -> SourceRecord:
        return SourceRecord(
            source=str(hit.get("source", self.name)),
            title=str(hit.get("title", "")),
            url=str(hit.get("url", "")),
            snippet=str(hit.get("snippet", hit.get("description", ""))),
            keyword=keyword,
        )
