"""Tavily search wrapper with async support."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from tavily import AsyncTavilyClient

logger = logging.getLogger(__name__)

MAX_EXTRACT_CHARS = 5000


class SearchClient:
    """Async Tavily search client."""

    def __init__(self, api_key: str | None = None):
        key = api_key or os.environ.get("TAVILY_API_KEY")
        if not key:
            raise ValueError(
                "Tavily API key required. Set TAVILY_API_KEY env var or pass api_key."
            )
        self.client = AsyncTavilyClient(api_key=key)

    async def search(
        self,
        query: str,
        max_results: int = 10,
        search_depth: str = "advanced",
        include_raw_content: bool = True,
    ) -> list[dict]:
        """Search and return list of {title, url, content} dicts."""
        logger.info("Searching: %s", query)
        try:
            response = await self.client.search(
                query=query,
                max_results=max_results,
                search_depth=search_depth,
                include_raw_content=include_raw_content,
            )
        except Exception:
            logger.error("Search failed", exc_info=True)
            raise
        return [
            {
                "title": r.get("title") or "",
                "url": r.get("url") or "",
                "content": r.get("content") or r.get("raw_content") or "",
            }
            for r in response.get("results", [])
        ]

    async def extract(self, url: str) -> str:
        """Fetch the readable text of a page, truncated to MAX_EXTRACT_CHARS."""
        logger.info("Extracting content from: %s", url)
        try:
            response = await self.client.extract(urls=[url])
        except Exception:
            logger.warning("Extract failed for %s", url, exc_info=True)
            raise
        for r in response.get("results", []):
            text = " ".join((r.get("raw_content") or "").split())
            if text:
                return text[:MAX_EXTRACT_CHARS]
        return ""


def build_search_client(env: Mapping[str, str] | None = None) -> SearchClient | None:
    """Return a SearchClient when TAVILY_API_KEY is set, otherwise None."""
    env = os.environ if env is None else env
    key = (env.get("TAVILY_API_KEY") or "").strip()
    if not key:
        return None
    return SearchClient(api_key=key)
