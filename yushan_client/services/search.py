"""Search endpoints. All calls use the light client."""

import asyncio
from typing import Any, Dict, Tuple

from ..types import SearchResult
from ._base import BaseService


class SearchService(BaseService):

    def _params(self, query: str, page: int, size: int) -> Dict[str, Any]:
        return {
            "q": query,
            "page": page,
            "size": size,
            "sortBy": "created_at",
            "sortOrder": "DESC",
        }

    async def search_novels(self, query: str, page: int = 1, size: int = 10) -> Tuple[list, int]:
        """Return ``(novels, novel_count)``."""
        envelope = await self._call(
            self._client.light,
            "GET",
            "/search/novels",
            "Failed to search novels",
            params=self._params(query, page, size),
        )
        result = SearchResult.from_dict(envelope.data)
        return result.novels, result.novel_count

    async def search_chapters(self, query: str, page: int = 1, size: int = 10) -> Tuple[list, int]:
        """Return ``(chapters, chapter_count)``."""
        envelope = await self._call(
            self._client.light,
            "GET",
            "/search/chapters",
            "Failed to search chapters",
            params=self._params(query, page, size),
        )
        result = SearchResult.from_dict(envelope.data)
        return result.chapters, result.chapter_count

    async def search_all(self, query: str, page: int = 1, size: int = 10) -> SearchResult:
        """Search novels and chapters concurrently."""
        (novels, novel_count), (chapters, chapter_count) = await asyncio.gather(
            self.search_novels(query, page, size),
            self.search_chapters(query, page, size),
        )
        return SearchResult(
            novels=novels,
            novel_count=novel_count,
            chapters=chapters,
            chapter_count=chapter_count,
        )

    async def search(self, query: str, page: int = 0, size: int = 10) -> SearchResult:
        """Combined search endpoint (zero-based pages)."""
        envelope = await self._call(
            self._client.light,
            "GET",
            "/search",
            "Search failed",
            params=self._params(query, page, size),
        )
        return SearchResult.from_dict(envelope.data)
