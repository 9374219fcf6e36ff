"""Personal library endpoints."""

from typing import Any, Dict

from ..types import Page
from ._base import BaseService


NOVEL_NOT_FOUND = "Novel not found"


class LibraryService(BaseService):

    async def add(self, novel_id: Any, progress: int = 1) -> Any:
        envelope = await self._call(
            self._client.default,
            "POST",
            f"/library/{novel_id}",
            "Failed to add to library",
            {400: "Invalid library data", 404: NOVEL_NOT_FOUND},
            json={"progress": progress},
        )
        return envelope.data

    async def remove(self, novel_id: Any) -> Any:
        envelope = await self._call(
            self._client.default,
            "DELETE",
            f"/library/{novel_id}",
            "Failed to remove from library",
            {404: NOVEL_NOT_FOUND},
        )
        return envelope.data

    async def check(self, novel_id: Any) -> bool:
        """True only when the backend answers exactly ``true``."""
        envelope = await self._call(
            self._client.light,
            "GET",
            f"/library/check/{novel_id}",
            "Failed to check library",
            {404: NOVEL_NOT_FOUND},
        )
        return envelope.data is True

    async def list(self, page: int = 0, size: int = 20, **filters: Any) -> Page[Dict[str, Any]]:
        envelope = await self._call(
            self._client.default,
            "GET",
            "/library",
            "Failed to fetch library",
            params={"page": page, "size": size, **filters},
        )
        return Page.from_dict(envelope.data)

    async def get(self, novel_id: Any) -> Dict[str, Any]:
        envelope = await self._call(
            self._client.default,
            "GET",
            f"/library/{novel_id}",
            "Failed to fetch library entry",
            {404: NOVEL_NOT_FOUND},
        )
        return envelope.data
