"""Novel endpoints. Uploads and edits go through the heavy client."""

from typing import Any, Dict, Optional

from ..types import Page
from ._base import BaseService


NOVEL_NOT_FOUND = "Novel not found"


class NovelService(BaseService):
    """Novel CRUD, moderation state changes, votes and view counts."""

    async def create_novel(self, data: Dict[str, Any]) -> Dict[str, Any]:
        envelope = await self._call(
            self._client.heavy,
            "POST",
            "/novels",
            "Failed to create novel",
            {400: "Invalid novel data", 404: NOVEL_NOT_FOUND},
            json=data,
        )
        return envelope.data

    async def list_novels(
        self,
        page: int = 0,
        size: int = 24,
        category: Optional[Any] = None,
        status: Optional[Any] = None,
        sort: str = "createTime",
        order: str = "desc",
        **filters: Any,
    ) -> Page[Dict[str, Any]]:
        """List novels; ``category`` and ``status`` are only sent when given."""
        params: Dict[str, Any] = {"page": page, "size": size, "sort": sort, "order": order, **filters}
        if category:
            params["category"] = category
        if status is not None:
            params["status"] = status

        envelope = await self._call(
            self._client.light,
            "GET",
            "/novels",
            "Failed to fetch novels",
            {404: NOVEL_NOT_FOUND},
            params=params,
        )
        return Page.from_dict(envelope.data)

    async def get_novel(self, novel_id: Any) -> Dict[str, Any]:
        envelope = await self._call(
            self._client.default,
            "GET",
            f"/novels/{novel_id}",
            "Failed to fetch novel",
            {404: NOVEL_NOT_FOUND},
        )
        return envelope.data

    async def update_novel(self, novel_id: Any, data: Dict[str, Any]) -> Dict[str, Any]:
        envelope = await self._call(
            self._client.heavy,
            "PUT",
            f"/novels/{novel_id}",
            "Failed to update novel",
            {400: "Invalid novel data", 404: NOVEL_NOT_FOUND},
            json=data,
        )
        return envelope.data

    async def hide_novel(self, novel_id: Any) -> Any:
        return await self._action(novel_id, "hide", "Failed to hide novel")

    async def unhide_novel(self, novel_id: Any) -> Any:
        return await self._action(novel_id, "unhide", "Failed to unhide novel")

    async def submit_for_review(self, novel_id: Any) -> Any:
        return await self._action(novel_id, "submit-review", "Failed to submit novel for review")

    async def delete_novel(self, novel_id: Any) -> Any:
        # Novels are archived, never hard-deleted.
        return await self._action(novel_id, "archive", "Failed to delete novel")

    async def vote(self, novel_id: Any) -> Dict[str, Any]:
        """Vote for a novel; returns ``{novelId, voteCount, isVoted, remainedYuan}``."""
        envelope = await self._call(
            self._client.default,
            "POST",
            f"/votes/novels/{novel_id}",
            "Failed to vote for novel",
            {404: NOVEL_NOT_FOUND},
            json={},
        )
        return envelope.data

    async def add_view(self, novel_id: Any) -> Any:
        envelope = await self._call(
            self._client.light,
            "POST",
            f"/novels/{novel_id}/view",
            "Failed to record view",
            json={},
        )
        return envelope.data

    async def _action(self, novel_id: Any, action: str, default: str) -> Any:
        envelope = await self._call(
            self._client.default,
            "POST",
            f"/novels/{novel_id}/{action}",
            default,
            {404: NOVEL_NOT_FOUND},
            json={},
        )
        return envelope.data
