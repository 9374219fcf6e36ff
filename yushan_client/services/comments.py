"""Chapter comment endpoints."""

from typing import Any, Dict, Optional

from ..types import Page
from ._base import BaseService


COMMENT_NOT_FOUND = "Comment not found"


class CommentService(BaseService):

    async def list_by_chapter(self, chapter_id: Any, page: int = 0, size: int = 20) -> Page[Dict[str, Any]]:
        envelope = await self._call(
            self._client.light,
            "GET",
            f"/comments/chapter/{chapter_id}",
            "Failed to fetch comments",
            {404: "Comments not found"},
            params={"page": page, "size": size, "sort": "createTime", "order": "desc"},
        )
        return Page.from_dict(envelope.data)

    async def create(self, chapter_id: Any, content: str, is_spoiler: bool = False) -> Dict[str, Any]:
        envelope = await self._call(
            self._client.default,
            "POST",
            "/comments",
            "Failed to create comment",
            {400: "Invalid comment data", 404: "Chapter not found"},
            json={"chapterId": chapter_id, "content": content, "isSpoiler": is_spoiler},
        )
        return envelope.data

    async def edit(self, comment_id: Any, content: str, is_spoiler: Optional[bool] = None) -> Dict[str, Any]:
        envelope = await self._call(
            self._client.default,
            "PUT",
            f"/comments/{comment_id}",
            "Failed to edit comment",
            {400: "Invalid comment data", 404: COMMENT_NOT_FOUND},
            json={"content": content, "isSpoiler": is_spoiler},
        )
        return envelope.data

    async def delete(self, comment_id: Any) -> Any:
        envelope = await self._call(
            self._client.default,
            "DELETE",
            f"/comments/{comment_id}",
            "Failed to delete comment",
            {404: COMMENT_NOT_FOUND},
        )
        return envelope.data

    async def like(self, comment_id: Any) -> Any:
        envelope = await self._call(
            self._client.light,
            "POST",
            f"/comments/{comment_id}/like",
            "Failed to like comment",
            {404: COMMENT_NOT_FOUND},
            json={},
        )
        return envelope.data

    async def unlike(self, comment_id: Any) -> Any:
        envelope = await self._call(
            self._client.light,
            "POST",
            f"/comments/{comment_id}/unlike",
            "Failed to unlike comment",
            {404: COMMENT_NOT_FOUND},
            json={},
        )
        return envelope.data
