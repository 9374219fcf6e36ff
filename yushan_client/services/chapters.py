"""Chapter endpoints."""

from typing import Any, Dict, Optional

from ..types import Page
from ._base import BaseService


class ChapterService(BaseService):

    async def create_chapters(self, data: Dict[str, Any]) -> Any:
        envelope = await self._call(
            self._client.heavy,
            "POST",
            "/chapters",
            "Failed to create chapter",
            {400: "Invalid chapter data", 404: "Novel or chapter not found"},
            json=data,
        )
        return envelope.data

    async def edit_chapters(self, data: Dict[str, Any]) -> Any:
        envelope = await self._call(
            self._client.heavy,
            "PUT",
            "/chapters",
            "Failed to edit chapter",
            {400: "Invalid chapter data", 404: "Chapter not found"},
            json=data,
        )
        return envelope.data

    async def list_by_novel(
        self,
        novel_id: Any,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        published_only: Optional[bool] = None,
    ) -> Page[Dict[str, Any]]:
        envelope = await self._call(
            self._client.default,
            "GET",
            f"/chapters/novel/{novel_id}",
            "Failed to fetch chapters",
            {404: "Novel or chapters not found"},
            params={"page": page, "pageSize": page_size, "publishedOnly": published_only},
        )
        return Page.from_dict(envelope.data)

    async def get_next_chapter_number(self, novel_id: Any) -> Any:
        envelope = await self._call(
            self._client.default,
            "GET",
            f"/chapters/novel/{novel_id}/next-number",
            "Failed to get next chapter number",
            {404: "Novel not found"},
        )
        return envelope.data

    async def get_chapter(self, chapter_id: Any) -> Dict[str, Any]:
        envelope = await self._call(
            self._client.default,
            "GET",
            f"/chapters/{chapter_id}",
            "Failed to fetch chapter",
            {404: "Chapter not found"},
        )
        return envelope.data

    async def get_chapter_by_number(self, novel_id: Any, chapter_number: int) -> Dict[str, Any]:
        envelope = await self._call(
            self._client.default,
            "GET",
            f"/chapters/novel/{novel_id}/number/{chapter_number}",
            "Failed to fetch chapter",
            {404: "Chapter not found"},
        )
        return envelope.data

    async def delete_chapter(self, chapter_id: Any) -> Any:
        envelope = await self._call(
            self._client.default,
            "DELETE",
            f"/chapters/{chapter_id}",
            "Failed to delete chapter",
            {404: "Chapter not found"},
        )
        return envelope.data
