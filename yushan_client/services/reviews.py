"""Novel review endpoints."""

from typing import Any, Dict, Optional

from ..types import Page
from ._base import BaseService


REVIEW_NOT_FOUND = "Review not found"


class ReviewService(BaseService):

    async def list_by_novel(
        self,
        novel_id: Any,
        page: int = 0,
        size: int = 10,
        sort: str = "createTime",
        order: str = "desc",
    ) -> Page[Dict[str, Any]]:
        envelope = await self._call(
            self._client.default,
            "GET",
            f"/reviews/novel/{novel_id}",
            "Failed to fetch reviews",
            {404: "Novel not found"},
            params={"page": page, "size": size, "sort": sort, "order": order},
        )
        return Page.from_dict(envelope.data)

    async def create(self, novel_id: Any, rating: int, text: str, is_spoiler: bool = False) -> Dict[str, Any]:
        """Post a review. The single text field is sent as both title and content."""
        envelope = await self._call(
            self._client.default,
            "POST",
            "/reviews",
            "Failed to create review",
            {400: "Invalid review data", 404: "Novel not found", 409: "You have already reviewed this novel"},
            json={
                "novelId": novel_id,
                "rating": rating,
                "title": text,
                "content": text,
                "isSpoiler": bool(is_spoiler),
            },
        )
        return envelope.data

    async def edit(
        self,
        review_id: Any,
        rating: Optional[int] = None,
        title: Optional[str] = None,
        content: Optional[str] = None,
        is_spoiler: Optional[bool] = None,
    ) -> Dict[str, Any]:
        envelope = await self._call(
            self._client.default,
            "PUT",
            f"/reviews/{review_id}",
            "Failed to edit review",
            {400: "Invalid review data", 404: REVIEW_NOT_FOUND},
            json={"rating": rating, "title": title, "content": content, "isSpoiler": is_spoiler},
        )
        return envelope.data

    async def delete(self, review_id: Any) -> Any:
        envelope = await self._call(
            self._client.default,
            "DELETE",
            f"/reviews/{review_id}",
            "Failed to delete review",
            {404: REVIEW_NOT_FOUND},
        )
        return envelope.data

    async def like(self, review_id: Any) -> Any:
        envelope = await self._call(
            self._client.light,
            "POST",
            f"/reviews/{review_id}/like",
            "Failed to like review",
            {404: REVIEW_NOT_FOUND},
            json={},
        )
        return envelope.data

    async def unlike(self, review_id: Any) -> Any:
        envelope = await self._call(
            self._client.light,
            "POST",
            f"/reviews/{review_id}/unlike",
            "Failed to unlike review",
            {404: REVIEW_NOT_FOUND},
            json={},
        )
        return envelope.data

    async def get_my_review(self, novel_id: Any) -> Optional[Dict[str, Any]]:
        envelope = await self._call(
            self._client.default,
            "GET",
            f"/reviews/my-reviews/novel/{novel_id}",
            "Failed to fetch your review",
        )
        return envelope.data
