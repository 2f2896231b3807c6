from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .client import APIClient


BASE = "/admin/comments"


class CommentsAPI:
    """Comment moderation endpoints of the admin API."""

    def __init__(self, client: "APIClient"):
        self.client = client

    async def get_comments(self, params: dict) -> dict:
        """Returns {"comments": [...], "analytics": ..., "moderationSettings": ...}."""
        return await self.client.get(BASE, params=params)

    async def get_comment_by_id(self, comment_id: str) -> dict:
        return await self.client.get(f"{BASE}/{comment_id}")

    async def create_comment(self, comment_data: dict) -> dict:
        return await self.client.post(BASE, json=comment_data)

    async def update_comment(self, comment_id: str, update_data: dict) -> dict:
        return await self.client.put(f"{BASE}/{comment_id}", json=update_data)

    async def delete_comment(self, comment_id: str, permanent: bool = False) -> dict:
        return await self.client.delete(f"{BASE}/{comment_id}", json={"permanent": permanent})

    # Moderation

    async def approve_comment(self, comment_id: str, note: Optional[str] = None) -> dict:
        return await self.client.patch(f"{BASE}/{comment_id}/approve", json={"note": note})

    async def reject_comment(self, comment_id: str, reason: Optional[str] = None) -> dict:
        return await self.client.patch(f"{BASE}/{comment_id}/reject", json={"reason": reason})

    async def mark_as_spam(self, comment_id: str) -> dict:
        return await self.client.patch(f"{BASE}/{comment_id}/spam")

    async def restore_comment(self, comment_id: str) -> dict:
        return await self.client.patch(f"{BASE}/{comment_id}/restore")

    async def bulk_operation(self, operation: dict) -> dict:
        return await self.client.post(f"{BASE}/bulk", json=operation)

    # Analytics

    async def get_analytics(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        product_id: Optional[str] = None,
    ) -> dict:
        return await self.client.get(f"{BASE}/analytics", params={
            "startDate": start_date.isoformat() if start_date else None,
            "endDate": end_date.isoformat() if end_date else None,
            "productId": product_id,
        })

    async def analyze_sentiment(self, comment_id: str) -> dict:
        return await self.client.post(f"{BASE}/{comment_id}/analyze-sentiment")

    async def run_spam_detection(self, comment_ids: Optional[list[str]] = None) -> dict:
        return await self.client.post(f"{BASE}/spam-detection", json={"commentIds": comment_ids})

    async def get_user_comment_history(self, user_id: str, page: int = 1, limit: int = 20) -> dict:
        return await self.client.get(f"{BASE}/user/{user_id}", params={"page": page, "limit": limit})

    # Settings

    async def get_moderation_settings(self) -> dict:
        return await self.client.get(f"{BASE}/moderation-settings")

    async def update_moderation_settings(self, settings: dict) -> dict:
        return await self.client.put(f"{BASE}/moderation-settings", json=settings)

    async def toggle_auto_moderation(self, enabled: bool) -> dict:
        return await self.client.post(f"{BASE}/auto-moderation/toggle", json={"enabled": enabled})

    async def export_comments(self, export_format: str, params: dict) -> bytes:
        return await self.client.download(f"{BASE}/export/{export_format}", params=params)
