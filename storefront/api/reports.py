from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .client import APIClient


class ReportsAPI:
    def __init__(self, client: "APIClient"):
        self.client = client

    async def get_analytics(self, params: dict) -> dict:
        return await self.client.get("/reports/analytics", params=params)

    async def export_csv(self, params: dict) -> bytes:
        return await self.client.download("/reports/export/csv", params=params)

    async def export_pdf(self, params: dict) -> bytes:
        return await self.client.download("/reports/export/pdf", params=params)
