from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .client import APIClient


class AuthAPI:
    def __init__(self, client: "APIClient"):
        self.client = client

    async def register(self, user_data: dict) -> dict:
        """Returns {"token": ..., "user": {...}}."""
        return await self.client.post("/auth/register", json=user_data)

    async def login(self, email: str, password: str) -> dict:
        """Returns {"token": ..., "user": {...}}."""
        return await self.client.post("/auth/login", json={"email": email, "password": password})

    async def get_profile(self) -> dict:
        return await self.client.get("/auth/profile")

    async def update_profile(self, user_data: dict) -> dict:
        return await self.client.put("/auth/profile", json=user_data)

    async def change_password(self, current_password: str, new_password: str) -> dict:
        return await self.client.put("/auth/change-password", json={
            "currentPassword": current_password,
            "newPassword": new_password,
        })
