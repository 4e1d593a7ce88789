"""HTTP client for the notification endpoints."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx


class NotificationApi:
    """Thin async wrapper over the ``/notifications`` HTTP surface."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def connect(cls, base_url: str, token: str, *, timeout: float = 10.0) -> "NotificationApi":
        return cls(
            httpx.AsyncClient(
                base_url=base_url,
                timeout=timeout,
                headers={
                    "Accept": "application/json",
                    "Authorization": f"Bearer {token}",
                },
            )
        )

    async def list_notifications(self) -> list[dict[str, Any]]:
        response = await self._client.get("/notifications")
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, list):
            raise ValueError("Expected a list of notifications")
        if not all(isinstance(item, Mapping) for item in data):
            raise ValueError("Expected every notification to be an object")
        return data

    async def mark_as_read(self, notification_id: str) -> dict[str, Any]:
        response = await self._client.post(f"/notifications/{notification_id}/read")
        response.raise_for_status()
        return response.json()

    async def mark_all_as_read(self) -> int:
        response = await self._client.post("/notifications/mark-all-read")
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Expected an object from mark-all-read")
        updated = data.get("updated", 0)
        if not isinstance(updated, int):
            raise ValueError("Expected an integer count from mark-all-read")
        return updated

    async def delete(self, notification_id: str) -> None:
        response = await self._client.delete(f"/notifications/{notification_id}")
        response.raise_for_status()

    async def delete_all(self) -> None:
        response = await self._client.delete("/notifications")
        response.raise_for_status()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "NotificationApi":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["NotificationApi"]
