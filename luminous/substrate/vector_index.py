"""Pinecone index client, used for liveness probing."""

from typing import Any

import httpx

from ..core.config import Settings
from .base import StoreNotConfiguredError, StoreRequestError


class PineconeIndexClient:
    """Minimal client for a single Pinecone index host."""

    def __init__(self, config: Settings, client: httpx.AsyncClient | None = None):
        if not config.vector_index_configured:
            raise StoreNotConfiguredError("Pinecone API key and host are required")
        self.host = config.pinecone_host
        self._headers = {"Api-Key": config.pinecone_api_key}
        self.client = client or httpx.AsyncClient(timeout=config.probe_timeout_seconds)

    async def describe_index_stats(self) -> dict[str, Any]:
        """Fetch index statistics (dimension, vector counts per namespace)."""
        try:
            response = await self.client.get(
                f"{self.host}/describe_index_stats", headers=self._headers
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise StoreRequestError(
                f"Pinecone stats returned {e.response.status_code}"
            ) from e
        except (httpx.RequestError, ValueError) as e:
            raise StoreRequestError(f"Pinecone stats failed: {e}") from e

    async def ping(self) -> None:
        await self.describe_index_stats()

    async def close(self) -> None:
        await self.client.aclose()
