"""List-backed cache clients: Upstash REST and plain Redis.

Upstash exposes Redis commands over HTTPS: a command is POSTed as a JSON
array and authenticated with a bearer token. When only a Redis URL is
configured the same operations go through ``redis.asyncio``.
"""

import logging
from typing import Any

import httpx
import redis.asyncio as redis
from redis.exceptions import RedisError

from ..core.config import Settings
from .base import ListStore, StoreNotConfiguredError, StoreRequestError

logger = logging.getLogger(__name__)


class UpstashListStore(ListStore):
    """List operations over the Upstash REST API."""

    def __init__(self, url: str, token: str, client: httpx.AsyncClient | None = None,
                 timeout: float = 5.0):
        if not url or not token:
            raise StoreNotConfiguredError("Upstash URL and token are required")
        self.url = url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"}
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def _command(self, *args: Any) -> Any:
        try:
            response = await self.client.post(
                self.url, headers=self._headers, json=[str(arg) for arg in args]
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise StoreRequestError(
                f"Upstash {args[0]} failed with status {e.response.status_code}"
            ) from e
        except (httpx.RequestError, ValueError) as e:
            raise StoreRequestError(f"Upstash {args[0]} failed: {e}") from e

        if "error" in payload:
            raise StoreRequestError(f"Upstash {args[0]} error: {payload['error']}")
        return payload.get("result")

    async def push(self, key: str, value: str) -> int:
        return int(await self._command("LPUSH", key, value))

    async def trim(self, key: str, start: int, end: int) -> None:
        await self._command("LTRIM", key, start, end)

    async def range(self, key: str, start: int, end: int) -> list[str]:
        result = await self._command("LRANGE", key, start, end)
        return list(result or [])

    async def ping(self) -> None:
        try:
            response = await self.client.get(f"{self.url}/info", headers=self._headers)
        except httpx.RequestError as e:
            raise StoreRequestError(f"Upstash unreachable: {e}") from e
        if not response.is_success:
            raise StoreRequestError(f"Upstash probe returned {response.status_code}")

    async def close(self) -> None:
        await self.client.aclose()


class RedisListStore(ListStore):
    """List operations against a Redis server."""

    def __init__(self, redis_url: str, redis_client: redis.Redis | None = None):
        if not redis_url and redis_client is None:
            raise StoreNotConfiguredError("Redis URL is required")
        self.redis_client = redis_client or redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True
        )

    async def push(self, key: str, value: str) -> int:
        try:
            return await self.redis_client.lpush(key, value)
        except RedisError as e:
            raise StoreRequestError(f"Redis LPUSH failed: {e}") from e

    async def trim(self, key: str, start: int, end: int) -> None:
        try:
            await self.redis_client.ltrim(key, start, end)
        except RedisError as e:
            raise StoreRequestError(f"Redis LTRIM failed: {e}") from e

    async def range(self, key: str, start: int, end: int) -> list[str]:
        try:
            return list(await self.redis_client.lrange(key, start, end))
        except RedisError as e:
            raise StoreRequestError(f"Redis LRANGE failed: {e}") from e

    async def ping(self) -> None:
        try:
            await self.redis_client.ping()
        except (RedisError, OSError) as e:
            raise StoreRequestError(f"Redis ping failed: {e}") from e

    async def close(self) -> None:
        await self.redis_client.aclose()
        logger.info("Disconnected from Redis")


def create_list_store(config: Settings) -> ListStore | None:
    """Build the configured list store, preferring Upstash over Redis.

    Returns:
        A list store, or None when neither backend is configured
    """
    if config.upstash_configured:
        return UpstashListStore(
            config.upstash_url,
            config.upstash_token,
            timeout=config.probe_timeout_seconds,
        )
    if config.redis_url:
        return RedisListStore(config.redis_url)
    return None
