"""Firebase Realtime Database client over the REST and streaming APIs.

Records live under ``{database_url}/{path}.json``. Live views use the
server-sent-events flavour of the same endpoints: the server sends a
``put`` or ``patch`` event for every change plus periodic ``keep-alive``
events, and ``cancel`` / ``auth_revoked`` when access is withdrawn.
"""

import json
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

import httpx

from ..core.config import Settings
from .base import StoreNotConfiguredError, StoreRequestError

logger = logging.getLogger(__name__)


@dataclass
class StreamEvent:
    """A single decoded server-sent event."""

    event: str
    path: str | None = None
    data: Any = None


async def iter_sse_events(response: httpx.Response) -> AsyncIterator[StreamEvent]:
    """Decode an event-stream response into StreamEvents."""
    event_name: str | None = None
    data_lines: list[str] = []

    async for line in response.aiter_lines():
        if line.startswith("event:"):
            event_name = line[len("event:"):].strip()
        elif line.startswith("data:"):
            data_lines.append(line[len("data:"):].strip())
        elif not line.strip():
            if event_name is None:
                data_lines = []
                continue
            raw = "\n".join(data_lines)
            path = None
            data: Any = None
            if raw and raw != "null":
                try:
                    decoded = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning(f"⚠️ Undecodable stream payload for '{event_name}': {raw[:80]}")
                    decoded = raw
                if isinstance(decoded, dict) and "path" in decoded:
                    path = decoded.get("path")
                    data = decoded.get("data")
                else:
                    data = decoded
            yield StreamEvent(event=event_name, path=path, data=data)
            event_name = None
            data_lines = []


class FirebaseDocumentStore:
    """Async document store client for one Firebase database."""

    def __init__(self, config: Settings, client: httpx.AsyncClient | None = None):
        if not config.document_store_configured:
            raise StoreNotConfiguredError(
                "Firebase API key, database URL and project ID are required"
            )
        self.database_url = config.firebase_database_url
        self.project_id = config.firebase_project_id
        self.presence_path = config.firebase_presence_path
        self._auth_token = config.firebase_auth_token
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.probe_timeout_seconds, read=None)
        )

    def _url(self, path: str) -> str:
        return f"{self.database_url}/{path.strip('/')}.json"

    def _params(self, extra: dict[str, Any] | None = None) -> dict[str, Any]:
        params = dict(extra or {})
        if self._auth_token:
            params["auth"] = self._auth_token
        return params

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        payload: Any = None,
    ) -> Any:
        try:
            response = await self.client.request(
                method,
                self._url(path),
                params=self._params(params),
                json=payload,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise StoreRequestError(
                f"Firebase {method} {path} returned {e.response.status_code}"
            ) from e
        except (httpx.RequestError, ValueError) as e:
            raise StoreRequestError(f"Firebase {method} {path} failed: {e}") from e

    async def put(self, path: str, record: dict[str, Any]) -> None:
        """Write a record at an explicit path."""
        await self._request("PUT", path, payload=record)

    async def push(self, collection: str, record: dict[str, Any]) -> str:
        """Append a record under a server-generated chronological key.

        Returns:
            The generated key
        """
        result = await self._request("POST", collection, payload=record)
        return result["name"]

    async def query_last(
        self, collection: str, limit: int, order_by: str = "ts"
    ) -> dict[str, Any]:
        """Fetch the last ``limit`` children of a collection ordered by a field."""
        result = await self._request(
            "GET",
            collection,
            params={"orderBy": json.dumps(order_by), "limitToLast": limit},
        )
        return result or {}

    async def ping(self) -> None:
        """Liveness probe; raises StoreRequestError when unreachable."""
        await self._request("GET", "", params={"shallow": "true"})

    async def stream(
        self, path: str, params: dict[str, Any] | None = None
    ) -> AsyncIterator[StreamEvent]:
        """Open a standing subscription on ``path``.

        The connection stays open until the caller stops iterating; closing
        the generator releases it.
        """
        headers = {"Accept": "text/event-stream"}
        try:
            async with self.client.stream(
                "GET",
                self._url(path),
                params=self._params(params),
                headers=headers,
                follow_redirects=True,
            ) as response:
                if not response.is_success:
                    raise StoreRequestError(
                        f"Firebase stream {path} returned {response.status_code}"
                    )
                logger.debug(f"📡 Firebase stream opened on '{path}'")
                async for event in iter_sse_events(response):
                    yield event
        except httpx.RequestError as e:
            raise StoreRequestError(f"Firebase stream {path} failed: {e}") from e

    async def watch_connectivity(self) -> AsyncIterator[bool]:
        """Yield the connectivity signal on every stream event.

        ``True`` while the stream delivers data or keep-alives, ``False``
        when authorization is revoked. A ``cancel`` event means the rules
        refused the read and is raised as an error.
        """
        async for event in self.stream(self.presence_path):
            if event.event in ("put", "patch", "keep-alive"):
                yield True
            elif event.event == "auth_revoked":
                yield False
            elif event.event == "cancel":
                raise StoreRequestError(f"Firebase cancelled presence stream: {event.data}")

    async def close(self) -> None:
        await self.client.aclose()


# Shared connection handle, created lazily once per configuration
_document_store: FirebaseDocumentStore | None = None
_document_store_fingerprint: tuple[str, ...] | None = None


def get_document_store(config: Settings) -> FirebaseDocumentStore | None:
    """Get the shared document store for ``config``.

    The handle is reused while the connection settings are unchanged and
    re-created when they change. The replaced client is not closed here;
    call ``reset_document_store`` first to release it.

    Returns:
        The shared store, or None when Firebase is not configured
    """
    global _document_store, _document_store_fingerprint

    if not config.document_store_configured:
        return None

    fingerprint = config.fingerprint()
    if _document_store is None or _document_store_fingerprint != fingerprint:
        _document_store = FirebaseDocumentStore(config)
        _document_store_fingerprint = fingerprint
        logger.info(f"🔌 Document store handle created for project {config.firebase_project_id}")

    return _document_store


async def reset_document_store() -> None:
    """Close and forget the shared document store handle."""
    global _document_store, _document_store_fingerprint

    if _document_store is not None:
        await _document_store.close()
    _document_store = None
    _document_store_fingerprint = None
