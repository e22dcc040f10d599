"""Unit tests for the Firebase document store client."""

import json

import httpx
import pytest

from luminous.core.config import Settings
from luminous.substrate.base import StoreNotConfiguredError, StoreRequestError
from luminous.substrate.document_store import (
    FirebaseDocumentStore,
    get_document_store,
    reset_document_store,
)

DATABASE_URL = "https://luminous-db.firebaseio.com"


def firebase_settings(**overrides) -> Settings:
    values = {
        "firebase_api_key": "api-key",
        "firebase_database_url": DATABASE_URL,
        "firebase_project_id": "luminous",
        "firebase_auth_token": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def store_with(handler, **overrides) -> FirebaseDocumentStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FirebaseDocumentStore(firebase_settings(**overrides), client=client)


def sse_body(*events: tuple[str, object]) -> bytes:
    chunks = [f"event: {name}\ndata: {json.dumps(data)}\n\n" for name, data in events]
    return "".join(chunks).encode()


class TestFirebaseConstruction:
    """Test cases for client construction."""

    def test_requires_configuration(self) -> None:
        with pytest.raises(StoreNotConfiguredError):
            FirebaseDocumentStore(firebase_settings(firebase_project_id=""))


@pytest.mark.asyncio
class TestFirebaseDocumentStore:
    """Test cases for REST operations."""

    async def test_put_writes_json_at_path(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"content": "hi"})

        store = store_with(handler, firebase_auth_token="db-secret")

        await store.put("logs/abc", {"content": "hi"})

        request = seen[0]
        assert request.method == "PUT"
        assert request.url.path == "/logs/abc.json"
        assert request.url.params["auth"] == "db-secret"
        assert json.loads(request.content) == {"content": "hi"}

    async def test_push_returns_generated_key(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"name": "-Nabc123"})

        store = store_with(handler)

        key = await store.push("snapshots", {"ts": 1})

        assert key == "-Nabc123"
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/snapshots.json"
        assert "auth" not in seen[0].url.params

    async def test_query_last_params(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"-a": {"ts": 1}})

        store = store_with(handler)

        records = await store.query_last("logs", 50)

        assert records == {"-a": {"ts": 1}}
        assert seen[0].url.params["orderBy"] == '"ts"'
        assert seen[0].url.params["limitToLast"] == "50"

    async def test_query_last_empty_collection(self) -> None:
        store = store_with(lambda request: httpx.Response(200, json=None))

        assert await store.query_last("snapshots", 1) == {}

    async def test_ping_failure_raises(self) -> None:
        store = store_with(lambda request: httpx.Response(401, json={"error": "Permission denied"}))

        with pytest.raises(StoreRequestError, match="401"):
            await store.ping()

    async def test_stream_decodes_events(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=sse_body(
                ("put", {"path": "/", "data": {"-a": {"ts": 1}}}),
                ("keep-alive", None),
                ("patch", {"path": "/-a", "data": {"ts": 2}}),
            ))

        store = store_with(handler)

        events = [event async for event in store.stream("logs", {"limitToLast": 5})]

        assert seen[0].headers["Accept"] == "text/event-stream"
        assert [event.event for event in events] == ["put", "keep-alive", "patch"]
        assert events[0].path == "/"
        assert events[0].data == {"-a": {"ts": 1}}
        assert events[1].data is None
        assert events[2].path == "/-a"

    async def test_stream_error_status_raises(self) -> None:
        store = store_with(lambda request: httpx.Response(403))

        with pytest.raises(StoreRequestError):
            async for _ in store.stream("logs"):
                pass

    async def test_watch_connectivity_signals(self) -> None:
        store = store_with(lambda request: httpx.Response(200, content=sse_body(
            ("put", {"path": "/", "data": None}),
            ("keep-alive", None),
            ("auth_revoked", "token expired"),
        )))

        signals = [connected async for connected in store.watch_connectivity()]

        assert signals == [True, True, False]

    async def test_watch_connectivity_cancel_raises(self) -> None:
        store = store_with(lambda request: httpx.Response(200, content=sse_body(
            ("cancel", "permission denied"),
        )))

        with pytest.raises(StoreRequestError, match="cancelled"):
            async for _ in store.watch_connectivity():
                pass


@pytest.mark.asyncio
class TestSharedDocumentStore:
    """Test cases for the shared handle."""

    async def test_unconfigured_returns_none(self) -> None:
        assert get_document_store(firebase_settings(firebase_api_key="")) is None

    async def test_handle_reused_per_configuration(self) -> None:
        try:
            first = get_document_store(firebase_settings())
            again = get_document_store(firebase_settings())
            other = get_document_store(firebase_settings(firebase_project_id="other"))

            assert first is again
            assert other is not first
        finally:
            await reset_document_store()

        assert get_document_store(firebase_settings()) is not first
        await reset_document_store()
