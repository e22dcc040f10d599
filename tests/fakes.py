"""In-memory stand-ins for the external stores and model backends."""

import asyncio
from typing import Any

from luminous.cognition.backends.base import ModelBackend, ModelBackendError
from luminous.substrate.base import ListStore, StoreRequestError
from luminous.substrate.document_store import StreamEvent


class InMemoryDocumentStore:
    """Document store keeping collections as dicts of records.

    Streams replay the collection once, then emit a put event per write.
    """

    def __init__(self, connectivity: list[bool] | None = None):
        self.data: dict[str, dict[str, Any]] = {}
        self.connectivity = connectivity if connectivity is not None else [True]
        self.fail_ping = False
        self.fail_writes = False
        self.fail_streams = 0
        self.stream_calls = 0
        self.closed = False
        self._counter = 0
        self._subscribers: dict[str, list[asyncio.Queue]] = {}

    def _write(self, collection: str, key: str, record: dict[str, Any]) -> None:
        if self.fail_writes:
            raise StoreRequestError("write refused")
        self.data.setdefault(collection, {})[key] = record
        for queue in self._subscribers.get(collection, []):
            queue.put_nowait(StreamEvent(event="put", path=f"/{key}", data=record))

    async def put(self, path: str, record: dict[str, Any]) -> None:
        collection, key = path.split("/", 1)
        self._write(collection, key, record)

    async def push(self, collection: str, record: dict[str, Any]) -> str:
        self._counter += 1
        key = f"-push{self._counter:05d}"
        self._write(collection, key, record)
        return key

    async def query_last(self, collection: str, limit: int, order_by: str = "ts") -> dict[str, Any]:
        items = sorted(
            self.data.get(collection, {}).items(),
            key=lambda item: item[1].get(order_by, 0) if isinstance(item[1], dict) else 0,
        )
        return dict(items[-limit:])

    async def ping(self) -> None:
        if self.fail_ping:
            raise StoreRequestError("unreachable")

    async def stream(self, path: str, params: dict[str, Any] | None = None):
        self.stream_calls += 1
        if self.fail_streams > 0:
            self.fail_streams -= 1
            raise StoreRequestError("stream dropped")
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.setdefault(path, []).append(queue)
        try:
            yield StreamEvent(event="put", path="/", data=dict(self.data.get(path, {})))
            while True:
                yield await queue.get()
        finally:
            self._subscribers[path].remove(queue)

    async def watch_connectivity(self):
        for connected in self.connectivity:
            yield connected
        await asyncio.Event().wait()

    async def close(self) -> None:
        self.closed = True


class InMemoryListStore(ListStore):
    """List store with Redis LPUSH/LTRIM/LRANGE semantics."""

    def __init__(self):
        self.lists: dict[str, list[str]] = {}
        self.fail_ping = False
        self.fail_trim = False
        self.closed = False

    @staticmethod
    def _bounds(length: int, start: int, end: int) -> tuple[int, int]:
        if start < 0:
            start = max(length + start, 0)
        if end < 0:
            end = length + end
        return start, min(end, length - 1)

    async def push(self, key: str, value: str) -> int:
        items = self.lists.setdefault(key, [])
        items.insert(0, value)
        return len(items)

    async def trim(self, key: str, start: int, end: int) -> None:
        if self.fail_trim:
            raise StoreRequestError("trim refused")
        items = self.lists.get(key, [])
        start, end = self._bounds(len(items), start, end)
        self.lists[key] = items[start:end + 1]

    async def range(self, key: str, start: int, end: int) -> list[str]:
        items = self.lists.get(key, [])
        start, end = self._bounds(len(items), start, end)
        return items[start:end + 1]

    async def ping(self) -> None:
        if self.fail_ping:
            raise StoreRequestError("unreachable")

    async def close(self) -> None:
        self.closed = True


class ScriptedBackend(ModelBackend):
    """Backend returning a fixed reply, or raising a fixed error."""

    def __init__(self, reply: str = "I am here.", error: str | None = None,
                 gate: asyncio.Event | None = None):
        self.reply = reply
        self.error = error
        self.gate = gate
        self.started = asyncio.Event()
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    @property
    def model_name(self) -> str:
        return "scripted"

    async def generate(self, prompt: str, system_instruction: str, temperature: float) -> str:
        self.calls.append({
            "prompt": prompt,
            "system_instruction": system_instruction,
            "temperature": temperature,
        })
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error:
            raise ModelBackendError(self.error)
        return self.reply

    async def close(self) -> None:
        self.closed = True
