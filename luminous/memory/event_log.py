"""Append-only Thought log in the document store with a live mirror."""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from pydantic import ValidationError

from ..core.domain import Thought
from ..substrate.base import StoreRequestError
from ..substrate.document_store import FirebaseDocumentStore, StreamEvent

logger = logging.getLogger(__name__)

LOGS_COLLECTION = "logs"


def decode_thoughts(records: dict[str, Any], limit: int) -> list[Thought]:
    """Decode raw records into Thoughts, newest first.

    A record that fails validation is dropped on its own; the rest of the
    batch is kept.
    """
    thoughts = []
    for key, record in records.items():
        try:
            thoughts.append(Thought.model_validate(record))
        except ValidationError as e:
            logger.warning(f"⚠️ Skipping malformed log record {key}: {e.error_count()} errors")
    thoughts.sort(key=lambda thought: thought.ts, reverse=True)
    return thoughts[:limit]


def newest_records(records: dict[str, Any], limit: int) -> dict[str, Any]:
    """Keep only the ``limit`` records with the highest ``ts``."""
    if len(records) <= limit:
        return records

    def ts_of(item):
        value = item[1].get("ts") if isinstance(item[1], dict) else None
        return value if isinstance(value, (int, float)) else 0

    return dict(sorted(records.items(), key=ts_of)[-limit:])


def apply_stream_event(records: dict[str, Any], event: StreamEvent) -> dict[str, Any]:
    """Fold a put/patch stream event into the local copy of a collection."""
    path = (event.path or "/").strip("/")
    segments = [segment for segment in path.split("/") if segment]

    if event.event == "put" and not segments:
        return dict(event.data) if isinstance(event.data, dict) else {}

    if event.event == "patch" and not segments:
        updated = dict(records)
        for key, value in (event.data or {}).items():
            if value is None:
                updated.pop(key, None)
            else:
                updated[key] = value
        return updated

    updated = dict(records)
    key, nested = segments[0], segments[1:]
    if not nested:
        if event.event == "patch" and isinstance(updated.get(key), dict):
            merged = dict(updated[key])
            merged.update(event.data or {})
            updated[key] = merged
        elif event.data is None:
            updated.pop(key, None)
        else:
            updated[key] = event.data
        return updated

    # Change below a record: rebuild the record with the nested value set
    record = json.loads(json.dumps(updated.get(key) or {}))
    cursor = record
    for segment in nested[:-1]:
        cursor = cursor.setdefault(segment, {})
    if event.data is None:
        cursor.pop(nested[-1], None)
    else:
        cursor[nested[-1]] = event.data
    updated[key] = record
    return updated


class EventLog:
    """Durable, append-only record of every inbound and outbound Thought."""

    def __init__(
        self,
        document_store: FirebaseDocumentStore | None,
        collection: str = LOGS_COLLECTION,
    ):
        self.document_store = document_store
        self.collection = collection

    @property
    def configured(self) -> bool:
        return self.document_store is not None

    async def append(self, thought: Thought) -> None:
        """Write one immutable record keyed by the Thought's identifier."""
        if self.document_store is None:
            logger.debug(f"Document store not configured, thought {thought.id} not persisted")
            return
        await self.document_store.put(f"{self.collection}/{thought.id}", thought.to_record())

    async def recent(self, limit: int) -> list[Thought]:
        """One-shot read of the newest ``limit`` Thoughts."""
        if self.document_store is None:
            return []
        records = await self.document_store.query_last(self.collection, limit)
        return decode_thoughts(records, limit)

    async def subscribe(self, limit: int) -> AsyncIterator[list[Thought]]:
        """Yield the full decoded view of the newest ``limit`` Thoughts on every change.

        The sequence is infinite; close the iterator to release the
        underlying connection. Resubscribing restarts from a fresh view.
        """
        if self.document_store is None:
            return

        records: dict[str, Any] = {}
        params = {"orderBy": json.dumps("ts"), "limitToLast": limit}
        async for event in self.document_store.stream(self.collection, params):
            if event.event in ("put", "patch"):
                records = newest_records(apply_stream_event(records, event), limit)
                yield decode_thoughts(records, limit)
            elif event.event in ("cancel", "auth_revoked"):
                raise StoreRequestError(f"Log subscription ended by server: {event.event}")


class LiveLogMirror:
    """Bounded in-memory view of the log fed by a standing subscription.

    Thoughts produced locally without persistence (system faults) are
    merged into the view until they age out of the bound. A dropped
    subscription is reopened after ``retry_seconds``; ``synced`` is false
    until the reopened stream delivers its first view.
    """

    def __init__(self, event_log: EventLog, limit: int = 50, retry_seconds: float = 10.0):
        self.event_log = event_log
        self.limit = limit
        self.retry_seconds = retry_seconds
        self.synced = False
        self._remote: list[Thought] = []
        self._local: list[Thought] = []
        self._task: asyncio.Task | None = None

    @property
    def thoughts(self) -> list[Thought]:
        """Current view, newest first."""
        seen = {thought.id for thought in self._remote}
        merged = self._remote + [t for t in self._local if t.id not in seen]
        merged.sort(key=lambda thought: thought.ts, reverse=True)
        return merged[:self.limit]

    def replace(self, thoughts: list[Thought]) -> None:
        self._remote = list(thoughts)

    def add_local(self, thought: Thought) -> None:
        self._local = [thought, *self._local][:self.limit]

    async def _consume(self) -> None:
        while True:
            try:
                async for view in self.event_log.subscribe(self.limit):
                    self.replace(view)
                    self.synced = True
                logger.warning("⚠️ Live log subscription ended, resubscribing")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"❌ Live log subscription failed, retrying in {self.retry_seconds}s: {e}")
            self.synced = False
            await asyncio.sleep(self.retry_seconds)

    def start(self) -> None:
        if not self.event_log.configured:
            return
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._consume())

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        self.synced = False
