"""Periodic persistence and startup recovery of the identity bundle."""

import asyncio
import logging

from pydantic import ValidationError

from ..core.domain import IdentitySnapshot
from ..core.state import SessionState
from ..substrate.document_store import FirebaseDocumentStore

logger = logging.getLogger(__name__)

SNAPSHOTS_COLLECTION = "snapshots"


class IdentitySnapshotStore:
    """Append-only snapshot log in the document store.

    Snapshots are never overwritten or deleted here; recovery always picks
    the most recent by timestamp.
    """

    def __init__(
        self,
        document_store: FirebaseDocumentStore | None,
        state: SessionState,
        interval_seconds: float = 1200.0,
        collection: str = SNAPSHOTS_COLLECTION,
    ):
        self.document_store = document_store
        self.state = state
        self.interval_seconds = interval_seconds
        self.collection = collection
        self._task: asyncio.Task | None = None

    async def recover_latest(self) -> IdentitySnapshot | None:
        """Load the newest snapshot into the session state.

        Returns:
            The recovered snapshot, or None on first run or when the store
            is not configured
        """
        if self.document_store is None:
            return None

        records = await self.document_store.query_last(self.collection, limit=1)
        latest: IdentitySnapshot | None = None
        for key, record in records.items():
            try:
                candidate = IdentitySnapshot.model_validate(record)
            except ValidationError as e:
                logger.warning(f"⚠️ Skipping malformed snapshot {key}: {e}")
                continue
            if latest is None or candidate.ts > latest.ts:
                latest = candidate

        if latest is None:
            logger.info("No identity snapshot found, starting from seed identity")
            return None

        self.state.restore(latest)
        return latest

    async def persist(self) -> str | None:
        """Write a new snapshot of the current identity and metrics.

        Returns:
            The key of the new record, or None if not configured
        """
        if self.document_store is None:
            return None

        snapshot = self.state.snapshot()
        key = await self.document_store.push(self.collection, snapshot.to_record())
        logger.info(f"💾 Identity snapshot {key} persisted")
        return key

    async def _persist_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.persist()
            except Exception as e:
                logger.error(f"❌ Identity snapshot failed, next attempt in {self.interval_seconds}s: {e}")

    def start(self) -> None:
        """Schedule periodic persistence."""
        if self.document_store is None:
            logger.info("Document store not configured, identity snapshots disabled")
            return
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._persist_loop())

    async def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
