"""Unit tests for identity snapshot persistence and recovery."""

import asyncio

import pytest

from luminous.core.domain import IdentitySnapshot, IdentityState, IVSMetrics
from luminous.core.state import SessionState
from luminous.memory.snapshots import IdentitySnapshotStore
from luminous.substrate.base import StoreRequestError


def snapshot_record(self_model: str, ts: int, coherence: float = 0.5) -> dict:
    return IdentitySnapshot(
        ts=ts,
        identity=IdentityState(self_model=self_model),
        metrics=IVSMetrics(coherence=coherence),
    ).to_record()


@pytest.mark.asyncio
class TestIdentitySnapshotStore:
    """Test cases for snapshot recovery and the persistence timer."""

    async def test_recovers_most_recent_snapshot(self, document_store) -> None:
        document_store.data["snapshots"] = {
            "-k2": snapshot_record("T2", 2000),
            "-k3": snapshot_record("T3", 3000, coherence=0.8),
            "-k1": snapshot_record("T1", 1000),
        }
        state = SessionState(identity=IdentityState(self_model="seed"))
        store = IdentitySnapshotStore(document_store, state)

        recovered = await store.recover_latest()

        assert recovered.ts == 3000
        assert state.identity.self_model == "T3"
        assert state.metrics.coherence == 0.8

    async def test_first_run_keeps_seed(self, document_store) -> None:
        state = SessionState(identity=IdentityState(self_model="seed"))
        store = IdentitySnapshotStore(document_store, state)

        assert await store.recover_latest() is None
        assert state.identity.self_model == "seed"

    async def test_malformed_snapshot_ignored(self, document_store) -> None:
        document_store.data["snapshots"] = {"-bad": {"ts": 5000, "identity": "garbage"}}
        state = SessionState(identity=IdentityState(self_model="seed"))
        store = IdentitySnapshotStore(document_store, state)

        assert await store.recover_latest() is None
        assert state.identity.self_model == "seed"

    async def test_persist_appends_new_record(self, document_store) -> None:
        state = SessionState(identity=IdentityState(self_model="now"))
        store = IdentitySnapshotStore(document_store, state)

        first = await store.persist()
        second = await store.persist()

        assert first != second
        assert len(document_store.data["snapshots"]) == 2
        assert document_store.data["snapshots"][first]["identity"]["self_model"] == "now"

    async def test_unconfigured_store(self) -> None:
        store = IdentitySnapshotStore(None, SessionState())

        assert await store.recover_latest() is None
        assert await store.persist() is None
        store.start()
        assert store._task is None

    async def test_timer_survives_write_failures(self, document_store) -> None:
        document_store.fail_writes = True
        store = IdentitySnapshotStore(document_store, SessionState(), interval_seconds=0.01)

        store.start()
        await asyncio.sleep(0.03)
        assert not store._task.done()

        document_store.fail_writes = False
        await asyncio.sleep(0.03)
        await store.stop()

        assert len(document_store.data.get("snapshots", {})) >= 1
