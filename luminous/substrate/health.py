"""Health monitoring for the external stores that make up the substrate."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..core.domain import StoreHealth, StoreKind
from .base import ListStore
from .document_store import FirebaseDocumentStore
from .vector_index import PineconeIndexClient

logger = logging.getLogger(__name__)

HealthListener = Callable[[StoreKind, StoreHealth], None]


class StoreHealthMonitor:
    """Probes each store on a timer and exposes the substrate readiness gate.

    Stores without a client are OFFLINE and never probed. A probe that
    raises is classified ERROR. Once a store is ACTIVE the timer stops
    probing it; only the document store's connectivity stream can move it
    again after that.
    """

    def __init__(
        self,
        document_store: FirebaseDocumentStore | None = None,
        list_store: ListStore | None = None,
        vector_index: PineconeIndexClient | None = None,
        vector_index_required: bool = False,
        probe_interval_seconds: float = 10.0,
    ):
        self.probe_interval_seconds = probe_interval_seconds
        self._listeners: list[HealthListener] = []
        self._timer_task: asyncio.Task | None = None
        self._watch_task: asyncio.Task | None = None
        self._arm(document_store, list_store, vector_index, vector_index_required)

    def _arm(
        self,
        document_store: FirebaseDocumentStore | None,
        list_store: ListStore | None,
        vector_index: PineconeIndexClient | None,
        vector_index_required: bool,
    ) -> None:
        self.document_store = document_store
        self.vector_index_required = vector_index_required
        self._clients: dict[StoreKind, Any] = {
            StoreKind.DOCUMENT_STORE: document_store,
            StoreKind.LIST_CACHE: list_store,
            StoreKind.VECTOR_INDEX: vector_index,
        }
        self._states: dict[StoreKind, StoreHealth] = {
            kind: StoreHealth.CONNECTING if client is not None else StoreHealth.OFFLINE
            for kind, client in self._clients.items()
        }

    @property
    def required_stores(self) -> tuple[StoreKind, ...]:
        if self.vector_index_required:
            return (StoreKind.DOCUMENT_STORE, StoreKind.LIST_CACHE, StoreKind.VECTOR_INDEX)
        return (StoreKind.DOCUMENT_STORE, StoreKind.LIST_CACHE)

    def add_listener(self, listener: HealthListener) -> None:
        """Register a callback invoked on every state transition."""
        self._listeners.append(listener)

    def state(self, kind: StoreKind) -> StoreHealth:
        return self._states[kind]

    def states(self) -> dict[StoreKind, StoreHealth]:
        return dict(self._states)

    def is_substrate_ready(self) -> bool:
        """True when every required store is ACTIVE."""
        return all(self._states[kind] == StoreHealth.ACTIVE for kind in self.required_stores)

    def _set_state(self, kind: StoreKind, health: StoreHealth) -> None:
        previous = self._states[kind]
        self._states[kind] = health
        if previous == health:
            return

        logger.info(f"💓 {kind.value}: {previous.value} -> {health.value}")
        for listener in self._listeners:
            try:
                listener(kind, health)
            except Exception as e:
                logger.error(f"❌ Health listener failed for {kind.value}: {e}")

    async def probe(self, kind: StoreKind) -> StoreHealth:
        """Probe one store and record the outcome."""
        client = self._clients[kind]
        if client is None:
            self._set_state(kind, StoreHealth.OFFLINE)
            return StoreHealth.OFFLINE

        try:
            await client.ping()
            health = StoreHealth.ACTIVE
        except Exception as e:
            logger.warning(f"⚠️ Probe failed for {kind.value}: {e}")
            health = StoreHealth.ERROR

        self._set_state(kind, health)
        return health

    async def probe_all(self, only_inactive: bool = False) -> dict[StoreKind, StoreHealth]:
        """Probe every store in parallel, optionally skipping ACTIVE ones."""
        kinds = [
            kind for kind in StoreKind
            if not (only_inactive and self._states[kind] == StoreHealth.ACTIVE)
        ]
        await asyncio.gather(*(self.probe(kind) for kind in kinds))
        return self.states()

    async def _watch_document_store(self) -> None:
        """Follow the document store connectivity stream until it ends."""
        if self.document_store is None:
            return
        try:
            async for connected in self.document_store.watch_connectivity():
                self._set_state(
                    StoreKind.DOCUMENT_STORE,
                    StoreHealth.ACTIVE if connected else StoreHealth.CONNECTING,
                )
            self._set_state(StoreKind.DOCUMENT_STORE, StoreHealth.CONNECTING)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"❌ Document store connectivity stream failed: {e}")
            self._set_state(StoreKind.DOCUMENT_STORE, StoreHealth.ERROR)

    def _ensure_watch(self) -> None:
        if self.document_store is None:
            return
        if self._watch_task is None or self._watch_task.done():
            self._watch_task = asyncio.create_task(self._watch_document_store())

    async def _probe_loop(self) -> None:
        while True:
            await asyncio.sleep(self.probe_interval_seconds)
            try:
                await self.probe_all(only_inactive=True)
                self._ensure_watch()
            except Exception as e:
                logger.error(f"❌ Substrate probe tick failed: {e}")

    async def start(self) -> None:
        """Probe everything once, then keep re-probing on the timer."""
        if self._timer_task is not None:
            logger.warning("Store health monitor already running")
            return

        await self.probe_all()
        self._ensure_watch()
        self._timer_task = asyncio.create_task(self._probe_loop())
        logger.info(
            f"💓 Substrate monitoring started (every {self.probe_interval_seconds}s), "
            f"ready={self.is_substrate_ready()}"
        )

    async def stop(self) -> None:
        """Stop the timer and close the connectivity subscription."""
        for task in (self._timer_task, self._watch_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._timer_task = None
        self._watch_task = None

    async def reconfigure(
        self,
        document_store: FirebaseDocumentStore | None,
        list_store: ListStore | None,
        vector_index: PineconeIndexClient | None,
        vector_index_required: bool = False,
    ) -> None:
        """Swap in new clients and re-arm probing from scratch."""
        await self.stop()
        self._arm(document_store, list_store, vector_index, vector_index_required)
        logger.info("🔄 Substrate configuration changed, re-arming probes")
        await self.start()
