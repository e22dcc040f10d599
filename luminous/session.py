"""Luminous session - wires the substrate, memory and cognition layers.

Startup order matters: the latest identity snapshot is recovered before
the session accepts any input, then health monitoring, snapshot timer and
the live log mirror start.
"""

import logging
from dataclasses import dataclass

from .cognition.backends import ModelBackend, create_backends
from .cognition.orchestrator import (
    DualModelOrchestrator,
    SubstrateNotReadyError,
    ThoughtInFlightError,
)
from .cognition.scoring import DriftValuationScorer, ValuationScorer
from .core.config import Settings, settings
from .core.domain import IdentityState, SubstrateStatus, Thought, ThoughtSource
from .core.state import SessionState
from .memory.context_window import ContextWindowManager
from .memory.event_log import EventLog, LiveLogMirror
from .memory.snapshots import IdentitySnapshotStore
from .substrate.base import ListStore
from .substrate.document_store import (
    FirebaseDocumentStore,
    get_document_store,
    reset_document_store,
)
from .substrate.health import StoreHealthMonitor
from .substrate.list_cache import create_list_store
from .substrate.vector_index import PineconeIndexClient

logger = logging.getLogger(__name__)


@dataclass
class SubstrateClients:
    """Store clients for one configuration; None marks an unconfigured store."""

    document_store: FirebaseDocumentStore | None = None
    list_store: ListStore | None = None
    vector_index: PineconeIndexClient | None = None

    @classmethod
    def from_settings(cls, config: Settings) -> "SubstrateClients":
        return cls(
            document_store=get_document_store(config),
            list_store=create_list_store(config),
            vector_index=(
                PineconeIndexClient(config) if config.vector_index_configured else None
            ),
        )


class LuminousSession:
    """A single running session: one identity, one in-flight cycle at a time."""

    def __init__(
        self,
        config: Settings | None = None,
        clients: SubstrateClients | None = None,
        backends: tuple[ModelBackend | None, ModelBackend | None] | None = None,
        scorer: ValuationScorer | None = None,
        state: SessionState | None = None,
    ):
        self.config = config or settings
        self.state = state or SessionState.from_settings(self.config)
        self._scorer = scorer
        self._accepting = False
        self._build(clients, backends)

    def _build(
        self,
        clients: SubstrateClients | None,
        backends: tuple[ModelBackend | None, ModelBackend | None] | None,
    ) -> None:
        config = self.config
        self.clients = clients or SubstrateClients.from_settings(config)
        self.primary, self.secondary = backends or create_backends(config)

        self.monitor = StoreHealthMonitor(
            document_store=self.clients.document_store,
            list_store=self.clients.list_store,
            vector_index=self.clients.vector_index,
            vector_index_required=config.vector_index_required,
            probe_interval_seconds=config.probe_interval_seconds,
        )
        self.context_window = ContextWindowManager(
            self.clients.list_store,
            key=config.context_window_key,
            max_entries=config.context_window_size,
        )
        self.event_log = EventLog(self.clients.document_store)
        self.log_mirror = LiveLogMirror(
            self.event_log,
            limit=config.log_view_limit,
            retry_seconds=config.probe_interval_seconds,
        )
        self.snapshots = IdentitySnapshotStore(
            self.clients.document_store,
            self.state,
            interval_seconds=config.snapshot_interval_seconds,
        )
        self.orchestrator = DualModelOrchestrator(
            state=self.state,
            context_window=self.context_window,
            event_log=self.event_log,
            primary=self.primary,
            secondary=self.secondary,
            scorer=self._scorer or DriftValuationScorer(budget_ms=config.efficiency_budget_ms),
            is_ready=self.is_ready,
            creative_temperature=config.creative_temperature,
            analytic_temperature=config.analytic_temperature,
            self_model_max_chars=config.self_model_max_chars,
        )

    def is_ready(self) -> bool:
        """Readiness gate: startup finished and every required store ACTIVE."""
        return self._accepting and self.monitor.is_substrate_ready()

    async def initialize(self) -> None:
        """Recover identity, then start monitoring, snapshots and the live log."""
        logger.info("🚀 Starting Luminous session initialization...")

        try:
            recovered = await self.snapshots.recover_latest()
            if recovered is not None:
                logger.info(f"✅ Identity recovered from snapshot at {recovered.ts}")
        except Exception as e:
            logger.error(f"❌ Identity recovery failed, continuing with current identity: {e}")

        await self.monitor.start()
        self.snapshots.start()
        self.log_mirror.start()
        self._accepting = True

        logger.info(f"✅ Luminous session initialized (ready={self.is_ready()})")

    async def handle_input(self, content: str) -> Thought:
        """Submit partner input to the orchestrator."""
        if not self._accepting:
            raise SubstrateNotReadyError("Session is not initialized")

        thought = await self.orchestrator.handle_input(content)
        if thought.source == ThoughtSource.SYSTEM or not self.event_log.configured:
            self.log_mirror.add_local(thought)
        return thought

    async def recent_thoughts(self) -> list[Thought]:
        """Live view while the subscription is synced, otherwise a one-shot read."""
        if self.event_log.configured and not self.log_mirror.synced:
            try:
                self.log_mirror.replace(await self.event_log.recent(self.config.log_view_limit))
            except Exception as e:
                logger.error(f"❌ Log read failed, serving last known view: {e}")
        return self.log_mirror.thoughts

    @property
    def identity(self) -> IdentityState:
        return self.state.identity

    def status(self) -> SubstrateStatus:
        return SubstrateStatus(
            stores=self.monitor.states(),
            ready=self.is_ready(),
            in_flight=self.state.in_flight,
            stream_length=len(self.log_mirror.thoughts),
            context_window_size=self.config.context_window_size,
            heartbeat_seconds=self.config.probe_interval_seconds,
        )

    async def _stop_tasks(self) -> None:
        self._accepting = False
        await self.monitor.stop()
        await self.snapshots.stop()
        await self.log_mirror.stop()

    async def _close_clients(self) -> None:
        for name, resource in (
            ("list store", self.clients.list_store),
            ("vector index", self.clients.vector_index),
            ("primary backend", self.primary),
            ("secondary backend", self.secondary),
        ):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.error(f"❌ Error closing {name}: {e}")
        await reset_document_store()

    async def reconfigure(self, config: Settings) -> None:
        """Tear down and rebuild every component for new settings.

        Raises:
            ThoughtInFlightError: If a cycle is still using the current clients
        """
        if self.state.in_flight:
            raise ThoughtInFlightError("Cannot reconfigure while a thought is in flight")
        logger.info("🔄 Reconfiguring Luminous session...")
        await self._stop_tasks()
        await self._close_clients()
        self.config = config
        self._build(None, None)
        await self.initialize()

    async def shutdown(self) -> None:
        """Stop timers and subscriptions and release connections.

        Outstanding network requests are not aborted.
        """
        logger.info("🛑 Shutting down Luminous session...")
        await self._stop_tasks()
        await self._close_clients()
        logger.info("✅ Luminous session shutdown complete")
