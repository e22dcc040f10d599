"""Session-owned identity and metrics state.

All mutations go through one update function per field group so that timer
callbacks and the orchestration cycle always act on the latest value rather
than a copy captured before an ``await``.
"""

import logging
from collections.abc import Callable

from .config import Settings
from .domain import IdentitySnapshot, IdentityState, IVSMetrics

logger = logging.getLogger(__name__)


class SessionState:
    """Explicitly owned container for identity, metrics and the in-flight flag."""

    def __init__(
        self,
        identity: IdentityState | None = None,
        metrics: IVSMetrics | None = None,
    ):
        self._identity = identity or IdentityState()
        self._metrics = metrics or IVSMetrics()
        self._in_flight = False

    @classmethod
    def from_settings(cls, config: Settings) -> "SessionState":
        """Seed a fresh state from configuration."""
        identity = IdentityState(
            self_model=config.initial_self_model,
            value_ontology=tuple(config.value_ontology),
        )
        return cls(identity=identity)

    @property
    def identity(self) -> IdentityState:
        return self._identity

    @property
    def metrics(self) -> IVSMetrics:
        return self._metrics

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def update_identity(
        self, mutate: Callable[[IdentityState], IdentityState]
    ) -> IdentityState:
        """Apply ``mutate`` to the current identity and store the result."""
        self._identity = mutate(self._identity)
        return self._identity

    def replace_metrics(self, metrics: IVSMetrics) -> None:
        """Swap in a whole new metrics bundle."""
        self._metrics = metrics

    def restore(self, snapshot: IdentitySnapshot) -> None:
        """Overwrite identity and metrics with a recovered snapshot."""
        self._identity = snapshot.identity
        self._metrics = snapshot.metrics
        logger.info(f"🧠 Identity restored from snapshot taken at {snapshot.ts}")

    def snapshot(self) -> IdentitySnapshot:
        """Capture the current identity and metrics."""
        return IdentitySnapshot(identity=self._identity, metrics=self._metrics)

    def try_begin_cycle(self) -> bool:
        """Claim the single orchestration slot; False if already taken."""
        if self._in_flight:
            return False
        self._in_flight = True
        return True

    def end_cycle(self) -> None:
        self._in_flight = False
