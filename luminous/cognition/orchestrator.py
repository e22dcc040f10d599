"""Dual-model orchestration cycle.

One cycle takes a partner input through: context read, durable input
record, a creative pass on the primary backend and an analytic pass on the
secondary backend (issued concurrently), merge, valuation, durable response
record, and a self-model update.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from ..core.domain import ContextEntry, Thought, ThoughtMetadata, ThoughtSource
from ..core.errors import LuminousError
from ..core.state import SessionState
from ..memory.context_window import ContextWindowManager
from ..memory.event_log import EventLog
from .backends.base import BackendNotConfiguredError, ModelBackend
from .prompts import (
    build_analytic_instruction,
    build_creative_instruction,
    merge_outputs,
    summarize_exchange,
)
from .scoring import DriftValuationScorer, ValuationScorer

logger = logging.getLogger(__name__)


class InputRejectedError(LuminousError):
    """Raised when an input is refused before any model call."""
    pass


class SubstrateNotReadyError(InputRejectedError):
    pass


class ThoughtInFlightError(InputRejectedError):
    pass


class EmptyInputError(InputRejectedError):
    pass


class DualModelOrchestrator:
    """Runs at most one orchestration cycle at a time for a session."""

    def __init__(
        self,
        state: SessionState,
        context_window: ContextWindowManager,
        event_log: EventLog,
        primary: ModelBackend | None,
        secondary: ModelBackend | None = None,
        scorer: ValuationScorer | None = None,
        is_ready: Callable[[], bool] = lambda: True,
        creative_temperature: float = 1.2,
        analytic_temperature: float = 0.2,
        self_model_max_chars: int = 2000,
    ):
        self.state = state
        self.context_window = context_window
        self.event_log = event_log
        self.primary = primary
        self.secondary = secondary
        self.scorer = scorer or DriftValuationScorer()
        self.is_ready = is_ready
        self.creative_temperature = creative_temperature
        self.analytic_temperature = analytic_temperature
        self.self_model_max_chars = self_model_max_chars

    async def handle_input(self, content: str) -> Thought:
        """Run one cycle for a partner input.

        Returns:
            The persisted model Thought, or a local system Thought when the
            generation stage failed

        Raises:
            SubstrateNotReadyError: If the readiness gate is closed
            ThoughtInFlightError: If another cycle is running
            EmptyInputError: If the trimmed input is empty
            BackendNotConfiguredError: If no primary backend is configured
        """
        if not self.is_ready():
            raise SubstrateNotReadyError("Substrate is not ready")
        if self.state.in_flight:
            raise ThoughtInFlightError("A thought is already in flight")
        if not content or not content.strip():
            raise EmptyInputError("Input is empty")
        if self.primary is None:
            raise BackendNotConfiguredError("Primary model backend not configured")

        self.state.try_begin_cycle()
        try:
            return await self._run_cycle(content.strip())
        finally:
            self.state.end_cycle()

    async def _read_context(self) -> list[ContextEntry]:
        try:
            return await self.context_window.read_window()
        except Exception as e:
            logger.warning(f"⚠️ Context window unavailable, continuing without it: {e}")
            return []

    async def _remember(self, thought: Thought) -> None:
        try:
            await self.context_window.append(ContextEntry.from_thought(thought))
        except Exception as e:
            logger.warning(f"⚠️ Context window append failed: {e}")

    async def _run_cycle(self, content: str) -> Thought:
        context = await self._read_context()

        user_thought = Thought.from_partner(content)
        try:
            await self.event_log.append(user_thought)
        except Exception as e:
            logger.error(f"❌ Failed to persist partner thought {user_thought.id}: {e}")
        await self._remember(user_thought)

        try:
            response = await self._generate_and_record(content, context)
        except Exception as e:
            logger.error(f"❌ Orchestration cycle failed: {e}")
            return Thought.system_fault(f"Neural Error: {e}")

        self.state.update_identity(
            lambda identity: identity.with_reflection(
                summarize_exchange(content, response.content),
                self.self_model_max_chars,
            )
        )
        await self._remember(response)
        return response

    async def _generate_and_record(self, content: str, context: list[ContextEntry]) -> Thought:
        identity = self.state.identity
        previous = self.state.metrics

        started = time.perf_counter()
        creative, analytic = await asyncio.gather(
            self.primary.generate(
                content,
                build_creative_instruction(identity, context, previous),
                self.creative_temperature,
            ),
            self._analyze(content, identity, context, previous),
            return_exceptions=True,
        )
        elapsed_ms = (time.perf_counter() - started) * 1000

        if isinstance(analytic, BaseException):
            logger.warning(f"⚠️ Analytic pass omitted: {analytic}")
            analytic = None
        if isinstance(creative, BaseException):
            if not analytic:
                raise creative
            logger.warning(f"⚠️ Creative pass failed, keeping analytic output: {creative}")
            creative = None

        merged = merge_outputs(creative, analytic)
        note = None
        if creative is None:
            note = "creative pass failed"
        elif self.secondary is not None and analytic is None:
            note = "analytic pass omitted"

        valuation = self.scorer.score(merged, elapsed_ms, previous)
        metrics = valuation.metrics
        thought = Thought(
            source=ThoughtSource.LUMINOUS,
            content=merged,
            confidence=metrics.coherence,
            valence=metrics.valence,
            attention=metrics.novelty,
            metadata=ThoughtMetadata(
                valuation=metrics,
                prediction_error=valuation.prediction_error,
                note=note,
            ),
        )
        await self.event_log.append(thought)
        self.state.replace_metrics(metrics)

        logger.info(
            f"🧠 Cycle complete in {elapsed_ms:.0f}ms: coherence={metrics.coherence:.2f} "
            f"complexity={metrics.complexity:.2f} prediction_error={valuation.prediction_error:.3f}"
        )
        return thought

    async def _analyze(self, content, identity, context, previous) -> str | None:
        if self.secondary is None:
            return None
        return await self.secondary.generate(
            content,
            build_analytic_instruction(identity, context, previous),
            self.analytic_temperature,
        )
