"""Dual-model orchestration: backends, prompts and valuation scoring."""

from .orchestrator import (
    DualModelOrchestrator,
    EmptyInputError,
    InputRejectedError,
    SubstrateNotReadyError,
    ThoughtInFlightError,
)
from .scoring import DriftValuationScorer, Valuation, ValuationScorer

__all__ = [
    "DualModelOrchestrator",
    "InputRejectedError",
    "EmptyInputError",
    "SubstrateNotReadyError",
    "ThoughtInFlightError",
    "DriftValuationScorer",
    "Valuation",
    "ValuationScorer",
]
