"""Intrinsic valuation scoring.

Scorers are pluggable: any ``ValuationScorer`` maps (output text, latency,
previous metrics) to a new bounded bundle, so the orchestrator does not care
whether the scores are heuristic, deterministic or learned.
"""

import math
import random
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass

from ..core.domain import IVSMetrics, clamp_unit

# log2 of a 256-symbol alphabet
ENTROPY_NORMALIZER = 8.0
COHERENCE_STEP = 0.01
NOVELTY_CONSTANT = 0.9
VALENCE_BAND = (0.4, 0.6)


def shannon_complexity(text: str, normalizer: float = ENTROPY_NORMALIZER) -> float:
    """Character-frequency Shannon entropy scaled into [0, 1].

    Computes ``-sum(p_i * log2(p_i))`` over the observed characters and
    divides by ``normalizer``. Empty text scores 0.
    """
    if not text:
        return 0.0

    total = len(text)
    entropy = 0.0
    for count in Counter(text).values():
        p = count / total
        entropy -= p * math.log2(p)
    return clamp_unit(entropy / normalizer)


def latency_efficiency(elapsed_ms: float, budget_ms: float) -> float:
    """Linear decay from 1 at zero latency to 0 at the budget."""
    return clamp_unit(max(0.0, 1.0 - elapsed_ms / budget_ms))


@dataclass(frozen=True)
class Valuation:
    """Scoring result: the new bundle plus the separately kept prediction error."""

    metrics: IVSMetrics
    prediction_error: float


class ValuationScorer(ABC):
    """Maps an orchestration result onto a bounded IVS bundle."""

    @abstractmethod
    def score(self, text: str, elapsed_ms: float, previous: IVSMetrics) -> Valuation:
        """Score generated text.

        Args:
            text: Merged model output
            elapsed_ms: Wall time of the generation stage
            previous: Metrics from the previous cycle

        Returns:
            Valuation whose metrics all lie in [0, 1]
        """
        pass


class DriftValuationScorer(ValuationScorer):
    """Coherence drifts upward by a small step, valence jitters near 0.5.

    Novelty is a fixed high constant. Pass a seeded ``random.Random`` for
    reproducible valence.
    """

    def __init__(
        self,
        budget_ms: float = 20000.0,
        rng: random.Random | None = None,
        coherence_step: float = COHERENCE_STEP,
    ):
        self.budget_ms = budget_ms
        self.rng = rng or random.Random()
        self.coherence_step = coherence_step

    def score(self, text: str, elapsed_ms: float, previous: IVSMetrics) -> Valuation:
        complexity = shannon_complexity(text)
        metrics = IVSMetrics(
            coherence=previous.coherence + self.coherence_step,
            complexity=complexity,
            valence=self.rng.uniform(*VALENCE_BAND),
            novelty=NOVELTY_CONSTANT,
            efficiency=latency_efficiency(elapsed_ms, self.budget_ms),
        )
        return Valuation(
            metrics=metrics,
            prediction_error=abs(complexity - previous.complexity),
        )
