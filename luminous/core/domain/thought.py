"""Thought and valuation models.

A Thought is a single message in the conversation stream. Thoughts are
append-only: once created they are never mutated, only persisted and
mirrored.
"""

import math
import time
import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def clamp_unit(value: float) -> float:
    """Clamp a scalar into [0, 1]; NaN collapses to 0."""
    value = float(value)
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


class ThoughtSource(str, Enum):
    """Who authored a Thought."""

    PARTNER = "partner"
    LUMINOUS = "luminous"
    ANALYST = "analyst"
    SYSTEM = "system"


class IVSMetrics(BaseModel):
    """Intrinsic valuation metrics bundle.

    Every field is clamped into [0, 1] on construction, so a bundle can
    never hold an out-of-range value. Bundles are replaced wholesale.
    """

    model_config = ConfigDict(frozen=True)

    coherence: float = Field(default=0.5, description="Drifts upward each cycle")
    complexity: float = Field(default=0.0, description="Normalized character entropy")
    valence: float = Field(default=0.5, description="Affective tone")
    novelty: float = Field(default=0.0, description="Novelty of the last output")
    efficiency: float = Field(default=1.0, description="Latency against budget")

    @field_validator(
        "coherence", "complexity", "valence", "novelty", "efficiency", mode="before"
    )
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_unit(value)


class ThoughtMetadata(BaseModel):
    """The enumerable metadata shapes a Thought can carry."""

    model_config = ConfigDict(frozen=True)

    valuation: IVSMetrics | None = None
    veto: bool | None = None
    note: str | None = None
    prediction_error: float | None = None
    emergent_goal: str | None = None


class Thought(BaseModel):
    """An immutable message record in the conversation stream."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    ts: int = Field(default_factory=now_ms, description="Epoch milliseconds")
    source: ThoughtSource
    content: str
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    valence: float = Field(default=1.0, ge=0.0, le=1.0)
    attention: float = Field(default=1.0, ge=0.0, le=1.0)
    metadata: ThoughtMetadata = Field(default_factory=ThoughtMetadata)

    @classmethod
    def from_partner(cls, content: str) -> "Thought":
        """A partner-authored input at full confidence."""
        return cls(source=ThoughtSource.PARTNER, content=content)

    @classmethod
    def system_fault(cls, message: str) -> "Thought":
        """A locally produced fault notice with zeroed signals."""
        return cls(
            source=ThoughtSource.SYSTEM,
            content=message,
            confidence=0.0,
            valence=0.0,
            attention=0.0,
        )

    def to_record(self) -> dict:
        """Serialize for the document store, omitting empty metadata fields."""
        return self.model_dump(mode="json", exclude_none=True)
