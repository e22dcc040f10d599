"""Identity models: the evolving self-model and its snapshots."""

from pydantic import BaseModel, ConfigDict, Field

from .thought import IVSMetrics, now_ms


class IdentityState(BaseModel):
    """Mutable-by-replacement identity of the system.

    The self-model is a growing narrative soft-capped in length; when the
    cap is exceeded the oldest text is dropped first.
    """

    model_config = ConfigDict(frozen=True)

    self_model: str = Field(default="", description="Free-text self narrative")
    value_ontology: tuple[str, ...] = Field(
        default_factory=tuple,
        description="Named values, fixed after initialization",
    )
    emergent_goals: list[str] = Field(default_factory=list)
    last_meditation: int = Field(default=0, description="Epoch ms of last self-revision")

    def with_reflection(self, text: str, max_chars: int) -> "IdentityState":
        """Append text to the self-model, keeping at most max_chars of the tail."""
        combined = f"{self.self_model}{text}"
        if len(combined) > max_chars:
            combined = combined[len(combined) - max_chars:]
        return self.model_copy(
            update={"self_model": combined, "last_meditation": now_ms()}
        )


class IdentitySnapshot(BaseModel):
    """Point-in-time persisted copy of identity and metrics."""

    model_config = ConfigDict(frozen=True)

    ts: int = Field(default_factory=now_ms)
    identity: IdentityState
    metrics: IVSMetrics

    def to_record(self) -> dict:
        return self.model_dump(mode="json")
