"""Memory-related domain models."""

from pydantic import BaseModel, ConfigDict, Field

from .thought import Thought, now_ms


class ContextEntry(BaseModel):
    """Compact summary of one message held in the rolling context window."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(..., description="Source of the message")
    content: str = Field(..., description="Message text")
    ts: int = Field(default_factory=now_ms, description="Epoch milliseconds")

    @classmethod
    def from_thought(cls, thought: Thought) -> "ContextEntry":
        return cls(role=thought.source.value, content=thought.content, ts=thought.ts)
