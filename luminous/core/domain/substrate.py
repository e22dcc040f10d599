"""Substrate health models."""

from enum import Enum

from pydantic import BaseModel, Field


class StoreKind(str, Enum):
    """The external stores that make up the substrate."""

    DOCUMENT_STORE = "document_store"
    LIST_CACHE = "list_cache"
    VECTOR_INDEX = "vector_index"


class StoreHealth(str, Enum):
    """Tri-state readiness (plus error) of a single store.

    OFFLINE means required settings are absent, CONNECTING is the initial
    or transient probing state, ACTIVE means the last probe succeeded and
    ERROR means the last probe failed or raised.
    """

    OFFLINE = "offline"
    CONNECTING = "connecting"
    ACTIVE = "active"
    ERROR = "error"


class SubstrateStatus(BaseModel):
    """Aggregate view of the substrate for operators and the HTTP surface."""

    stores: dict[StoreKind, StoreHealth] = Field(default_factory=dict)
    ready: bool = False
    in_flight: bool = False
    stream_length: int = Field(default=0, description="Thoughts in the live log view")
    context_window_size: int = 0
    heartbeat_seconds: float = Field(default=0.0, description="Probe interval")
