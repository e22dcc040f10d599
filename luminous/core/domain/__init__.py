"""Domain models for the Luminous substrate.

This module contains the core data structures shared by the substrate,
memory and cognition layers.
"""

from .identity import IdentitySnapshot, IdentityState
from .memory import ContextEntry
from .substrate import StoreHealth, StoreKind, SubstrateStatus
from .thought import (
    IVSMetrics,
    Thought,
    ThoughtMetadata,
    ThoughtSource,
    clamp_unit,
    now_ms,
)

__all__ = [
    # Thought models
    "Thought",
    "ThoughtSource",
    "ThoughtMetadata",
    "IVSMetrics",
    "clamp_unit",
    "now_ms",

    # Identity models
    "IdentityState",
    "IdentitySnapshot",

    # Memory models
    "ContextEntry",

    # Substrate models
    "StoreHealth",
    "StoreKind",
    "SubstrateStatus",
]
