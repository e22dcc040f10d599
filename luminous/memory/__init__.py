"""Conversational memory for the Luminous substrate.

- Context window (list cache) - bounded recent history for prompts
- Event log (document store) - append-only record of every Thought
- Identity snapshots (document store) - periodic identity persistence
"""

from .context_window import ContextWindowManager
from .event_log import EventLog, LiveLogMirror
from .snapshots import IdentitySnapshotStore

__all__ = [
    "ContextWindowManager",
    "EventLog",
    "LiveLogMirror",
    "IdentitySnapshotStore",
]
