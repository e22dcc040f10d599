"""Rolling context window kept in the list-backed cache.

Key Schema:
    {context_window_key} - List of JSON ContextEntry objects, newest at
    the head, trimmed to ``max_entries`` after every append.
"""

import json
import logging

from pydantic import ValidationError

from ..core.domain import ContextEntry
from ..substrate.base import ListStore

logger = logging.getLogger(__name__)


class ContextWindowManager:
    """Bounded, time-ordered window of prior exchanges.

    An unconfigured store (``list_store is None``) is normal: reads return
    an empty window and appends are skipped.
    """

    def __init__(self, list_store: ListStore | None, key: str, max_entries: int = 40):
        self.list_store = list_store
        self.key = key
        self.max_entries = max_entries

    @property
    def configured(self) -> bool:
        return self.list_store is not None

    def _serialize_entry(self, entry: ContextEntry) -> str:
        return json.dumps({"role": entry.role, "content": entry.content, "ts": entry.ts})

    def _deserialize_entry(self, raw: str) -> ContextEntry:
        return ContextEntry.model_validate_json(raw)

    async def append(self, entry: ContextEntry) -> None:
        """Push an entry and trim the list back to the bound.

        The trim is issued even though it may fail independently of the
        push; a failed trim is logged and left for the next append.
        """
        if self.list_store is None:
            return

        await self.list_store.push(self.key, self._serialize_entry(entry))
        try:
            await self.list_store.trim(self.key, 0, self.max_entries - 1)
        except Exception as e:
            logger.warning(f"⚠️ Context window trim failed for {self.key}: {e}")

    async def read_window(self) -> list[ContextEntry]:
        """Return up to ``max_entries`` entries, oldest first.

        Entries that fail to parse are skipped individually.
        """
        if self.list_store is None:
            return []

        raw_entries = await self.list_store.range(self.key, 0, self.max_entries - 1)
        entries = []
        for raw in raw_entries:
            try:
                entries.append(self._deserialize_entry(raw))
            except (ValidationError, ValueError, TypeError) as e:
                logger.warning(f"⚠️ Skipping malformed context entry: {e}")

        # Stored newest-first
        entries.reverse()
        return entries
