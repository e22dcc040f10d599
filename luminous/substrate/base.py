"""Store abstractions shared by the substrate clients."""

from abc import ABC, abstractmethod

from ..core.errors import LuminousError


class StoreNotConfiguredError(LuminousError):
    """Raised when a store is used without its required settings."""
    pass


class StoreRequestError(LuminousError):
    """Raised when a store request fails at transport or protocol level."""
    pass


class ListStore(ABC):
    """A list-backed cache addressed by key.

    Indices follow Redis semantics: 0 is the head, -1 the tail, ranges
    are inclusive on both ends.
    """

    @abstractmethod
    async def push(self, key: str, value: str) -> int:
        """Push a value onto the head of the list.

        Returns:
            The list length after the push
        """
        pass

    @abstractmethod
    async def trim(self, key: str, start: int, end: int) -> None:
        """Keep only the elements in [start, end]."""
        pass

    @abstractmethod
    async def range(self, key: str, start: int, end: int) -> list[str]:
        """Return the elements in [start, end]."""
        pass

    @abstractmethod
    async def ping(self) -> None:
        """Liveness probe; raises StoreRequestError when unhealthy."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        pass
