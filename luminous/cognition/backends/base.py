"""Base model backend interface using strategy pattern."""

from abc import ABC, abstractmethod

from ...core.errors import LuminousError


class ModelBackendError(LuminousError):
    """Exception raised when a generation call fails."""
    pass


class BackendNotConfiguredError(ModelBackendError):
    """Exception raised when a backend is used without credentials."""
    pass


class ModelBackend(ABC):
    """Abstract base class for text generation backends."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Name/identifier of the backing model."""
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        temperature: float,
    ) -> str:
        """Generate text for a prompt.

        Args:
            prompt: The user-facing prompt
            system_instruction: System instruction steering the model
            temperature: Randomness parameter

        Returns:
            Generated text

        Raises:
            ModelBackendError: If generation fails
        """
        pass

    async def close(self) -> None:
        """Release any held clients."""
        pass
