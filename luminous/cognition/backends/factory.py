"""Factory for creating model backends."""

from enum import Enum
from typing import Any

from ...core.config import Settings
from .base import BackendNotConfiguredError, ModelBackend
from .gemini import GeminiBackend
from .openai_backend import OpenAIBackend


class BackendType(str, Enum):
    """Supported model backend types."""

    GEMINI = "gemini"
    OPENAI = "openai"


class ModelBackendFactory:
    """Factory for creating model backends from settings."""

    @staticmethod
    def create_backend(
        backend_type: BackendType,
        config: Settings,
        **kwargs: Any
    ) -> ModelBackend:
        """Create a model backend instance.

        Raises:
            BackendNotConfiguredError: If the backend's key is missing
        """
        if backend_type == BackendType.GEMINI:
            return GeminiBackend(
                api_key=config.gemini_api_key,
                model=kwargs.get("model", config.gemini_model),
                base_url=config.gemini_base_url,
                timeout=config.model_timeout_seconds,
            )

        elif backend_type == BackendType.OPENAI:
            return OpenAIBackend(
                api_key=config.openai_api_key,
                model=kwargs.get("model", config.openai_model),
                base_url=config.openai_base_url,
                timeout=config.model_timeout_seconds,
            )

        else:
            raise BackendNotConfiguredError(f"Unsupported backend type: {backend_type}")


def create_backends(config: Settings) -> tuple[ModelBackend | None, ModelBackend | None]:
    """Build the (primary, secondary) pair; unconfigured slots are None."""
    primary = (
        ModelBackendFactory.create_backend(BackendType.GEMINI, config)
        if config.primary_backend_configured else None
    )
    secondary = (
        ModelBackendFactory.create_backend(BackendType.OPENAI, config)
        if config.secondary_backend_configured else None
    )
    return primary, secondary
