"""Language model backends for the dual-model pipeline."""

from .base import BackendNotConfiguredError, ModelBackend, ModelBackendError
from .factory import BackendType, ModelBackendFactory, create_backends
from .gemini import GeminiBackend
from .openai_backend import OpenAIBackend

__all__ = [
    "ModelBackend",
    "ModelBackendError",
    "BackendNotConfiguredError",
    "BackendType",
    "ModelBackendFactory",
    "create_backends",
    "GeminiBackend",
    "OpenAIBackend",
]
