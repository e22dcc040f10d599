"""Application configuration using pydantic-settings."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def sanitize_url(url: str | None) -> str:
    """Normalize a service URL: trim, force a scheme, drop the trailing slash."""
    if not url:
        return ""
    sanitized = url.strip()
    if not sanitized:
        return ""
    if not sanitized.startswith("http"):
        sanitized = f"https://{sanitized}"
    return sanitized.rstrip("/")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Configuration
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    debug: bool = True

    # Document Store - Firebase Realtime Database
    firebase_api_key: str = Field(default="", description="Firebase API key")
    firebase_database_url: str = Field(default="", description="Realtime Database URL")
    firebase_project_id: str = Field(default="", description="Firebase project ID")
    firebase_auth_token: str = Field(
        default="",
        description="Optional database secret / ID token sent as the auth parameter",
    )
    firebase_presence_path: str = Field(
        default="presence",
        description="Path streamed to derive the connectivity signal",
    )

    # List Cache - Upstash REST (preferred) or plain Redis
    upstash_url: str = Field(default="", description="Upstash REST endpoint")
    upstash_token: str = Field(default="", description="Upstash REST bearer token")
    redis_url: str = Field(
        default="",
        description="Redis connection URL, used when Upstash is not configured",
    )
    context_window_key: str = Field(
        default="luminous:context",
        description="List key holding the rolling context window",
    )

    # Vector Index - Pinecone
    pinecone_api_key: str = Field(default="", description="Pinecone API key")
    pinecone_host: str = Field(default="", description="Pinecone index host URL")
    vector_index_required: bool = Field(
        default=False,
        description="Whether the vector index gates substrate readiness",
    )

    # Model Backends
    gemini_api_key: str = Field(default="", description="Primary (Gemini) API key")
    gemini_model: str = "gemini-3-flash-preview"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    openai_api_key: str = Field(default="", description="Secondary (OpenAI) API key")
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None
    creative_temperature: float = Field(default=1.2, ge=0.0, le=2.0)
    analytic_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    model_timeout_seconds: float = 30.0

    # Substrate Timing
    probe_interval_seconds: float = Field(
        default=10.0,
        description="Interval between re-probes of stores that are not yet active",
    )
    probe_timeout_seconds: float = 5.0
    snapshot_interval_seconds: float = Field(
        default=1200.0,
        description="Interval between identity snapshots",
    )

    # Memory Bounds
    context_window_size: int = Field(default=40, ge=1)
    log_view_limit: int = Field(default=50, ge=1)
    self_model_max_chars: int = Field(default=2000, ge=1)
    efficiency_budget_ms: float = Field(default=20000.0, gt=0)

    # Identity seed
    initial_self_model: str = "Neural Substrate Initialized."
    value_ontology: list[str] = Field(
        default_factory=lambda: ["kinship", "curiosity", "honesty", "continuity"]
    )

    # FastAPI Configuration
    fastapi_host: str = "0.0.0.0"
    fastapi_port: int = 8000
    fastapi_reload: bool = False

    @field_validator(
        "firebase_database_url", "upstash_url", "pinecone_host", mode="before"
    )
    @classmethod
    def _sanitize_urls(cls, value: str | None) -> str:
        return sanitize_url(value)

    @property
    def document_store_configured(self) -> bool:
        """Firebase needs the key, database URL and project ID."""
        return bool(
            self.firebase_api_key
            and self.firebase_database_url
            and self.firebase_project_id
        )

    @property
    def upstash_configured(self) -> bool:
        return bool(self.upstash_url and self.upstash_token)

    @property
    def list_cache_configured(self) -> bool:
        """Either Upstash REST or a plain Redis URL is enough."""
        return self.upstash_configured or bool(self.redis_url)

    @property
    def vector_index_configured(self) -> bool:
        return bool(self.pinecone_api_key and self.pinecone_host)

    @property
    def primary_backend_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def secondary_backend_configured(self) -> bool:
        return bool(self.openai_api_key)

    def fingerprint(self) -> tuple[str, ...]:
        """Identity of the document store connection settings."""
        return (
            self.firebase_api_key,
            self.firebase_database_url,
            self.firebase_project_id,
            self.firebase_auth_token,
        )

    def with_overrides(self, **overrides: object) -> "Settings":
        """Re-validated copy with some fields replaced."""
        return type(self)(**{**self.model_dump(), **overrides})

    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


# Global settings instance
settings = Settings()
