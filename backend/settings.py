"""
Environment configuration for the Bad Idea API.

Every knob (Supabase, Anthropic, quotas, OpenTelemetry, the internal
pre-generation key) is read from the environment or `.env` into one
Settings model. Routers receive it through `Depends(get_settings)`:

    def handler(settings: Settings = Depends(get_settings)):
        window = settings.rate_limit_window
"""

import json
from datetime import timedelta
from functools import lru_cache
from typing import List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production",
    )

    # -------------------------------------------------------------------------
    # Supabase Database / Auth
    # -------------------------------------------------------------------------
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL",
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key (full access)",
    )

    @property
    def supabase_key(self) -> Optional[str]:
        """Get the Supabase key.

        Idea inserts and usage events are written with the service role;
        row level security keeps the anon key read-only.
        """
        return self.supabase_service_role_key

    # -------------------------------------------------------------------------
    # AI Services
    # -------------------------------------------------------------------------
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key for Claude",
    )
    default_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Default Anthropic model for idea generation, roasts and chat",
    )
    advisor_max_tokens: int = Field(
        default=2048,
        description="Max output tokens for one Devil's Advocate reply",
    )

    # -------------------------------------------------------------------------
    # Helicone Observability
    # -------------------------------------------------------------------------
    helicone_api_key: Optional[str] = Field(
        default=None,
        description="Helicone API key for LLM observability",
    )
    helicone_enabled: bool = Field(
        default=False,
        description="Enable Helicone LLM request logging",
    )

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------
    allowed_origins: List[str] = Field(
        default_factory=list,
        description="Allowed CORS origins. If empty, defaults to localhost:3000/5173.",
    )

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Observability - OpenTelemetry
    # -------------------------------------------------------------------------
    otel_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing and metrics",
    )
    otel_service_name: str = Field(
        default="bad-idea-api",
        description="service.name resource attribute",
    )
    otel_exporter_otlp_endpoint: Optional[str] = Field(
        default=None,
        description="OTLP collector endpoint. Console exporter when unset.",
    )
    otel_exporter_otlp_protocol: str = Field(
        default="http",
        description="OTLP protocol: grpc or http",
    )
    otel_traces_sample_rate: float = Field(
        default=1.0,
        description="Trace sampling ratio (0.0 - 1.0)",
    )
    otel_metrics_export_interval_ms: int = Field(
        default=60000,
        description="Metrics export interval in milliseconds",
    )
    otel_log_correlation: bool = Field(
        default=True,
        description="Inject trace/span IDs into log records",
    )

    # -------------------------------------------------------------------------
    # Deployment / Render
    # -------------------------------------------------------------------------
    render_git_commit: Optional[str] = Field(
        default=None,
        description="Git commit SHA provided by Render (RENDER_GIT_COMMIT)",
    )

    # -------------------------------------------------------------------------
    # SSE Configuration
    # -------------------------------------------------------------------------
    sse_shutdown_drain_seconds: float = Field(
        default=5.0,
        description="Seconds to wait for open advisor streams on shutdown",
    )

    # -------------------------------------------------------------------------
    # Rate Limits (rolling window)
    # -------------------------------------------------------------------------
    roast_rate_limit: int = Field(
        default=3,
        description="Roasts allowed per user per rolling window",
    )
    advisor_chat_rate_limit: int = Field(
        default=5,
        description="Devil's Advocate messages allowed per user per rolling window",
    )
    rate_limit_window_hours: int = Field(
        default=24,
        description="Length of the rolling usage window in hours",
    )

    # -------------------------------------------------------------------------
    # Internal API
    # -------------------------------------------------------------------------
    internal_api_key: Optional[str] = Field(
        default=None,
        description="Shared secret for the scheduled idea pre-generation call",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v: Union[str, List[str], None]) -> List[str]:
        """Accept JSON array, comma-separated string, or list."""
        if v is None:
            return []
        if isinstance(v, list):
            return v
        v = v.strip()
        if not v:
            return []
        if v.startswith("["):
            return json.loads(v)
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    @field_validator("roast_rate_limit", "advisor_chat_rate_limit", "rate_limit_window_hours")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Limits and windows must be positive."""
        if v < 1:
            raise ValueError("Rate limit settings must be >= 1")
        return v

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def allowed_origins_list(self) -> List[str]:
        """CORS origins with local dev defaults."""
        if self.allowed_origins:
            return self.allowed_origins
        return ["http://localhost:3000", "http://localhost:5173"]

    @property
    def rate_limit_window(self) -> timedelta:
        """Rolling usage window as a timedelta."""
        return timedelta(hours=self.rate_limit_window_hours)


@lru_cache
def get_settings() -> Settings:
    """Settings loaded once per process. Call get_settings.cache_clear() to reload."""
    return Settings()
