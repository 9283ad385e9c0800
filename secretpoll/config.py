"""Configuration loading for the secretpoll bridge.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Kubernetes connection
    kubernetes_master_url: str = Field(
        default="",
        description="Kubernetes API server URL (empty uses in-cluster config or kubeconfig)",
    )
    kubernetes_oauth_token: str = Field(
        default="",
        description="Bearer token for the API server; secrets are only watched when set",
    )
    kubernetes_namespace: str = Field(
        default="",
        description="Namespace to watch (empty watches all namespaces)",
    )
    kubernetes_verify_ssl: bool = Field(
        default=True,
        description="Verify the API server TLS certificate",
    )
    kubernetes_ca_cert_file: str = Field(
        default="",
        description="Path to a CA bundle for the API server",
    )

    # Poll cycle configuration
    poll_initial_delay_seconds: float = Field(
        default=1.0,
        description="Delay before the first poll in seconds",
    )
    poll_interval_seconds: float = Field(
        default=0.5,
        description="Fixed delay between polls in seconds",
    )
    poll_backoff_multiplier: int = Field(
        default=0,
        description="Polls to skip once a backoff threshold is hit (0 disables backoff)",
    )
    poll_backoff_error_threshold: int = Field(
        default=0,
        description="Consecutive failed polls before backing off",
    )
    poll_backoff_idle_threshold: int = Field(
        default=0,
        description="Consecutive empty polls before backing off",
    )
    poll_greedy: bool = Field(
        default=False,
        description="Poll again immediately when the previous poll found events",
    )

    # Sink configuration
    sink_backend: Literal["stdout", "webhook"] = Field(
        default="stdout",
        description="Downstream sink type",
    )
    sink_webhook_url: str = Field(
        default="",
        description="Endpoint receiving drained events as JSON",
    )
    sink_webhook_token: str = Field(
        default="",
        description="Optional bearer token for the webhook endpoint",
    )
    sink_webhook_timeout_seconds: float = Field(
        default=10.0,
        description="Webhook request timeout in seconds",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["daemon", "once"] = Field(
        default="daemon",
        description="Run mode",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose output",
    )

    @field_validator("poll_interval_seconds", "sink_webhook_timeout_seconds")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Ensure intervals and timeouts are positive."""
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @field_validator(
        "poll_initial_delay_seconds",
        "poll_backoff_multiplier",
        "poll_backoff_error_threshold",
        "poll_backoff_idle_threshold",
    )
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        """Ensure delays and backoff settings are non-negative."""
        if v < 0:
            raise ValueError("value must be non-negative")
        return v

    @model_validator(mode="after")
    def validate_webhook_url(self) -> "Settings":
        """Require a webhook URL when the webhook sink is selected."""
        if self.sink_backend == "webhook" and not self.sink_webhook_url:
            raise ValueError("sink_webhook_url is required for the webhook sink")
        return self


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
