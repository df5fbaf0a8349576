from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings


class BaseLoggingConfig(BaseSettings):
    """Common logging configuration."""

    app_log_level: str = "INFO"
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "key",
        "authorization",
        "cookie",
    ]
    app_environment: str = "production"


class Settings(BaseLoggingConfig):
    # Elasticsearch
    elasticsearch_url: str | None = None  # required at startup
    elasticsearch_index: str = "metricbeat"
    elasticsearch_request_timeout_seconds: float = 10.0
    elasticsearch_connect_retries: int = 5

    # Snapshot
    snapshot_window_seconds: int = 900  # trailing 15m
    snapshot_profile: Literal["full", "host"] = "full"

    # Push channel
    stream_tick_interval_seconds: float = 10.0
    stream_emit_stale_signal: bool = False

    # HTTP
    app_host: str = "0.0.0.0"
    app_port: int | None = None
    cors_allow_origins: list[str] = ["*"]

    otel_service_name: str = "metricstream"

    @field_validator("snapshot_window_seconds", "stream_tick_interval_seconds")
    @classmethod
    def _positive(cls, value):
        if value <= 0:
            raise ValueError("must be positive")
        return value


settings = Settings()
