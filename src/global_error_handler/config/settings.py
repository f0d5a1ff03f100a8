# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Error Handler Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated configuration for the fault interception pipeline and its
    logging sinks. Only the bootstrap layer reads the process environment;
    everything else receives plain values (`StatusMapper`, `LoggingOptions`).

Design:
    - Pydantic v2 BaseSettings reading env and an optional `.env` file.
    - Explicit field declarations with constrained types and ranges.
    - Singleton accessor `get_settings()` with LRU cache.
    - Safe, structured logging (the collector API key is never logged).
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from global_error_handler.adapters.mappers.status_code_mapper import (
    DEFAULT_ERROR_MESSAGE,
    DEFAULT_STATUS_CODE,
)
from global_error_handler.infrastructure.logging.logger import get_json_logger
from global_error_handler.infrastructure.logging.options import (
    DEFAULT_FILE_PATH,
    DEFAULT_RETAINED_FILE_COUNT,
    DEFAULT_SERVER_URL,
    LoggingOptions,
    LoggingOptionsBuilder,
    LogLevel,
    RollingInterval,
)

logger = get_json_logger(__name__)


class Settings(BaseSettings):
    """Typed configuration for the error handler and its logging sinks."""

    # ---------------------------
    # Identity
    # ---------------------------
    app_name: str | None = Field(
        default=None,
        description="Application name stamped on log records. Defaults to the process name.",
        validation_alias="APP_NAME",
    )

    # ---------------------------
    # Error responses
    # ---------------------------
    error_default_status_code: int = Field(
        default=DEFAULT_STATUS_CODE,
        ge=100,
        le=599,
        description="Status returned for faults without a registered mapping.",
        validation_alias="ERROR_DEFAULT_STATUS_CODE",
    )
    error_default_message: str = Field(
        default=DEFAULT_ERROR_MESSAGE,
        min_length=1,
        description="Generic client message used whenever the default status is returned.",
        validation_alias="ERROR_DEFAULT_MESSAGE",
    )

    # ---------------------------
    # Logging threshold
    # ---------------------------
    log_min_level: LogLevel = Field(
        default=LogLevel.INFORMATION,
        description="Minimum severity captured by the sinks.",
        validation_alias="LOG_MIN_LEVEL",
    )

    # ---------------------------
    # File sink
    # ---------------------------
    log_file_enabled: bool = Field(
        default=False,
        description="Enable the rolling JSON-lines file sink.",
        validation_alias="LOG_FILE_ENABLED",
    )
    log_file_path: str = Field(
        default=DEFAULT_FILE_PATH,
        description="Log file path template.",
        validation_alias="LOG_FILE_PATH",
    )
    log_file_rolling_interval: RollingInterval = Field(
        default=RollingInterval.DAY,
        description="How often a new log file is started.",
        validation_alias="LOG_FILE_ROLLING_INTERVAL",
    )
    log_file_retained_count: int | None = Field(
        default=DEFAULT_RETAINED_FILE_COUNT,
        ge=1,
        description="Rolled files to keep.",
        validation_alias="LOG_FILE_RETAINED_COUNT",
    )

    # ---------------------------
    # Network collector sink
    # ---------------------------
    log_network_enabled: bool = Field(
        default=False,
        description="Enable the network log-event collector sink.",
        validation_alias="LOG_NETWORK_ENABLED",
    )
    log_network_url: str = Field(
        default=DEFAULT_SERVER_URL,
        description="Collector base URL.",
        validation_alias="LOG_NETWORK_URL",
    )
    log_network_api_key: SecretStr | None = Field(
        default=None,
        description="Optional collector API key.",
        validation_alias="LOG_NETWORK_API_KEY",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("log_min_level", "log_file_rolling_interval", mode="before")
    @classmethod
    def _lowercase_enum(cls, value: object) -> object:
        """Accept enum names in any case (``Warning``, ``DAY``)."""
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def to_logging_options(self) -> LoggingOptions:
        """Build the frozen logging options described by these settings.

        Raises:
            ConfigurationError: If an enabled sink is misconfigured.
        """
        builder = LoggingOptionsBuilder().set_minimum_level(self.log_min_level)
        if self.app_name:
            builder.set_application_name(self.app_name)
        if self.log_file_enabled:
            builder.enable_file_sink(
                path=self.log_file_path,
                interval=self.log_file_rolling_interval,
                retain_count=self.log_file_retained_count,
            )
        if self.log_network_enabled:
            api_key = self.log_network_api_key
            builder.enable_network_sink(
                url=self.log_network_url,
                api_key=api_key.get_secret_value() if api_key is not None else None,
            )
        return builder.build()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid error handler configuration: {exc}") from exc

    logger.info(
        "Settings initialized",
        extra={
            "extra": {
                "error_default_status_code": settings.error_default_status_code,
                "log_min_level": settings.log_min_level.value,
                "file": {
                    "enabled": settings.log_file_enabled,
                    "path": settings.log_file_path,
                    "interval": settings.log_file_rolling_interval.value,
                    "retained": settings.log_file_retained_count,
                },
                "network": {
                    "enabled": settings.log_network_enabled,
                    "url": settings.log_network_url,
                    "api_key_set": settings.log_network_api_key is not None,
                },
            }
        },
    )
    return settings
