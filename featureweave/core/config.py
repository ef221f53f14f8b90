"""
Configuration Settings.

This module defines the featureweave configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="featureweave logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="FEATUREWEAVE_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="FEATUREWEAVE_LOG_FORMAT",
    )

    # =====================================================================
    # Resolution Configuration
    # =====================================================================
    feature_separator: str = Field(
        default="/",
        description="Separator used to group feature identifiers into a capability tree",
        alias="FEATUREWEAVE_FEATURE_SEPARATOR",
    )
    strict_registration: bool = Field(
        default=False,
        description="Raise registration errors instead of logging and dropping the registration",
        alias="FEATUREWEAVE_STRICT_REGISTRATION",
    )
    retry_failed_factories: bool = Field(
        default=False,
        description="Clear a failed factory memo so the next materialization retries it",
        alias="FEATUREWEAVE_RETRY_FAILED_FACTORIES",
    )

    @field_validator("feature_separator")
    @classmethod
    def _separator_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("feature separator must not be empty")
        return value

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("simple", "detailed", "json"):
            raise ValueError(f"unknown log format: {value!r}")
        return value


settings = Settings()
