# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

import logging

from beartype import beartype
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_file=None,
        env_file_encoding="utf-8",
        frozen=True,
        validate_default=True,
        extra="forbid",
    )

    # API Configuration
    app_name: str = Field(
        default="Carrier API Simulator",
        description="Application name",
        min_length=1,
    )
    api_host: str = Field(
        default="0.0.0.0",  # nosec B104 - Binding to all interfaces is needed for containerized deployment
        description="API host to bind to",
    )
    api_port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        description="API port to bind to",
    )
    api_env: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="API environment",
    )
    api_cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Security
    api_key: str = Field(
        default="test_clarence_key_123",
        min_length=1,
        description="Shared secret expected in the X-API-Key header",
    )

    # Quoting
    quote_validity_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Days a freshly synthesized quote stays bindable",
    )
    document_base_url: str = Field(
        default="https://carrier-simulator.example.com",
        description="Base URL used for generated document links",
        min_length=1,
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level",
    )

    @field_validator("api_cors_origins")
    @classmethod
    def validate_cors_origins(cls: type["Settings"], v: list[str]) -> list[str]:
        """Validate CORS origins are proper URLs."""
        for origin in v:
            if origin != "*" and not origin.startswith(("http://", "https://")):
                raise ValueError(f"Invalid CORS origin: {origin}")
        return v

    @field_validator("document_base_url")
    @classmethod
    def validate_document_base_url(cls: type["Settings"], v: str) -> str:
        """Strip the trailing slash so document paths can be appended."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid document base URL: {v}")
        return v.rstrip("/")

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls: type["Settings"], v: str, info: ValidationInfo) -> str:
        """Ensure the test key is not used in production."""
        if "api_env" in info.data and info.data["api_env"] == "production":
            if v.startswith("test_"):
                raise ValueError(
                    "Test API key cannot be used in production. "
                    "Set API_KEY environment variable."
                )
        return v

    @property
    @beartype
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.api_env == "production"

    @property
    @beartype
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.api_env == "development"

    @property
    @beartype
    def log_level_value(self) -> int:
        """Numeric logging level for the configured name."""
        return logging.getLevelName(self.log_level)


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
