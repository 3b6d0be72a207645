"""
Application settings configuration.

Centralized settings loaded from environment variables.
"""

import os
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment Variables:
        JWT_SECRET_KEY: Secret key for verifying identity tokens
        JWT_ALGORITHM: Signing algorithm for identity tokens (default: HS256)
        JWT_TOKEN_EXPIRY_HOURS: Lifetime of issued identity tokens (default: 24)
        SESSION_SECRET_KEY: Secret key for signed session cookies (optional)
        CRON_SECRET: Shared secret for the notification check trigger (optional)
        BLOCKED_THRESHOLD_HOURS: Hours a task may stay BLOCKED before a
            notification is emitted (default: 24)
        DEADLINE_LOOKAHEAD_HOURS: Window for deadline-approaching notifications
            (default: 24)
        CORS_ORIGINS: Comma-separated allowed origins for the frontend
    """

    # Identity tokens
    jwt_secret_key: str = Field(
        default="",
        validation_alias="JWT_SECRET_KEY",
        description="Secret key for signing identity tokens. Must be at least 32 bytes."
    )

    jwt_algorithm: str = Field(
        default="HS256",
        validation_alias="JWT_ALGORITHM",
    )

    jwt_token_expiry_hours: int = Field(
        default=24,
        validation_alias="JWT_TOKEN_EXPIRY_HOURS",
        ge=1,
        le=24 * 30,
    )

    # Browser sessions
    session_secret_key: str = Field(
        default="",
        validation_alias="SESSION_SECRET_KEY",
        description="Secret key for signing session cookies. Empty = sessions disabled."
    )

    # Notification checker
    # When set, POST /api/notifications/check requires a matching X-Cron-Secret header.
    cron_secret: str = Field(
        default="",
        validation_alias="CRON_SECRET",
    )

    blocked_threshold_hours: int = Field(
        default=24,
        validation_alias="BLOCKED_THRESHOLD_HOURS",
        ge=1,
    )

    deadline_lookahead_hours: int = Field(
        default=24,
        validation_alias="DEADLINE_LOOKAHEAD_HOURS",
        ge=1,
    )

    cors_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        validation_alias="CORS_ORIGINS",
    )

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("jwt_secret_key", "session_secret_key")
    @classmethod
    def validate_secret_length(cls, v: str) -> str:
        """Validate that secret keys are sufficiently long."""
        if v and len(v) < 32:
            raise ValueError("Secret keys must be at least 32 characters")
        return v

    @property
    def jwt_configured(self) -> bool:
        """Whether bearer tokens can be issued and verified."""
        return bool(self.jwt_secret_key)

    @property
    def is_production(self) -> bool:
        return os.environ.get("EVENTFLOW_ENV", "development").lower() == "production"

    @property
    def cors_origin_list(self) -> List[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings.

    Returns:
        AppSettings instance
    """
    return AppSettings()
