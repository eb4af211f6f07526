"""
Application Configuration - Pydantic Settings for type-safe config.

All configuration is strongly typed.
FAIL FAST - Critical config is validated at startup.
"""

import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when critical configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration - NO DEFAULT for production safety
    database_url: str = ""
    database_pool_size: int = 10
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_pool_recycle: int = 3600
    run_migrations_on_startup: bool = False

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    api_title: str = "PromptOS API"
    api_version: str = "0.1.0"
    api_description: str = "Prompt sharing spaces with usage signals and daily AI credits"
    cors_origins: str = "http://localhost:3000"

    # User authentication (bearer JWT)
    jwt_secret: str = ""  # generate with: openssl rand -hex 32
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24 * 30

    @property
    def allowed_origins(self) -> list[str]:
        """Get list of allowed CORS origins."""
        origins = []
        for origin in self.cors_origins.split(","):
            origin = origin.strip()
            if origin and origin not in origins:
                origins.append(origin)
        return origins

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True

    # Observability - Tracing
    tracing_enabled: bool = False
    otlp_endpoint: str = "http://otel-collector:4317"
    otlp_insecure: bool = True
    service_name: str = "promptos-api"

    # Daily credit ledger
    daily_credit_limit: int = 20
    max_reward_per_call: int = 10

    # Usage signals
    signal_history_limit: int = 50
    signal_note_max_length: int = 500

    # Notifications
    notification_list_limit: int = 20

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """
        FAIL FAST: Validate critical configuration at startup.

        The app MUST NOT start if critical config is missing.
        """
        errors: list[str] = []

        if not self.database_url:
            errors.append("DATABASE_URL is required but empty or missing")
        elif not self.database_url.startswith(("postgresql", "postgres")):
            errors.append(
                f"DATABASE_URL must be a PostgreSQL URL, got: {self.database_url[:20]}..."
            )

        if not self.jwt_secret:
            errors.append("JWT_SECRET is required but empty or missing")
        elif len(self.jwt_secret) < 32:
            errors.append("JWT_SECRET must be at least 32 characters")

        if self.daily_credit_limit <= 0:
            errors.append(f"DAILY_CREDIT_LIMIT must be positive, got: {self.daily_credit_limit}")

        if self.max_reward_per_call <= 0:
            errors.append(
                f"MAX_REWARD_PER_CALL must be positive, got: {self.max_reward_per_call}"
            )

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "CRITICAL CONFIGURATION ERROR - APPLICATION CANNOT START",
                    "=" * 60,
                    *[f"  ✗ {e}" for e in errors],
                    "=" * 60,
                    "",
                ]
            )
            print(error_msg, file=sys.stderr)
            raise ConfigurationError(error_msg)

        return self

    @property
    def sync_database_url(self) -> str:
        """Database URL for synchronous drivers (Alembic)."""
        return self.database_url.replace("+asyncpg", "+psycopg2")


# Global settings instance - validates at import time
settings = Settings()
