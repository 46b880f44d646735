"""Application settings and configuration.

This module defines all configuration options for the Chirpline application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files. The
    feed engine never reads these directly; the wiring layer passes the
    relevant values in as explicit parameters.
    """

    # Application metadata
    app_name: str = Field(default="Chirpline", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 3,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Database configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./chirpline.db",
        alias="DATABASE_URL",
    )
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Feed enrichment
    feed_likers_preview: int = Field(default=5, ge=0, alias="FEED_LIKERS_PREVIEW")
    feed_repost_max_depth: int = Field(default=3, ge=0, alias="FEED_REPOST_MAX_DEPTH")
    # A single AsyncSession cannot run statements concurrently; raise this only
    # with a store adapter that opens its own connections per call.
    feed_enrich_concurrency: int = Field(default=1, ge=1, alias="FEED_ENRICH_CONCURRENCY")

    # HTTP pagination defaults
    feed_default_limit: int = Field(default=20, ge=1, alias="FEED_DEFAULT_LIMIT")
    feed_max_limit: int = Field(default=100, ge=1, alias="FEED_MAX_LIMIT")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
