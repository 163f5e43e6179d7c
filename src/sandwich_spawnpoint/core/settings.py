"""Application settings and configuration.

This module defines all configuration options for the Sandwich Spawnpoint
service. Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Sandwich Spawnpoint API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    app_env: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV"),
    )
    port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication. A missing secret is reported by the token
    # service at startup rather than here, so tooling can import settings.
    app_secret: str | None = Field(default=None, alias="APP_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    token_lifetime_seconds: int = Field(default=60 * 60 * 18, alias="TOKEN_LIFETIME_SECONDS")
    admin_upgrade_password: str = Field(default="changeme", alias="ADMIN_UPGRADE_PASSWORD")

    # Bruteforce protection policy
    bruteforce_window_seconds: int = Field(
        default=60 * 60 * 20,
        alias="BRUTEFORCE_WINDOW_SECONDS",
    )
    bruteforce_user_threshold: int = Field(default=3, alias="BRUTEFORCE_USER_THRESHOLD")
    bruteforce_ip_threshold: int = Field(default=21, alias="BRUTEFORCE_IP_THRESHOLD")
    cleanup_interval_seconds: float = Field(default=600.0, alias="CLEANUP_INTERVAL_SECONDS")

    # Database configuration
    database_url: str = Field(default="sqlite:///./sandwich.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # ElectricSQL shape sync service
    electric_url: str = Field(default="http://electric:3000", alias="ELECTRIC_URL")
    sync_http_timeout_seconds: float = Field(default=60.0, alias="SYNC_HTTP_TIMEOUT_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


settings = Settings()
