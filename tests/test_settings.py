"""Tests for environment-driven settings."""

from sandwich_spawnpoint.core.settings import Settings


def test_defaults(monkeypatch) -> None:
    for name in ("APP_ENV", "NODE_ENV", "PORT", "ELECTRIC_URL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.port == 3000
    assert settings.electric_url == "http://electric:3000"
    assert settings.token_lifetime_seconds == 64800
    assert settings.bruteforce_window_seconds == 72000
    assert not settings.is_production


def test_node_env_is_accepted(monkeypatch) -> None:
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.setenv("NODE_ENV", "production")
    monkeypatch.setenv("PORT", "8080")

    settings = Settings(_env_file=None)

    assert settings.is_production
    assert settings.port == 8080


def test_async_database_url_is_made_sync(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://app@db/sandwich")

    settings = Settings(_env_file=None)

    assert settings.database_url_sync == "postgresql+psycopg://app@db/sandwich"
