import pytest

from inventory_queries import config
from inventory_queries.config import Settings


def test_get_settings_defaults(monkeypatch: pytest.MonkeyPatch):
    for name in ("DB_HOST", "DB_PORT", "DB_USER", "DB_NAME", "DB_DRIVER", "POSTGRESQL_URL"):
        monkeypatch.delenv(name, raising=False)
    config.get_settings.cache_clear()
    try:
        settings = config.get_settings()
        assert settings.db_host == "localhost"
        assert settings.db_port == 5432
        assert settings.db_user == "postgres"
        assert settings.db_name == "inventory"
        assert settings.database_url is None
        assert settings.db_driver == "psycopg"
        assert settings.pool_min_size == 1
        assert settings.pool_max_size == 10
        assert settings.pool_max_idle_seconds == 10
        assert settings.pool_max_lifetime_seconds == 30
        assert settings.query_trace is True
        assert config.get_settings() is settings
    finally:
        config.get_settings.cache_clear()


def test_settings_read_environment_aliases(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DB_DRIVER", "asyncpg")
    monkeypatch.setenv("POSTGRESQL_URL", "postgresql://u:p@h:1/d")
    monkeypatch.setenv("DB_POOL_MAX_SIZE", "3")
    monkeypatch.setenv("QUERY_TRACE", "false")

    settings = Settings()

    assert settings.db_driver == "asyncpg"
    assert settings.database_url == "postgresql://u:p@h:1/d"
    assert settings.pool_max_size == 3
    assert settings.query_trace is False


def test_unknown_driver_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DB_DRIVER", "sqlite")
    with pytest.raises(ValueError):
        Settings()
