import pytest

from app.core.config import Settings


def test_database_uri_is_assembled_from_parts(monkeypatch):
    monkeypatch.delenv("DATABASE_URI", raising=False)

    settings = Settings(
        _env_file=None,
        POSTGRES_SERVER="db",
        POSTGRES_USER="admin",
        POSTGRES_PASSWORD="secret",
        POSTGRES_DB="shop",
        POSTGRES_PORT="6543",
    )

    assert settings.DATABASE_URI == "postgresql+asyncpg://admin:secret@db:6543/shop"


def test_explicit_database_uri_wins():
    settings = Settings(_env_file=None, DATABASE_URI="sqlite+aiosqlite:///./catalog.db")

    assert settings.DATABASE_URI == "sqlite+aiosqlite:///./catalog.db"


@pytest.mark.parametrize(
    "raw, expected",
    [("true", True), ("1", True), ("yes", True), ("false", False), ("0", False), ("off", False), ("", False)],
)
def test_flags_parse_strings(raw, expected):
    settings = Settings(_env_file=None, ENABLE_TRACING=raw, ENABLE_METRICS=raw)

    assert settings.ENABLE_TRACING is expected
    assert settings.ENABLE_METRICS is expected


def test_defaults(monkeypatch):
    monkeypatch.delenv("JSON_LOGS", raising=False)

    settings = Settings(_env_file=None)

    assert settings.API_V1_STR == "/api/v1"
    assert settings.JSON_LOGS is True
    assert settings.DB_CREATE_ALL is False
