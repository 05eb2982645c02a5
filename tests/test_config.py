"""Tests for covid_portal/config.py"""

import pytest

from covid_portal import config


def test_jwt_secret_required(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(RuntimeError, match="JWT_SECRET"):
        config.jwt_secret()


def test_jwt_defaults(monkeypatch):
    monkeypatch.delenv("JWT_ALGORITHM", raising=False)
    monkeypatch.delenv("JWT_EXPIRES_MINUTES", raising=False)
    assert config.jwt_algorithm() == "HS256"
    assert config.jwt_expires_minutes() == 10080


def test_int_env_rejects_garbage(monkeypatch):
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(RuntimeError, match="PORT"):
        config.server_port()


def test_server_port_default_and_override(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    assert config.server_port() == 3001
    monkeypatch.setenv("PORT", "8080")
    assert config.server_port() == 8080


def test_postgres_dsn_prefers_url(monkeypatch):
    monkeypatch.setenv("POSTGRES_URL", "postgresql://u:p@db:5432/covid")
    assert config.postgres_dsn() == "postgresql://u:p@db:5432/covid"


def test_postgres_dsn_from_parts(monkeypatch):
    monkeypatch.delenv("POSTGRES_URL", raising=False)
    monkeypatch.delenv("POSTGRES_HOST", raising=False)
    monkeypatch.setenv("POSTGRES_USER", "portal")
    monkeypatch.setenv("POSTGRES_PASSWORD", "pw")
    monkeypatch.setenv("POSTGRES_DB", "covid19")
    monkeypatch.setenv("POSTGRES_PORT", "5433")
    assert config.postgres_dsn() == "postgresql://portal:pw@localhost:5433/covid19"


def test_postgres_dsn_missing_parts(monkeypatch):
    for name in ("POSTGRES_URL", "POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB", "POSTGRES_PORT"):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(RuntimeError, match="POSTGRES_USER"):
        config.postgres_dsn()


def test_cors_origins(monkeypatch):
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    assert config.cors_allow_origins() == ["*"]
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test ,")
    assert config.cors_allow_origins() == ["http://a.test", "http://b.test"]


def test_log_settings(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_JSON", "true")
    assert config.log_level() == "DEBUG"
    assert config.log_json() is True
    monkeypatch.setenv("LOG_JSON", "0")
    assert config.log_json() is False


def test_pool_bounds(monkeypatch):
    monkeypatch.delenv("DB_POOL_MIN", raising=False)
    monkeypatch.setenv("DB_POOL_MAX", "4")
    assert config.pool_bounds() == (1, 4)
