"""Configuration loading from the environment."""

from __future__ import annotations

from pathlib import Path

import pytest

from zenith.config import BaseConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ZENITH_DATABASE_URL",
        "ZENITH_BACKEND",
        "ZENITH_API_URL",
        "ZENITH_API_TIMEOUT",
        "ZENITH_DEFAULT_CURRENCY",
        "ZENITH_UPCOMING_DAYS",
        "ZENITH_DEV_MODE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("ZENITH_DATA_DIR", str(tmp_path / "data"))

    config = BaseConfig()

    assert config.DATA_DIR == (tmp_path / "data").resolve()
    assert config.DATA_DIR.exists()
    assert config.BACKEND == "local"
    assert config.API_URL == "http://localhost:3000"
    assert config.API_TIMEOUT == 10.0
    assert config.DEFAULT_CURRENCY == "MXN"
    assert config.UPCOMING_DAYS == 30
    assert config.DATABASE_URL == f"sqlite:///{config.DATA_DIR / 'zenith.db'}"
    assert config.session_path == Path(config.DATA_DIR) / "session.json"
    assert config.sqlalchemy_engine_options() == {"connect_args": {"check_same_thread": False}}


def test_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("ZENITH_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ZENITH_BACKEND", " API ")
    monkeypatch.setenv("ZENITH_API_URL", "https://debts.example.com/")
    monkeypatch.setenv("ZENITH_API_TIMEOUT", "2.5")
    monkeypatch.setenv("ZENITH_DEFAULT_CURRENCY", "usd")
    monkeypatch.setenv("ZENITH_UPCOMING_DAYS", "7")
    monkeypatch.setenv("ZENITH_DEV_MODE", "false")

    config = BaseConfig()

    assert config.BACKEND == "api"
    assert config.API_URL == "https://debts.example.com"
    assert config.API_TIMEOUT == 2.5
    assert config.DEFAULT_CURRENCY == "USD"
    assert config.UPCOMING_DAYS == 7
    assert config.DEV_MODE is False


def test_unknown_backend_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("ZENITH_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ZENITH_BACKEND", "cloud")

    with pytest.raises(ValueError, match="ZENITH_BACKEND"):
        BaseConfig()


def test_bad_timeout_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("ZENITH_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ZENITH_API_TIMEOUT", "soon")

    with pytest.raises(ValueError, match="ZENITH_API_TIMEOUT"):
        BaseConfig()
