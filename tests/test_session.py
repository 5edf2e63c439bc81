"""Tests for the persisted session and the application context."""

from __future__ import annotations

import pytest

from zenith.context import AppContext, create_app_context
from zenith.config import BaseConfig
from zenith.errors import AuthenticationError
from zenith.infra.api import ApiFinanceRepository
from zenith.infra.repositories import SQLModelFinanceRepository
from zenith.session import AuthSession, SessionStore, UserProfile


def _session(token: str = "tok") -> AuthSession:
    return AuthSession(token=token, user=UserProfile(id=3, name="Ana", email="ana@example.com"))


def test_store_round_trip(tmp_path):
    store = SessionStore(tmp_path / "nested" / "session.json")

    store.save(_session())
    loaded = store.load()

    assert loaded == _session()
    assert loaded.user_id == 3


def test_store_missing_file(tmp_path):
    assert SessionStore(tmp_path / "session.json").load() is None


def test_store_discards_garbage(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")

    assert SessionStore(path).load() is None


def test_store_clear_is_idempotent(tmp_path):
    store = SessionStore(tmp_path / "session.json")
    store.save(_session())

    store.clear()
    store.clear()

    assert store.load() is None


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.setenv("ZENITH_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("ZENITH_DATABASE_URL", raising=False)
    monkeypatch.setenv("ZENITH_BACKEND", "local")
    return BaseConfig()


def test_local_context_uses_sqlmodel_repository(config):
    context = create_app_context(config)

    assert isinstance(context.repository, SQLModelFinanceRepository)
    assert context.session is None
    with pytest.raises(AuthenticationError):
        context.require_user_id()


def test_context_restores_saved_session(config):
    SessionStore(config.session_path).save(_session())

    context = create_app_context(config)

    assert context.require_user_id() == 3


def test_register_persists_session_and_sign_out_clears(config):
    context = create_app_context(config)

    session = context.register("Ana", "ana@example.com", "s3cret")

    assert SessionStore(config.session_path).load() == session
    context.sign_out()
    assert context.session is None
    assert not config.session_path.exists()


def test_api_context_updates_client_token(tmp_path, monkeypatch):
    monkeypatch.setenv("ZENITH_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ZENITH_BACKEND", "api")
    config = BaseConfig()
    SessionStore(config.session_path).save(_session("saved"))

    context = create_app_context(config)

    assert isinstance(context.repository, ApiFinanceRepository)
    assert context.repository.client.token == "saved"
    context.sign_in(_session("fresh"))
    assert context.repository.client.token == "fresh"
    context.sign_out()
    assert context.repository.client.token is None


def test_context_is_a_plain_dataclass(tmp_path):
    store = SessionStore(tmp_path / "s.json")
    context = AppContext(config=None, repository=None, auth=None, session_store=store)

    context.sign_in(_session())

    assert store.load().token == "tok"
