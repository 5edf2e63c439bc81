"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

BACKENDS = ("local", "api")


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Zenith"
    DB_FILENAME = "zenith.db"
    SESSION_FILENAME = "session.json"
    SQLITE_PRAGMAS = {"foreign_keys": "on"}

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("ZENITH_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("ZENITH_DATABASE_URL", self._build_sqlite_url())
        self.BACKEND = os.getenv("ZENITH_BACKEND", "local").strip().lower()
        self.API_URL = os.getenv("ZENITH_API_URL", "http://localhost:3000").rstrip("/")
        self.API_TIMEOUT = _env_float("ZENITH_API_TIMEOUT", 10.0)
        self.DEFAULT_CURRENCY = os.getenv("ZENITH_DEFAULT_CURRENCY", "MXN").strip().upper()
        self.UPCOMING_DAYS = int(_env_float("ZENITH_UPCOMING_DAYS", 30))
        if self.BACKEND not in BACKENDS:
            raise ValueError(
                f"ZENITH_BACKEND must be one of {', '.join(BACKENDS)}; got {self.BACKEND!r}."
            )

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the database, session and logs live."""

        data_root = os.getenv("ZENITH_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = Path(self.DATA_DIR) / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    @property
    def session_path(self) -> Path:
        """Location of the persisted sign-in session."""

        return Path(self.DATA_DIR) / self.SESSION_FILENAME

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}
