"""Signed-in session: bearer token plus the current user's profile.

The session is the only client-side state that outlives a command. It is
persisted as a small JSON document in the data directory.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from .logging_config import get_logger

logger = get_logger("session")


@dataclass(slots=True)
class UserProfile:
    """Public view of a user, as returned by login."""

    id: int
    name: str
    email: str
    preferred_currency: str = "MXN"


@dataclass(slots=True)
class AuthSession:
    """Token and user for the signed-in account."""

    token: str
    user: UserProfile

    @property
    def user_id(self) -> int:
        return self.user.id

    def to_dict(self) -> dict:
        return {"token": self.token, "user": asdict(self.user)}

    @classmethod
    def from_dict(cls, data: dict) -> "AuthSession":
        return cls(token=data["token"], user=UserProfile(**data["user"]))


class SessionStore:
    """Load, save and clear the persisted session file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> Optional[AuthSession]:
        """Return the stored session, or None when absent or unreadable."""

        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return AuthSession.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError):
            logger.warning("Discarding unreadable session file", extra={"path": str(self.path)})
            return None

    def save(self, session: AuthSession) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(session.to_dict()), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


__all__ = ["AuthSession", "SessionStore", "UserProfile"]
