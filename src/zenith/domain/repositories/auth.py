"""Authentication gateway protocol."""

from __future__ import annotations

from typing import Protocol

from ...session import AuthSession


class AuthGateway(Protocol):
    """Registers and signs in users, returning a bearer-token session."""

    def register(self, name: str, email: str, password: str) -> AuthSession:
        """Create an account and sign it in."""
        ...

    def login(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for a session."""
        ...
