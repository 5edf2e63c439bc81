"""Exception hierarchy shared by repositories, services and the CLI."""

from __future__ import annotations

from typing import Iterable, Optional


class ZenithError(Exception):
    """Base class for every error raised on purpose by Zenith."""


class ValidationError(ZenithError, ValueError):
    """Input rejected before it reached storage or the backend."""

    def __init__(self, messages: Iterable[str] | str):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class NotFoundError(ZenithError, LookupError):
    """A debt, payment, user or currency does not exist for the caller."""


class AuthenticationError(ZenithError):
    """Credentials were rejected or no user is signed in."""


class ApiError(ZenithError):
    """The remote backend could not be reached or answered with an error."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


__all__ = [
    "ApiError",
    "AuthenticationError",
    "NotFoundError",
    "ValidationError",
    "ZenithError",
]
