"""Authentication and user management for the local backend."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from sqlmodel import Session, select

from ..errors import AuthenticationError, ValidationError
from ..logging_config import get_logger
from ..models.user import User
from ..session import AuthSession, UserProfile

SessionFactory = Callable[[], Session]

_hasher = PasswordHasher()
logger = get_logger("services.auth")


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def to_profile(user: User) -> UserProfile:
    """Public profile for a stored user."""

    if user.id is None:
        raise ValueError("User has not been saved")
    return UserProfile(
        id=user.id,
        name=user.name,
        email=user.email,
        preferred_currency=user.preferred_currency,
    )


def get_user_by_email(email: str, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by email."""
    email = _normalize_email(email)
    with session_factory() as session:
        user = session.exec(select(User).where(User.email == email)).first()
        if user:
            session.expunge(user)
        return user


def register_user(
    *,
    name: str,
    email: str,
    password: str,
    preferred_currency: str = "MXN",
    session_factory: SessionFactory,
) -> User:
    """Create a new user with a hashed password."""

    problems = []
    if not (name or "").strip():
        problems.append("A name is required")
    email = _normalize_email(email)
    if "@" not in email:
        problems.append("A valid email is required")
    if not password:
        problems.append("Password cannot be empty")
    if problems:
        raise ValidationError(problems)

    password_hash = _hasher.hash(password)
    with session_factory() as session:
        existing = session.exec(select(User).where(User.email == email)).first()
        if existing:
            raise ValidationError("Email already registered")
        user = User(
            name=name.strip(),
            email=email,
            password_hash=password_hash,
            preferred_currency=preferred_currency.strip().upper() or "MXN",
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
    logger.info("Registered user", extra={"user_id": user.id})
    return user


def authenticate(
    *,
    email: str,
    password: str,
    session_factory: SessionFactory,
) -> Optional[User]:
    """Validate credentials and return the user when correct."""

    email = _normalize_email(email)
    if not email:
        return None
    with session_factory() as session:
        user = session.exec(select(User).where(User.email == email)).first()
        if user is None:
            return None
        try:
            _hasher.verify(user.password_hash, password)
        except (VerifyMismatchError, InvalidHash, VerificationError):
            return None

        user.last_login = datetime.now(timezone.utc)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


class LocalAuthGateway:
    """Sign users in against the local database.

    Tokens are opaque random strings; the local backend never checks them,
    they only mark the session as signed in.
    """

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def register(self, name: str, email: str, password: str) -> AuthSession:
        register_user(
            name=name, email=email, password=password, session_factory=self.session_factory
        )
        return self.login(email, password)

    def login(self, email: str, password: str) -> AuthSession:
        user = authenticate(email=email, password=password, session_factory=self.session_factory)
        if user is None:
            logger.warning("Rejected login", extra={"email": _normalize_email(email)})
            raise AuthenticationError("Invalid email or password")
        return AuthSession(token=secrets.token_urlsafe(32), user=to_profile(user))
