"""Sign-in against the remote backend's ``/login`` and ``/register``."""

from __future__ import annotations

from ...errors import ApiError, AuthenticationError
from ...logging_config import get_logger
from ...session import AuthSession
from . import wire
from .client import ApiClient

logger = get_logger("infra.api.auth")


class ApiAuthGateway:
    """Exchange credentials for a bearer token issued by the backend."""

    def __init__(self, client: ApiClient):
        self.client = client

    def login(self, email: str, password: str) -> AuthSession:
        try:
            data = self.client.post(
                "/login",
                json={"email": email, "password": password},
                error_message="Could not sign in",
            )
        except ApiError as exc:
            if exc.status_code in (400, 401, 403, 404):
                raise AuthenticationError(exc.message) from exc
            raise
        session = AuthSession(token=data["token"], user=wire.user_from_wire(data["user"]))
        logger.info("Signed in", extra={"user_id": session.user_id})
        return session

    def register(self, name: str, email: str, password: str) -> AuthSession:
        self.client.post(
            "/register",
            json={"nombre": name, "email": email, "password": password},
            error_message="Could not register the user",
        )
        # The backend does not hand out a token on registration
        return self.login(email, password)
