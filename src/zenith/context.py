"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .config import BaseConfig
from .domain.repositories import AuthGateway, FinanceRepository
from .errors import AuthenticationError
from .logging_config import get_logger
from .session import AuthSession, SessionStore

logger = get_logger("context")


@dataclass
class AppContext:
    """Configuration, backend and signed-in session for one process."""

    config: BaseConfig
    repository: FinanceRepository
    auth: AuthGateway
    session_store: SessionStore
    session: Optional[AuthSession] = None

    # Called with the new token (or None) whenever the session changes
    on_token_change: Optional[Callable[[Optional[str]], None]] = None

    def require_user_id(self) -> int:
        """Return the current user id or raise if nobody is signed in."""

        if self.session is None:
            raise AuthenticationError("Not signed in; run 'zenith login' first")
        return self.session.user_id

    def sign_in(self, session: AuthSession) -> AuthSession:
        """Adopt ``session`` and persist it."""

        self.session = session
        self.session_store.save(session)
        if self.on_token_change:
            self.on_token_change(session.token)
        logger.info("Session started", extra={"user_id": session.user_id})
        return session

    def sign_out(self) -> None:
        self.session = None
        self.session_store.clear()
        if self.on_token_change:
            self.on_token_change(None)

    def login(self, email: str, password: str) -> AuthSession:
        return self.sign_in(self.auth.login(email, password))

    def register(self, name: str, email: str, password: str) -> AuthSession:
        return self.sign_in(self.auth.register(name, email, password))


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create the context for the configured backend and restore any saved session."""

    if config is None:
        config = BaseConfig()

    store = SessionStore(config.session_path)
    saved = store.load()

    if config.BACKEND == "api":
        from .infra.api import ApiAuthGateway, ApiClient, ApiFinanceRepository

        client = ApiClient(
            config.API_URL,
            token=saved.token if saved else None,
            timeout=config.API_TIMEOUT,
        )

        def _set_token(token: Optional[str]) -> None:
            client.token = token

        return AppContext(
            config=config,
            repository=ApiFinanceRepository(client),
            auth=ApiAuthGateway(client),
            session_store=store,
            session=saved,
            on_token_change=_set_token,
        )

    from .infra.database import bootstrap_database
    from .infra.repositories import SQLModelFinanceRepository
    from .services.auth import LocalAuthGateway

    _engine, session_factory = bootstrap_database(config)
    return AppContext(
        config=config,
        repository=SQLModelFinanceRepository(session_factory),
        auth=LocalAuthGateway(session_factory),
        session_store=store,
        session=saved,
    )
