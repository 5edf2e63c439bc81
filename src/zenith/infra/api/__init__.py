"""Remote backend: HTTP client, repository and auth gateway."""

from .auth import ApiAuthGateway
from .client import ApiClient
from .repository import ApiFinanceRepository

__all__ = ["ApiAuthGateway", "ApiClient", "ApiFinanceRepository"]
