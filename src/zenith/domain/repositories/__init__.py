"""Repository protocol definitions for domain layer."""

from .auth import AuthGateway
from .finance import FinanceRepository

__all__ = [
    "AuthGateway",
    "FinanceRepository",
]
