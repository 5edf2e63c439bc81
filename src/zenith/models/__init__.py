"""SQLModel table exports."""

from .debt import Debt, DebtState
from .income import Income
from .payment import Payment
from .summaries import DashboardSummary, PaymentHistory, PaymentReceipt
from .user import User

__all__ = [
    "DashboardSummary",
    "Debt",
    "DebtState",
    "Income",
    "Payment",
    "PaymentHistory",
    "PaymentReceipt",
    "User",
]
