"""Finance repository protocol shared by the local and remote backends."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.debt import Debt
from ...models.income import Income
from ...models.payment import Payment
from ...models.summaries import DashboardSummary, PaymentHistory, PaymentReceipt


class FinanceRepository(Protocol):
    """Debts, payments, income and dashboard figures for one user.

    Implementations validate payments with the balance engine before they are
    stored or submitted and raise ``ValidationError`` when refused.
    """

    def list_debts(self, *, user_id: int) -> list[Debt]:
        """List the user's debts."""
        ...

    def get_debt(self, debt_id: int, *, user_id: int) -> Optional[Debt]:
        """Retrieve a debt by ID."""
        ...

    def create_debt(self, debt: Debt, *, user_id: int) -> Debt:
        """Create a new debt in the pending state."""
        ...

    def update_debt(self, debt: Debt, *, user_id: int) -> Debt:
        """Update a debt's terms and recompute its state."""
        ...

    def delete_debt(self, debt_id: int, *, user_id: int) -> None:
        """Delete a debt and its payments."""
        ...

    def list_payments(self, *, user_id: int, debt_id: Optional[int] = None) -> list[Payment]:
        """List payments, newest first, optionally for one debt."""
        ...

    def list_payments_for_debt(self, debt_id: int, *, user_id: int) -> PaymentHistory:
        """Payments of one debt with their running total."""
        ...

    def create_payment(self, payment: Payment, *, user_id: int) -> PaymentReceipt:
        """Record a payment and move the debt to its new state."""
        ...

    def update_payment(self, payment: Payment, *, user_id: int) -> PaymentReceipt:
        """Edit a payment's amount, currency, rate or note."""
        ...

    def delete_payment(self, payment_id: int, *, user_id: int) -> None:
        """Delete a payment and recompute the debt's state."""
        ...

    def get_dashboard(self, *, user_id: int) -> DashboardSummary:
        """Aggregate counts and sums across the user's debts."""
        ...

    def list_incomes(self, *, user_id: int) -> list[Income]:
        """List income records, newest first."""
        ...

    def create_income(self, income: Income, *, user_id: int) -> Income:
        """Record an income."""
        ...
