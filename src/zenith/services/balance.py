"""Balance engine: outstanding balance, progress and lifecycle of a debt.

A debt's total is its principal plus, when interest is applied, a one-off
``principal * rate / 100``. Payments are converted into the debt's currency
with their own exchange rate and subtracted from that total. The remaining
balance is clamped at zero, so it can never go negative even if historical
data overshoots.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from ..errors import ValidationError
from ..models.debt import Debt, DebtState
from ..models.payment import Payment

AMOUNT_NOT_POSITIVE = "The amount must be greater than zero"
AMOUNT_EXCEEDS_BALANCE = "The payment cannot be greater than the outstanding balance"
RATE_NOT_POSITIVE = "The exchange rate must be greater than zero"


def normalize_currency(amount: float) -> float:
    """Round to cents using half-up rounding."""

    return round(amount + 1e-9, 2)


@dataclass(slots=True)
class BalanceSnapshot:
    """Balance figures for one debt at a point in time."""

    total: float
    interest: float
    paid: float
    remaining: float
    progress: float
    state: DebtState


def interest_amount(debt: Debt) -> float:
    """Return the interest added on top of the principal (0 when not applied)."""

    if not debt.interest_applied:
        return 0.0
    rate = max(float(debt.interest_rate or 0.0), 0.0)
    return normalize_currency(float(debt.principal) * rate / 100.0)


def debt_total(debt: Debt) -> float:
    """Principal plus applied interest."""

    return normalize_currency(float(debt.principal) + interest_amount(debt))


def amount_in_debt_currency(payment: Payment, debt_currency: str) -> float:
    """Express a payment in the currency of the debt it pays."""

    amount = float(payment.amount)
    if payment.currency and payment.currency.upper() != debt_currency.upper():
        amount *= float(payment.exchange_rate or 1.0)
    return normalize_currency(amount)


def total_paid(debt: Debt, payments: Iterable[Payment]) -> float:
    """Sum of payments in the debt's currency."""

    return normalize_currency(
        sum(amount_in_debt_currency(payment, debt.currency) for payment in payments)
    )


def remaining_balance(debt: Debt, payments: Iterable[Payment]) -> float:
    """Outstanding balance of ``debt`` after ``payments``; never negative."""

    return max(0.0, normalize_currency(debt_total(debt) - total_paid(debt, payments)))


def payment_progress(debt: Debt, payments: Iterable[Payment]) -> float:
    """Percentage of the total already paid, between 0 and 100."""

    total = debt_total(debt)
    if total <= 0:
        return 0.0
    return min(100.0, round(total_paid(debt, payments) / total * 100.0, 2))


def validate_payment(
    amount: float, remaining: float, *, exchange_rate: float = 1.0
) -> list[str]:
    """Return the user-facing reasons a payment of ``amount`` must be refused.

    ``amount`` is expected in the debt's currency already. An empty list means
    the payment can be recorded.
    """

    problems: list[str] = []
    # NaN slips through ordinary comparisons
    if exchange_rate is None or not math.isfinite(exchange_rate) or exchange_rate <= 0:
        problems.append(RATE_NOT_POSITIVE)
    if amount is None or not math.isfinite(amount) or amount <= 0:
        problems.append(AMOUNT_NOT_POSITIVE)
    elif normalize_currency(amount) > normalize_currency(remaining):
        problems.append(AMOUNT_EXCEEDS_BALANCE)
    return problems


def state_after_payment(remaining: float) -> DebtState:
    """State a debt moves to once a payment leaves ``remaining`` outstanding."""

    return DebtState.PAID if normalize_currency(remaining) <= 0 else DebtState.IN_PROGRESS


def derive_state(debt: Debt, payments: Iterable[Payment]) -> DebtState:
    """Recompute the persisted state from the debt's terms and payments."""

    payments = list(payments)
    if not payments:
        return DebtState.PENDING
    return state_after_payment(remaining_balance(debt, payments))


def coerce_state(value: str | DebtState | None) -> DebtState:
    """Parse a stored state, falling back to pending for unknown values."""

    if isinstance(value, DebtState):
        return value
    try:
        return DebtState(value)
    except ValueError:
        return DebtState.PENDING


def display_state(debt: Debt, remaining: float, today: Optional[date] = None) -> DebtState:
    """State to show: ``overdue`` once the due date passed with money still owed."""

    state = coerce_state(debt.state)
    if state is DebtState.PAID:
        return state
    today = today or date.today()
    if debt.due_date and debt.due_date < today and remaining > 0:
        return DebtState.OVERDUE
    if state is DebtState.OVERDUE:
        # Stored overdue from a backend but no longer past due
        return DebtState.IN_PROGRESS if remaining < debt_total(debt) else DebtState.PENDING
    return state


def balance_snapshot(
    debt: Debt, payments: Iterable[Payment], today: Optional[date] = None
) -> BalanceSnapshot:
    """Compute every balance figure for ``debt`` in one pass."""

    payments = list(payments)
    remaining = remaining_balance(debt, payments)
    return BalanceSnapshot(
        total=debt_total(debt),
        interest=interest_amount(debt),
        paid=total_paid(debt, payments),
        remaining=remaining,
        progress=payment_progress(debt, payments),
        state=display_state(debt, remaining, today),
    )


def apply_payment(
    debt: Debt, payments: Iterable[Payment], payment: Payment
) -> tuple[float, DebtState]:
    """Validate ``payment`` against ``debt`` and stamp its balance snapshot.

    ``payments`` are the debt's already recorded payments, excluding
    ``payment``. Returns the new remaining balance and the state the debt
    moves to. Raises ``ValidationError`` with the user-facing messages when the
    payment is refused.
    """

    remaining = remaining_balance(debt, payments)
    amount = amount_in_debt_currency(payment, debt.currency)
    problems = validate_payment(amount, remaining, exchange_rate=payment.exchange_rate)
    if problems:
        raise ValidationError(problems)

    new_remaining = max(0.0, normalize_currency(remaining - amount))
    payment.remaining_after = new_remaining
    return new_remaining, state_after_payment(new_remaining)


__all__ = [
    "AMOUNT_EXCEEDS_BALANCE",
    "AMOUNT_NOT_POSITIVE",
    "BalanceSnapshot",
    "RATE_NOT_POSITIVE",
    "amount_in_debt_currency",
    "apply_payment",
    "balance_snapshot",
    "coerce_state",
    "debt_total",
    "derive_state",
    "display_state",
    "interest_amount",
    "normalize_currency",
    "payment_progress",
    "remaining_balance",
    "state_after_payment",
    "total_paid",
    "validate_payment",
]
