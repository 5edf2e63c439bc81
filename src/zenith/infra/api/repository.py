"""Finance repository backed by the remote REST backend."""

from __future__ import annotations

from typing import Optional

from ...errors import ApiError, NotFoundError, ValidationError
from ...logging_config import get_logger
from ...models.debt import Debt
from ...models.income import Income
from ...models.payment import Payment
from ...models.summaries import DashboardSummary, PaymentHistory, PaymentReceipt
from ...services.balance import (
    amount_in_debt_currency,
    normalize_currency,
    remaining_balance,
    validate_payment,
)
from ...services.debts import validate_debt_record
from ...services.income import validate_income
from . import wire
from .client import ApiClient

logger = get_logger("infra.api.repository")


class ApiFinanceRepository:
    """Finance repository speaking the backend's ``/deudas`` and ``/abonos`` API.

    The backend owns ids, persistence and the final balance; payments are
    still checked client-side first so invalid ones never leave the machine.
    """

    def __init__(self, client: ApiClient):
        self.client = client

    # Debts -------------------------------------------------------------

    def list_debts(self, *, user_id: int) -> list[Debt]:
        data = self.client.get(
            f"/deudas/usuario/{user_id}", error_message="Could not load debts"
        )
        return [wire.debt_from_wire(item) for item in data.get("deudas") or []]

    def get_debt(self, debt_id: int, *, user_id: int) -> Optional[Debt]:
        try:
            data = self.client.get(f"/deudas/{debt_id}", error_message="Could not load the debt")
        except ApiError as exc:
            if exc.status_code == 404:
                return None
            raise
        debt = wire.debt_from_wire(data["deuda"])
        if debt.user_id and debt.user_id != user_id:
            return None
        return debt

    def _require_debt(self, debt_id: int, user_id: int) -> Debt:
        debt = self.get_debt(debt_id, user_id=user_id)
        if debt is None:
            raise NotFoundError(f"Debt {debt_id} not found")
        return debt

    def create_debt(self, debt: Debt, *, user_id: int) -> Debt:
        problems = validate_debt_record(debt)
        if problems:
            raise ValidationError(problems)
        data = self.client.post(
            "/deudas",
            json=wire.debt_to_wire(debt, user_id=user_id),
            error_message="Could not create the debt",
        )
        created = wire.debt_from_wire(data["deuda"])
        logger.info("Created debt", extra={"debt_id": created.id, "user_id": user_id})
        return created

    def update_debt(self, debt: Debt, *, user_id: int) -> Debt:
        if debt.id is None:
            raise NotFoundError("Debt has no id")
        problems = validate_debt_record(debt)
        if problems:
            raise ValidationError(problems)
        data = self.client.put(
            f"/deudas/{debt.id}",
            json=wire.debt_to_wire(debt),
            error_message="Could not update the debt",
        )
        return wire.debt_from_wire(data["deuda"])

    def delete_debt(self, debt_id: int, *, user_id: int) -> None:
        self.client.delete(f"/deudas/{debt_id}", error_message="Could not delete the debt")
        logger.info("Deleted debt", extra={"debt_id": debt_id, "user_id": user_id})

    # Payments ----------------------------------------------------------

    def list_payments(self, *, user_id: int, debt_id: Optional[int] = None) -> list[Payment]:
        data = self.client.get(
            "/abonos",
            params={"id_usuario": user_id, "id_deuda": debt_id},
            error_message="Could not load payments",
        )
        return [wire.payment_from_wire(item) for item in data.get("abonos") or []]

    def list_payments_for_debt(self, debt_id: int, *, user_id: int) -> PaymentHistory:
        data = self.client.get(
            f"/abonos/deuda/{debt_id}", error_message="Could not load payments"
        )
        payments = [wire.payment_from_wire(item) for item in data.get("abonos") or []]
        total = data.get("total_abonado")
        if total is None:
            total = sum(p.amount for p in payments)
        return PaymentHistory(payments=payments, total_paid=normalize_currency(float(total)))

    def _check_payment(
        self, payment: Payment, *, user_id: int, exclude_id: Optional[int] = None
    ) -> None:
        debt = self._require_debt(payment.debt_id, user_id)
        history = self.list_payments_for_debt(debt.id, user_id=user_id)
        others = [p for p in history.payments if exclude_id is None or p.id != exclude_id]
        remaining = remaining_balance(debt, others)
        problems = validate_payment(
            amount_in_debt_currency(payment, debt.currency),
            remaining,
            exchange_rate=payment.exchange_rate,
        )
        if problems:
            logger.info("Refused payment", extra={"debt_id": debt.id, "reasons": problems})
            raise ValidationError(problems)

    def _receipt(self, data: dict) -> PaymentReceipt:
        return PaymentReceipt(
            payment=wire.payment_from_wire(data["abono"]),
            new_balance=normalize_currency(float(data.get("nuevo_saldo") or 0.0)),
            debt_state=wire.state_from_wire(data.get("estado_deuda")),
        )

    def create_payment(self, payment: Payment, *, user_id: int) -> PaymentReceipt:
        self._check_payment(payment, user_id=user_id)
        data = self.client.post(
            "/abonos",
            json=wire.payment_to_wire(payment),
            error_message="Could not record the payment",
        )
        receipt = self._receipt(data)
        logger.info(
            "Recorded payment",
            extra={"payment_id": receipt.payment.id, "remaining": receipt.new_balance},
        )
        return receipt

    def update_payment(self, payment: Payment, *, user_id: int) -> PaymentReceipt:
        if payment.id is None:
            raise NotFoundError("Payment has no id")
        self._check_payment(payment, user_id=user_id, exclude_id=payment.id)
        data = self.client.put(
            f"/abonos/{payment.id}",
            json=wire.payment_to_wire(payment),
            error_message="Could not update the payment",
        )
        return self._receipt(data)

    def delete_payment(self, payment_id: int, *, user_id: int) -> None:
        self.client.delete(f"/abonos/{payment_id}", error_message="Could not delete the payment")
        logger.info("Deleted payment", extra={"payment_id": payment_id, "user_id": user_id})

    # Dashboard & income ------------------------------------------------

    def get_dashboard(self, *, user_id: int) -> DashboardSummary:
        data = self.client.get(f"/dashboard/{user_id}", error_message="Could not load dashboard")
        return wire.dashboard_from_wire(data.get("data") or {})

    def list_incomes(self, *, user_id: int) -> list[Income]:
        data = self.client.get(
            f"/ingresos/usuario/{user_id}", error_message="Could not load income"
        )
        return [wire.income_from_wire(item) for item in data.get("ingresos") or []]

    def create_income(self, income: Income, *, user_id: int) -> Income:
        problems = validate_income(
            description=income.description, amount=income.amount, category=income.category
        )
        if problems:
            raise ValidationError(problems)
        data = self.client.post(
            "/ingresos",
            json=wire.income_to_wire(income, user_id=user_id),
            error_message="Could not record the income",
        )
        return wire.income_from_wire(data["ingreso"])
