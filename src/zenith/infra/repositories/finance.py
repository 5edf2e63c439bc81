"""SQLModel implementation of the finance repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...errors import NotFoundError, ValidationError
from ...logging_config import get_logger
from ...models.debt import Debt, DebtState
from ...models.income import Income
from ...models.payment import Payment
from ...models.summaries import DashboardSummary, PaymentHistory, PaymentReceipt
from ...services import dashboard
from ...services.balance import apply_payment, derive_state, total_paid
from ...services.debts import validate_debt_record
from ...services.income import validate_income

logger = get_logger("infra.finance")

_EDITABLE_DEBT_FIELDS = (
    "description",
    "creditor",
    "principal",
    "currency",
    "due_date",
    "reminder",
    "interest_applied",
    "interest_rate",
)


class SQLModelFinanceRepository:
    """SQLModel-based finance repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    # Debts -------------------------------------------------------------

    def _load_debt(self, session: Session, debt_id: int, user_id: int) -> Debt:
        debt = session.exec(
            select(Debt).where(Debt.id == debt_id, Debt.user_id == user_id)
        ).first()
        if debt is None:
            raise NotFoundError(f"Debt {debt_id} not found")
        return debt

    def _debt_payments(
        self, session: Session, debt_id: int, *, exclude_id: Optional[int] = None
    ) -> list[Payment]:
        statement = select(Payment).where(Payment.debt_id == debt_id)
        if exclude_id is not None:
            statement = statement.where(Payment.id != exclude_id)
        return list(session.exec(statement.order_by(Payment.paid_at)).all())  # type: ignore

    def list_debts(self, *, user_id: int) -> list[Debt]:
        """List the user's debts, soonest due first."""
        with self.session_factory() as session:
            statement = (
                select(Debt)
                .where(Debt.user_id == user_id)
                .order_by(Debt.due_date, Debt.id)  # type: ignore
            )
            return list(session.exec(statement).all())

    def get_debt(self, debt_id: int, *, user_id: int) -> Optional[Debt]:
        """Retrieve a debt by ID."""
        with self.session_factory() as session:
            return session.exec(
                select(Debt).where(Debt.id == debt_id, Debt.user_id == user_id)
            ).first()

    def create_debt(self, debt: Debt, *, user_id: int) -> Debt:
        """Create a new debt in the pending state."""
        problems = validate_debt_record(debt)
        if problems:
            raise ValidationError(problems)
        with self.session_factory() as session:
            debt.user_id = user_id
            debt.state = DebtState.PENDING.value
            session.add(debt)
            session.commit()
            session.refresh(debt)
        logger.info("Created debt", extra={"debt_id": debt.id, "user_id": user_id})
        return debt

    def update_debt(self, debt: Debt, *, user_id: int) -> Debt:
        """Update a debt's terms and recompute its state from its payments."""
        if debt.id is None:
            raise NotFoundError("Debt has no id")
        problems = validate_debt_record(debt)
        if problems:
            raise ValidationError(problems)
        with self.session_factory() as session:
            stored = self._load_debt(session, debt.id, user_id)
            for field_name in _EDITABLE_DEBT_FIELDS:
                setattr(stored, field_name, getattr(debt, field_name))
            # Recorded payments stay valid even if the new total is below them
            payments = self._debt_payments(session, stored.id)
            stored.state = derive_state(stored, payments).value
            session.add(stored)
            session.commit()
            session.refresh(stored)
        logger.info("Updated debt", extra={"debt_id": stored.id, "state": stored.state})
        return stored

    def delete_debt(self, debt_id: int, *, user_id: int) -> None:
        """Delete a debt; its payments go with it."""
        with self.session_factory() as session:
            debt = self._load_debt(session, debt_id, user_id)
            session.delete(debt)
            session.commit()
        logger.info("Deleted debt", extra={"debt_id": debt_id, "user_id": user_id})

    # Payments ----------------------------------------------------------

    def list_payments(self, *, user_id: int, debt_id: Optional[int] = None) -> list[Payment]:
        """List the user's payments, newest first."""
        with self.session_factory() as session:
            statement = (
                select(Payment)
                .join(Debt, Payment.debt_id == Debt.id)  # type: ignore
                .where(Debt.user_id == user_id)
            )
            if debt_id is not None:
                statement = statement.where(Payment.debt_id == debt_id)
            statement = statement.order_by(Payment.paid_at.desc(), Payment.id.desc())  # type: ignore
            return list(session.exec(statement).all())

    def list_payments_for_debt(self, debt_id: int, *, user_id: int) -> PaymentHistory:
        """Payments of one debt, oldest first, with their total in the debt's currency."""
        with self.session_factory() as session:
            debt = self._load_debt(session, debt_id, user_id)
            payments = self._debt_payments(session, debt_id)
            return PaymentHistory(payments=payments, total_paid=total_paid(debt, payments))

    def create_payment(self, payment: Payment, *, user_id: int) -> PaymentReceipt:
        """Record a payment, stamp its balance snapshot and update the debt state."""
        with self.session_factory() as session:
            debt = self._load_debt(session, payment.debt_id, user_id)
            existing = self._debt_payments(session, debt.id)
            try:
                new_balance, state = apply_payment(debt, existing, payment)
            except ValidationError as exc:
                logger.info(
                    "Refused payment",
                    extra={"debt_id": debt.id, "reasons": exc.messages},
                )
                raise
            debt.state = state.value
            session.add(payment)
            session.add(debt)
            session.commit()
            session.refresh(payment)
            session.refresh(debt)
        logger.info(
            "Recorded payment",
            extra={"payment_id": payment.id, "debt_id": debt.id, "remaining": new_balance},
        )
        return PaymentReceipt(payment=payment, new_balance=new_balance, debt_state=state)

    def _load_payment(self, session: Session, payment_id: int, user_id: int) -> Payment:
        payment = session.exec(
            select(Payment)
            .join(Debt, Payment.debt_id == Debt.id)  # type: ignore
            .where(Payment.id == payment_id, Debt.user_id == user_id)
        ).first()
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} not found")
        return payment

    def update_payment(self, payment: Payment, *, user_id: int) -> PaymentReceipt:
        """Edit a payment, validating against the balance without it."""
        if payment.id is None:
            raise NotFoundError("Payment has no id")
        with self.session_factory() as session:
            stored = self._load_payment(session, payment.id, user_id)
            debt = self._load_debt(session, stored.debt_id, user_id)
            others = self._debt_payments(session, debt.id, exclude_id=stored.id)
            stored.amount = payment.amount
            stored.currency = payment.currency
            stored.exchange_rate = payment.exchange_rate
            stored.note = payment.note
            new_balance, _ = apply_payment(debt, others, stored)
            state = derive_state(debt, [*others, stored])
            debt.state = state.value
            session.add(stored)
            session.add(debt)
            session.commit()
            session.refresh(stored)
        logger.info("Updated payment", extra={"payment_id": stored.id, "remaining": new_balance})
        return PaymentReceipt(payment=stored, new_balance=new_balance, debt_state=state)

    def delete_payment(self, payment_id: int, *, user_id: int) -> None:
        """Delete a payment and recompute the owning debt's state."""
        with self.session_factory() as session:
            payment = self._load_payment(session, payment_id, user_id)
            debt = self._load_debt(session, payment.debt_id, user_id)
            session.delete(payment)
            session.flush()
            debt.state = derive_state(debt, self._debt_payments(session, debt.id)).value
            session.add(debt)
            session.commit()
        logger.info("Deleted payment", extra={"payment_id": payment_id, "debt_id": debt.id})

    # Dashboard & income ------------------------------------------------

    def get_dashboard(self, *, user_id: int) -> DashboardSummary:
        """Aggregate counts and sums across the user's debts."""
        debts = self.list_debts(user_id=user_id)
        payments = self.list_payments(user_id=user_id)
        return dashboard.summarize(debts, payments)

    def list_incomes(self, *, user_id: int) -> list[Income]:
        """List income records, newest first."""
        with self.session_factory() as session:
            statement = (
                select(Income)
                .where(Income.user_id == user_id)
                .order_by(Income.received_on.desc(), Income.id.desc())  # type: ignore
            )
            return list(session.exec(statement).all())

    def create_income(self, income: Income, *, user_id: int) -> Income:
        """Record an income."""
        problems = validate_income(
            description=income.description, amount=income.amount, category=income.category
        )
        if problems:
            raise ValidationError(problems)
        with self.session_factory() as session:
            income.user_id = user_id
            session.add(income)
            session.commit()
            session.refresh(income)
        logger.info("Recorded income", extra={"income_id": income.id, "user_id": user_id})
        return income
