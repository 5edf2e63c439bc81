"""Pytest configuration and shared fixtures for Zenith tests.

Provides an isolated SQLite database per test, a session factory with a
bootstrapped user, entity factories and a float comparison helper.
"""

from __future__ import annotations

import tempfile
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine, select

# Import all models to ensure they're registered with SQLModel metadata
from zenith.models import Debt, Income, Payment, User
from zenith.services.auth import LocalAuthGateway, register_user
from zenith.infra.repositories import SQLModelFinanceRepository

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to the test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching ``Callable[[], Session]`` with a default user.

    The bootstrapped user is exposed as ``session_factory.user``.
    """

    def factory():
        return Session(db_engine, expire_on_commit=False)

    with factory() as session:
        existing = session.exec(select(User).limit(1)).first()
        if existing is None:
            existing = User(name="Tester", email="tester@example.com", password_hash="dummy-hash")
            session.add(existing)
            session.commit()
            session.refresh(existing)
        factory.user = existing  # type: ignore[attr-defined]

    return factory


@pytest.fixture
def user(session_factory) -> User:
    return session_factory.user


@pytest.fixture
def other_user(session_factory) -> User:
    """A second account for ownership checks."""

    with session_factory() as session:
        u = User(name="Other", email="other@example.com", password_hash="dummy-hash")
        session.add(u)
        session.commit()
        session.refresh(u)
        return u


@pytest.fixture
def repo(session_factory) -> SQLModelFinanceRepository:
    return SQLModelFinanceRepository(session_factory)


@pytest.fixture
def auth_gateway(session_factory) -> LocalAuthGateway:
    return LocalAuthGateway(session_factory)


@pytest.fixture
def registered_user(session_factory) -> User:
    """A user with a real argon2 password hash (password ``s3cret``)."""

    return register_user(
        name="Ana",
        email="ana@example.com",
        password="s3cret",
        session_factory=session_factory,
    )


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def debt_factory(repo, user):
    """Factory creating debts through the repository.

    Returns:
        Callable: Function that creates and persists Debt instances
    """

    def _create_debt(
        description: str = "Test Debt",
        principal: float = 1000.0,
        currency: str = "MXN",
        due_date: date | None = None,
        creditor: str = "Bank",
        interest_rate: float = 0.0,
        reminder: bool = True,
        owner: User | None = None,
    ) -> Debt:
        owner = owner or user
        debt = Debt(
            user_id=owner.id,
            description=description,
            creditor=creditor,
            principal=principal,
            currency=currency,
            due_date=due_date or date.today() + timedelta(days=60),
            interest_applied=interest_rate > 0,
            interest_rate=interest_rate,
            reminder=reminder,
        )
        return repo.create_debt(debt, user_id=owner.id)

    return _create_debt


@pytest.fixture
def payment_factory(repo, user):
    """Factory recording payments through the repository.

    Returns:
        Callable: Function returning the ``PaymentReceipt``
    """

    def _create_payment(
        debt: Debt,
        amount: float,
        currency: str | None = None,
        exchange_rate: float = 1.0,
        note: str = "",
        paid_at: datetime | None = None,
        owner: User | None = None,
    ):
        owner = owner or user
        payment = Payment(
            debt_id=debt.id,
            amount=amount,
            currency=currency or debt.currency,
            exchange_rate=exchange_rate,
            note=note,
            paid_at=paid_at or datetime.now(timezone.utc),
        )
        return repo.create_payment(payment, user_id=owner.id)

    return _create_payment


@pytest.fixture
def income_factory(repo, user):
    def _create_income(
        description: str = "Paycheck",
        amount: float = 500.0,
        category: str = "Salary",
        received_on: date | None = None,
        currency: str = "MXN",
    ) -> Income:
        income = Income(
            user_id=user.id,
            description=description,
            amount=amount,
            currency=currency,
            category=category,
            received_on=received_on or date.today(),
        )
        return repo.create_income(income, user_id=user.id)

    return _create_income


# =============================================================================
# Helper Utilities
# =============================================================================


def make_debt(
    principal: float = 1000.0,
    *,
    interest_rate: float = 0.0,
    currency: str = "MXN",
    due_date: date | None = None,
    state: str = "pending",
    debt_id: int | None = 1,
) -> Debt:
    """Build an unsaved debt for pure balance calculations."""

    return Debt(
        id=debt_id,
        user_id=1,
        description="Loan",
        principal=principal,
        currency=currency,
        due_date=due_date or date.today() + timedelta(days=30),
        interest_applied=interest_rate > 0,
        interest_rate=interest_rate,
        state=state,
    )


def make_payment(
    amount: float,
    *,
    currency: str = "MXN",
    exchange_rate: float = 1.0,
    debt_id: int = 1,
    payment_id: int | None = None,
    paid_at: datetime | None = None,
    note: str = "",
) -> Payment:
    """Build an unsaved payment."""

    return Payment(
        id=payment_id,
        debt_id=debt_id,
        amount=amount,
        currency=currency,
        exchange_rate=exchange_rate,
        paid_at=paid_at or datetime(2024, 1, 1, 12, 0),
        note=note,
    )


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance.

    Args:
        actual: Actual value
        expected: Expected value
        tolerance: Maximum allowed difference (default 0.01 = 1 cent)
    """
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"
