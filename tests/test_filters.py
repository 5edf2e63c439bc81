"""Debt, payment and income list helpers."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone

import pytest

from zenith.models import Income
from zenith.services.debts import active_debts, filter_debts, normalize_status, validate_debt
from zenith.services.income import (
    average_income,
    income_by_category,
    total_income,
    validate_income,
)
from zenith.services.payments import (
    averages_by_currency,
    filter_payments,
    recent_payments,
    totals_by_currency,
)
from tests.conftest import make_debt, make_payment


@pytest.fixture
def debts():
    car = make_debt(debt_id=1, state="in_progress")
    car.description, car.creditor = "Car loan", "Bank"
    phone = make_debt(debt_id=2, state="paid")
    phone.description, phone.creditor = "Phone", "Carrier"
    rent = make_debt(debt_id=3)
    rent.description, rent.creditor = "Rent", "Landlord bank"
    return [car, phone, rent]


def test_filter_debts_by_search(debts):
    assert [d.id for d in filter_debts(debts, search="BANK")] == [1, 3]


def test_filter_debts_by_status(debts):
    assert [d.id for d in filter_debts(debts, status="paid")] == [2]
    assert [d.id for d in filter_debts(debts, status="all")] == [1, 2, 3]


def test_filter_debts_overdue_uses_due_date_and_balance():
    today = date(2024, 6, 1)
    late = make_debt(500.0, debt_id=1, state="in_progress", due_date=today - timedelta(days=3))
    upcoming = make_debt(500.0, debt_id=2, due_date=today + timedelta(days=3))
    settled = make_debt(500.0, debt_id=3, state="paid", due_date=today - timedelta(days=3))
    grouped = {1: [make_payment(200.0)], 3: [make_payment(500.0, debt_id=3)]}

    overdue = filter_debts(
        [late, upcoming, settled], status="overdue", payments_by_debt=grouped, today=today
    )

    assert [d.id for d in overdue] == [1]
    assert filter_debts([late], status="in_progress", today=today) == [late]


def test_normalize_status():
    assert normalize_status(None) is None
    assert normalize_status(" All ") is None
    assert normalize_status("in_progress").value == "in_progress"


def test_active_debts_excludes_paid(debts):
    assert [d.id for d in active_debts(debts)] == [1, 3]


def test_validate_debt_messages():
    problems = validate_debt(
        description="",
        principal=None,
        due_date=None,
        interest_applied=True,
        interest_rate=-1,
    )

    assert problems == [
        "A description is required",
        "The amount must be greater than zero",
        "A target payment date is required",
        "The interest rate cannot be negative",
    ]


def test_filter_payments(debts):
    payments = [
        make_payment(10.0, debt_id=1, note="march"),
        make_payment(20.0, debt_id=2),
        make_payment(30.0, debt_id=3, note="rent share"),
    ]

    assert [p.amount for p in filter_payments(payments, debt_id=1)] == [10.0]
    assert [p.amount for p in filter_payments(payments, search="car", debts=debts)] == [10.0]
    assert [p.amount for p in filter_payments(payments, search="SHARE", debts=debts)] == [30.0]


def test_totals_and_averages_by_currency():
    payments = [
        make_payment(10.0),
        make_payment(20.0),
        make_payment(5.0, currency="USD", exchange_rate=17.0),
    ]

    assert totals_by_currency(payments) == {"MXN": 30.0, "USD": 5.0}
    assert averages_by_currency(payments) == {"MXN": 15.0, "USD": 5.0}


def test_recent_payments_mixes_naive_and_aware_datetimes():
    naive = make_payment(1.0, payment_id=1, paid_at=datetime(2024, 1, 1, 9, 0))
    aware = make_payment(2.0, payment_id=2, paid_at=datetime(2024, 1, 2, tzinfo=timezone.utc))
    newest = make_payment(3.0, payment_id=3, paid_at=datetime(2024, 2, 1))

    assert [p.id for p in recent_payments([naive, aware, newest], limit=2)] == [3, 2]


def _income(amount, category):
    return Income(user_id=1, description="x", amount=amount, category=category)


def test_income_summaries():
    incomes = [_income(100, "Salary"), _income(50, "Gift"), _income(250, "Salary")]

    assert total_income(incomes) == 400.0
    assert average_income(incomes) == 133.33
    assert income_by_category(incomes) == [("Salary", 350.0), ("Gift", 50.0)]
    assert average_income([]) == 0.0


def test_validate_income():
    assert validate_income(description="Pay", amount=1, category="Salary") == []
    assert validate_income(description=" ", amount=0, category="Lottery") == [
        "A description is required",
        "The amount must be greater than zero",
        "Unknown category: Lottery",
    ]


@pytest.mark.parametrize("principal", [math.nan, math.inf, -math.inf])
def test_validate_debt_rejects_non_finite_principal(principal):
    problems = validate_debt(description="Loan", principal=principal, due_date=date(2030, 1, 1))

    assert problems == ["The amount must be greater than zero"]


def test_validate_debt_rejects_non_finite_interest_and_unknown_currency():
    problems = validate_debt(
        description="Loan",
        principal=100.0,
        due_date=date(2030, 1, 1),
        interest_applied=True,
        interest_rate=math.nan,
        currency="XYZ",
    )

    assert problems == ["The interest rate cannot be negative", "Unsupported currency: XYZ"]


def test_validate_income_rejects_nan_amount():
    assert validate_income(description="Pay", amount=math.nan, category="Salary") == [
        "The amount must be greater than zero"
    ]
