"""Dashboard aggregation and due-date helpers."""

from __future__ import annotations

from datetime import date, timedelta

from zenith.services.dashboard import reminders_due, summarize, upcoming_due
from tests.conftest import make_debt, make_payment

TODAY = date(2024, 6, 1)


def test_summarize_counts_and_sums():
    car = make_debt(1000.0, interest_rate=10.0, debt_id=1, state="in_progress")
    phone = make_debt(200.0, debt_id=2, state="paid")
    trip = make_debt(50.0, currency="USD", debt_id=3)
    payments = [
        make_payment(100.0, debt_id=1),
        make_payment(200.0, debt_id=2),
    ]

    summary = summarize([car, phone, trip], payments)

    assert summary.debt_count == 3
    assert summary.paid_count == 1
    assert summary.open_count == 2
    assert summary.total_debt == 1350.0
    assert summary.total_paid == 300.0
    assert summary.outstanding == 1050.0
    assert summary.outstanding_by_currency == {"MXN": 1000.0, "USD": 50.0}


def test_summarize_empty():
    summary = summarize([], [])

    assert summary.debt_count == 0
    assert summary.outstanding == 0.0
    assert summary.outstanding_by_currency == {}


def test_upcoming_due_window_is_exclusive():
    debts = [
        make_debt(debt_id=1, due_date=TODAY),
        make_debt(debt_id=2, due_date=TODAY + timedelta(days=1)),
        make_debt(debt_id=3, due_date=TODAY + timedelta(days=29)),
        make_debt(debt_id=4, due_date=TODAY + timedelta(days=30)),
        make_debt(debt_id=5, due_date=TODAY + timedelta(days=3), state="paid"),
    ]

    upcoming = upcoming_due(debts, today=TODAY)

    assert [d.id for d in upcoming] == [2, 3]


def test_upcoming_due_sorted_and_limited():
    debts = [make_debt(debt_id=i, due_date=TODAY + timedelta(days=10 - i)) for i in range(1, 9)]

    upcoming = upcoming_due(debts, today=TODAY, limit=3)

    assert [d.id for d in upcoming] == [8, 7, 6]


def test_reminders_due_respects_flag():
    quiet = make_debt(debt_id=1, due_date=TODAY + timedelta(days=2))
    quiet.reminder = False
    loud = make_debt(debt_id=2, due_date=TODAY + timedelta(days=4))

    assert [d.id for d in reminders_due([quiet, loud], today=TODAY)] == [2]
