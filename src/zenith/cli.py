"""Command-line interface for Zenith."""

from __future__ import annotations

import functools
from collections import defaultdict
from datetime import date
from typing import Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import ValidationError, ZenithError
from .logging_config import get_logger, setup_logging
from .models.debt import Debt, DebtState
from .models.income import Income
from .models.payment import Payment
from .services import dashboard as dashboard_service
from .services import exchange
from .services.balance import balance_snapshot
from .services.debts import active_debts, filter_debts, validate_debt
from .services.income import (
    INCOME_CATEGORIES,
    average_income,
    income_by_category,
    total_income,
    validate_income,
)
from .services.payments import (
    averages_by_currency,
    filter_payments,
    recent_payments,
    totals_by_currency,
)

logger = get_logger("cli")

_STATE_LABELS = {
    DebtState.PENDING: "Pending",
    DebtState.IN_PROGRESS: "In progress",
    DebtState.PAID: "Paid",
    DebtState.OVERDUE: "Overdue",
}
_DATE = click.DateTime(formats=["%Y-%m-%d"])
_CURRENCY = click.Choice(exchange.SUPPORTED_CURRENCIES, case_sensitive=False)


def _handle_errors(func):
    """Turn domain errors into one-line CLI errors."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ZenithError as exc:
            logger.warning("Command failed", extra={"error": str(exc)})
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _reject(problems: list[str]) -> None:
    if problems:
        raise ValidationError(problems)


def _default_currency(app: AppContext) -> str:
    if app.session is not None:
        return app.session.user.preferred_currency
    return app.config.DEFAULT_CURRENCY


def _payments_by_debt(app: AppContext, user_id: int) -> dict[int, list[Payment]]:
    grouped: dict[int, list[Payment]] = defaultdict(list)
    for payment in app.repository.list_payments(user_id=user_id):
        grouped[payment.debt_id].append(payment)
    return grouped


def _load_app(ctx: click.Context) -> AppContext:
    """Return the root context object, creating it on first use."""

    root = ctx.find_root()
    if root.obj is None:
        try:
            config = BaseConfig()
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
        setup_logging(config)
        root.obj = create_app_context(config)
    return root.obj


def pass_app(func):
    """Like ``click.pass_obj`` but opens storage only for commands that need it."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(_load_app(click.get_current_context()), *args, **kwargs)

    return wrapper


@click.group()
def main() -> None:
    """Track debts, payments against them and income."""


# Accounts ------------------------------------------------------------------


@main.command()
@click.argument("name")
@click.argument("email")
@click.password_option()
@pass_app
@_handle_errors
def register(app: AppContext, name: str, email: str, password: str) -> None:
    """Create an account and sign in."""

    session = app.register(name, email, password)
    click.echo(f"Welcome, {session.user.name}!")


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
@pass_app
@_handle_errors
def login(app: AppContext, email: str, password: str) -> None:
    """Sign in and remember the session."""

    session = app.login(email, password)
    click.echo(f"Signed in as {session.user.email}")


@main.command()
@pass_app
def logout(app: AppContext) -> None:
    """Forget the saved session."""

    app.sign_out()
    click.echo("Signed out")


@main.command()
@pass_app
@_handle_errors
def whoami(app: AppContext) -> None:
    """Show the signed-in user."""

    app.require_user_id()
    user = app.session.user
    click.echo(f"{user.name} <{user.email}> (#{user.id}, {user.preferred_currency})")


# Dashboard -----------------------------------------------------------------


@main.command()
@pass_app
@_handle_errors
def dashboard(app: AppContext) -> None:
    """Totals, upcoming due dates and latest payments."""

    user_id = app.require_user_id()
    summary = app.repository.get_dashboard(user_id=user_id)
    debts = app.repository.list_debts(user_id=user_id)
    payments = app.repository.list_payments(user_id=user_id)
    currency = _default_currency(app)

    click.echo(f"Total debt:   {exchange.format_money(summary.total_debt, currency)}")
    click.echo(f"Total paid:   {exchange.format_money(summary.total_paid, currency)}")
    click.echo(f"Outstanding:  {exchange.format_money(summary.outstanding, currency)}")
    click.echo(
        f"Debts: {summary.debt_count} ({summary.open_count} open, {summary.paid_count} paid)"
    )

    upcoming = dashboard_service.upcoming_due(debts, days=app.config.UPCOMING_DAYS)
    reminders = {
        d.id for d in dashboard_service.reminders_due(debts, days=app.config.UPCOMING_DAYS)
    }
    click.echo("")
    click.echo("Upcoming due dates:")
    if not upcoming:
        click.echo("  none")
    for debt in upcoming:
        flag = "  [reminder]" if debt.id in reminders else ""
        click.echo(f"  {debt.due_date.isoformat()}  {debt.description}{flag}")

    descriptions = {d.id: d.description for d in debts}
    click.echo("")
    click.echo("Latest payments:")
    latest = recent_payments(payments)
    if not latest:
        click.echo("  none")
    for payment in latest:
        click.echo(
            f"  {payment.paid_at:%Y-%m-%d}  {descriptions.get(payment.debt_id, 'Debt')}"
            f"  -{exchange.format_money(payment.amount, payment.currency)}"
        )


# Debts ---------------------------------------------------------------------


@main.group()
def debts() -> None:
    """Manage debts."""


@debts.command("list")
@click.option("--search", default=None, help="Match description or creditor")
@click.option(
    "--status",
    type=click.Choice(["all"] + [s.value for s in DebtState]),
    default="all",
)
@pass_app
@_handle_errors
def list_debts(app: AppContext, search: Optional[str], status: str) -> None:
    """List debts with their remaining balance."""

    user_id = app.require_user_id()
    all_debts = app.repository.list_debts(user_id=user_id)
    grouped = _payments_by_debt(app, user_id)
    selected = filter_debts(
        all_debts, search=search, status=status, payments_by_debt=grouped
    )
    if not selected:
        click.echo("No debts registered" if not all_debts else "No matching debts")
        return
    for debt in selected:
        snap = balance_snapshot(debt, grouped.get(debt.id, []))
        click.echo(
            f"#{debt.id}  {debt.description} ({debt.creditor or '-'})  "
            f"{exchange.format_money(snap.remaining, debt.currency)} of "
            f"{exchange.format_money(snap.total, debt.currency)}  "
            f"{snap.progress:.0f}%  {_STATE_LABELS[snap.state]}  due {debt.due_date.isoformat()}"
        )


@debts.command("show")
@click.argument("debt_id", type=int)
@pass_app
@_handle_errors
def show_debt(app: AppContext, debt_id: int) -> None:
    """Balance and payment history of one debt."""

    user_id = app.require_user_id()
    debt = app.repository.get_debt(debt_id, user_id=user_id)
    if debt is None:
        raise click.ClickException(f"Debt {debt_id} not found")
    history = app.repository.list_payments_for_debt(debt_id, user_id=user_id)
    snap = balance_snapshot(debt, history.payments)
    money = functools.partial(exchange.format_money, currency=debt.currency)

    click.echo(f"{debt.description} ({debt.creditor or '-'})")
    click.echo(f"State:     {_STATE_LABELS[snap.state]}")
    click.echo(f"Due:       {debt.due_date.isoformat()}")
    click.echo(f"Principal: {money(debt.principal)}")
    if debt.interest_applied:
        click.echo(f"Interest:  {debt.interest_rate:g}% ({money(snap.interest)})")
    click.echo(f"Total:     {money(snap.total)}")
    click.echo(f"Paid:      {money(snap.paid)} ({snap.progress:.0f}%)")
    click.echo(f"Remaining: {money(snap.remaining)}")
    for payment in history.payments:
        line = (
            f"  #{payment.id} {payment.paid_at:%Y-%m-%d} "
            f"{exchange.format_money(payment.amount, payment.currency)}"
            f" -> {money(payment.remaining_after)} left"
        )
        if payment.note:
            line += f"  {payment.note}"
        click.echo(line)


@debts.command("add")
@click.option("--description", required=True)
@click.option("--creditor", default="")
@click.option("--amount", type=float, required=True, help="Principal amount")
@click.option("--currency", type=_CURRENCY, default=None)
@click.option("--due", "due", type=_DATE, required=True, help="Target payment date (YYYY-MM-DD)")
@click.option("--interest-rate", type=float, default=None, help="Percent added to the principal")
@click.option("--reminder/--no-reminder", default=True)
@pass_app
@_handle_errors
def add_debt(
    app: AppContext,
    description: str,
    creditor: str,
    amount: float,
    currency: Optional[str],
    due,
    interest_rate: Optional[float],
    reminder: bool,
) -> None:
    """Register a new debt."""

    user_id = app.require_user_id()
    interest_applied = interest_rate is not None and interest_rate != 0
    currency = (currency or _default_currency(app)).upper()
    _reject(
        validate_debt(
            description=description,
            principal=amount,
            due_date=due.date(),
            interest_applied=interest_applied,
            interest_rate=interest_rate or 0.0,
            currency=currency,
        )
    )
    debt = Debt(
        user_id=user_id,
        description=description.strip(),
        creditor=creditor.strip(),
        principal=amount,
        currency=currency,
        due_date=due.date(),
        reminder=reminder,
        interest_applied=interest_applied,
        interest_rate=interest_rate or 0.0,
    )
    created = app.repository.create_debt(debt, user_id=user_id)
    click.echo(f"Debt #{created.id} registered")


@debts.command("edit")
@click.argument("debt_id", type=int)
@click.option("--description", default=None)
@click.option("--creditor", default=None)
@click.option("--amount", type=float, default=None)
@click.option("--currency", type=_CURRENCY, default=None)
@click.option("--due", "due", type=_DATE, default=None)
@click.option("--interest-rate", type=float, default=None, help="0 removes the interest")
@click.option("--reminder/--no-reminder", default=None)
@pass_app
@_handle_errors
def edit_debt(
    app: AppContext,
    debt_id: int,
    description: Optional[str],
    creditor: Optional[str],
    amount: Optional[float],
    currency: Optional[str],
    due,
    interest_rate: Optional[float],
    reminder: Optional[bool],
) -> None:
    """Change a debt's details."""

    user_id = app.require_user_id()
    debt = app.repository.get_debt(debt_id, user_id=user_id)
    if debt is None:
        raise click.ClickException(f"Debt {debt_id} not found")
    if description is not None:
        debt.description = description.strip()
    if creditor is not None:
        debt.creditor = creditor.strip()
    if amount is not None:
        debt.principal = amount
    if currency is not None:
        debt.currency = currency.upper()
    if due is not None:
        debt.due_date = due.date()
    if interest_rate is not None:
        debt.interest_applied = interest_rate != 0
        debt.interest_rate = interest_rate
    if reminder is not None:
        debt.reminder = reminder
    updated = app.repository.update_debt(debt, user_id=user_id)
    click.echo(f"Debt #{updated.id} updated")


@debts.command("delete")
@click.argument("debt_id", type=int)
@click.confirmation_option(prompt="Delete this debt and all of its payments?")
@pass_app
@_handle_errors
def delete_debt(app: AppContext, debt_id: int) -> None:
    """Delete a debt together with its payments."""

    user_id = app.require_user_id()
    app.repository.delete_debt(debt_id, user_id=user_id)
    click.echo(f"Debt #{debt_id} deleted")


# Payments ------------------------------------------------------------------


@main.group()
def payments() -> None:
    """Record and review payments."""


@payments.command("list")
@click.option("--debt", "debt_id", type=int, default=None)
@click.option("--search", default=None, help="Match the note or the debt description")
@pass_app
@_handle_errors
def list_payments(app: AppContext, debt_id: Optional[int], search: Optional[str]) -> None:
    """Payment history, newest first."""

    user_id = app.require_user_id()
    all_debts = app.repository.list_debts(user_id=user_id)
    selected = filter_payments(
        app.repository.list_payments(user_id=user_id),
        debt_id=debt_id,
        search=search,
        debts=all_debts,
    )
    if not selected:
        click.echo("No payments found")
        return
    descriptions = {d.id: d.description for d in all_debts}
    for payment in recent_payments(selected, limit=len(selected)):
        click.echo(
            f"#{payment.id}  {payment.paid_at:%Y-%m-%d}  "
            f"{descriptions.get(payment.debt_id, 'Debt')}  "
            f"{exchange.format_money(payment.amount, payment.currency)}  {payment.note}".rstrip()
        )
    totals = ", ".join(
        exchange.format_money(amount, currency)
        for currency, amount in totals_by_currency(selected).items()
    )
    averages = ", ".join(
        exchange.format_money(amount, currency)
        for currency, amount in averages_by_currency(selected).items()
    )
    click.echo(f"Total: {totals}")
    click.echo(f"Average: {averages}")


@payments.command("add")
@click.argument("debt_id", type=int)
@click.argument("amount", type=float)
@click.option("--currency", type=_CURRENCY, default=None, help="Defaults to the debt's currency")
@click.option("--rate", "exchange_rate", type=float, default=1.0, help="Debt currency per unit")
@click.option("--note", default="")
@pass_app
@_handle_errors
def add_payment(
    app: AppContext,
    debt_id: int,
    amount: float,
    currency: Optional[str],
    exchange_rate: float,
    note: str,
) -> None:
    """Record a payment against a debt."""

    user_id = app.require_user_id()
    debt = app.repository.get_debt(debt_id, user_id=user_id)
    if debt is None:
        raise click.ClickException(f"Debt {debt_id} not found")
    if not active_debts([debt]):
        raise click.ClickException("This debt is already paid")
    payment = Payment(
        debt_id=debt_id,
        amount=amount,
        currency=(currency or debt.currency).upper(),
        exchange_rate=exchange_rate,
        note=note,
    )
    receipt = app.repository.create_payment(payment, user_id=user_id)
    click.echo(
        f"Payment recorded. Remaining: "
        f"{exchange.format_money(receipt.new_balance, debt.currency)} "
        f"({_STATE_LABELS[receipt.debt_state]})"
    )


@payments.command("edit")
@click.argument("payment_id", type=int)
@click.option("--amount", type=float, default=None)
@click.option("--currency", type=_CURRENCY, default=None)
@click.option("--rate", "exchange_rate", type=float, default=None)
@click.option("--note", default=None)
@pass_app
@_handle_errors
def edit_payment(
    app: AppContext,
    payment_id: int,
    amount: Optional[float],
    currency: Optional[str],
    exchange_rate: Optional[float],
    note: Optional[str],
) -> None:
    """Correct a recorded payment."""

    user_id = app.require_user_id()
    payment = next(
        (p for p in app.repository.list_payments(user_id=user_id) if p.id == payment_id), None
    )
    if payment is None:
        raise click.ClickException(f"Payment {payment_id} not found")
    if amount is not None:
        payment.amount = amount
    if currency is not None:
        payment.currency = currency.upper()
    if exchange_rate is not None:
        payment.exchange_rate = exchange_rate
    if note is not None:
        payment.note = note
    receipt = app.repository.update_payment(payment, user_id=user_id)
    click.echo(f"Payment #{payment_id} updated ({_STATE_LABELS[receipt.debt_state]})")


@payments.command("delete")
@click.argument("payment_id", type=int)
@click.confirmation_option(prompt="Delete this payment?")
@pass_app
@_handle_errors
def delete_payment(app: AppContext, payment_id: int) -> None:
    """Delete a payment."""

    user_id = app.require_user_id()
    app.repository.delete_payment(payment_id, user_id=user_id)
    click.echo(f"Payment #{payment_id} deleted")


# Income --------------------------------------------------------------------


@main.group()
def incomes() -> None:
    """Record and review income."""


@incomes.command("list")
@pass_app
@_handle_errors
def list_incomes(app: AppContext) -> None:
    """Income records with totals per category."""

    user_id = app.require_user_id()
    records = app.repository.list_incomes(user_id=user_id)
    if not records:
        click.echo("No income registered")
        return
    for income in records:
        click.echo(
            f"#{income.id}  {income.received_on.isoformat()}  {income.description}  "
            f"[{income.category}]  +{exchange.format_money(income.amount, income.currency)}"
        )
    currency = _default_currency(app)
    click.echo(f"Total: {exchange.format_money(total_income(records), currency)}")
    click.echo(f"Average: {exchange.format_money(average_income(records), currency)}")
    for category, amount in income_by_category(records):
        click.echo(f"  {category}: {exchange.format_money(amount, currency)}")


@incomes.command("add")
@click.option("--description", required=True)
@click.option("--amount", type=float, required=True)
@click.option("--currency", type=_CURRENCY, default=None)
@click.option("--category", type=click.Choice(INCOME_CATEGORIES), default="Salary")
@click.option("--date", "received_on", type=_DATE, default=None)
@pass_app
@_handle_errors
def add_income(
    app: AppContext,
    description: str,
    amount: float,
    currency: Optional[str],
    category: str,
    received_on,
) -> None:
    """Register an income."""

    user_id = app.require_user_id()
    _reject(validate_income(description=description, amount=amount, category=category))
    income = Income(
        user_id=user_id,
        description=description.strip(),
        amount=amount,
        currency=(currency or _default_currency(app)).upper(),
        received_on=received_on.date() if received_on else date.today(),
        category=category,
    )
    created = app.repository.create_income(income, user_id=user_id)
    click.echo(f"Income #{created.id} registered")


# Exchange rates ------------------------------------------------------------


@main.command()
def rates() -> None:
    """Reference exchange rates against the Mexican peso."""

    for rate in exchange.list_rates():
        arrow = "+" if rate.trending_up else ""
        click.echo(
            f"{rate.code}  {rate.name:<20} {rate.symbol}{rate.value:g} MXN  "
            f"{arrow}{rate.change:.3f}"
        )
    click.echo("Reference values only; check with your bank before real transactions.")


@main.command()
@click.argument("amount", type=float)
@click.option("--from", "source", default="USD")
@click.option("--to", "target", default=exchange.BASE_CURRENCY)
@_handle_errors
def convert(amount: float, source: str, target: str) -> None:
    """Convert an amount between currencies using reference rates."""

    if amount < 0:
        raise click.ClickException("The amount cannot be negative")
    result = exchange.convert(amount, source, target)
    click.echo(
        f"{exchange.format_money(amount, source.upper())} = {exchange.format_money(result, target.upper())}"
    )


if __name__ == "__main__":  # pragma: no cover
    main()
