"""Translate between backend JSON (Spanish field names) and entities."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ...models.debt import Debt, DebtState
from ...models.income import Income
from ...models.payment import Payment
from ...models.summaries import DashboardSummary
from ...session import UserProfile

_STATE_TO_WIRE = {
    DebtState.PENDING: "pendiente",
    DebtState.IN_PROGRESS: "en_progreso",
    DebtState.PAID: "pagada",
    DebtState.OVERDUE: "vencida",
}
_STATE_FROM_WIRE = {value: key for key, value in _STATE_TO_WIRE.items()}


def _number(value: Any, default: float = 0.0) -> float:
    # Decimal columns arrive as strings
    if value is None or value == "":
        return default
    return float(value)


def _parse_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value)
    if len(text) <= 10:
        return datetime.combine(date.fromisoformat(text), datetime.min.time())
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def state_to_wire(state: str | DebtState) -> str:
    return _STATE_TO_WIRE[DebtState(state)]


def state_from_wire(value: Optional[str]) -> DebtState:
    if value is None:
        return DebtState.PENDING
    if value in _STATE_FROM_WIRE:
        return _STATE_FROM_WIRE[value]
    try:
        return DebtState(value)
    except ValueError:
        return DebtState.PENDING


def user_from_wire(data: dict) -> UserProfile:
    return UserProfile(
        id=int(data["id_usuario"]),
        name=data.get("nombre", ""),
        email=data.get("email", ""),
        preferred_currency=data.get("moneda_preferida") or "MXN",
    )


def debt_from_wire(data: dict) -> Debt:
    return Debt(
        id=int(data["id_deuda"]),
        user_id=int(data.get("id_usuario") or 0),
        description=data.get("descripcion", ""),
        creditor=data.get("acreedor") or "",
        principal=_number(data.get("monto_total")),
        currency=data.get("moneda") or "MXN",
        registered_on=_parse_date(data.get("fecha_registro")) or date.today(),
        due_date=_parse_date(data.get("fecha_pago_objetivo")),
        state=state_from_wire(data.get("estado_pago")).value,
        reminder=bool(data.get("recordatorio", False)),
        interest_applied=bool(data.get("interes_aplicado", False)),
        interest_rate=_number(data.get("tasa_interes")),
    )


def debt_to_wire(debt: Debt, *, user_id: Optional[int] = None) -> dict:
    """Body for ``POST /deudas`` (with ``user_id``) or ``PUT /deudas/:id``."""

    body = {
        "descripcion": debt.description,
        "acreedor": debt.creditor or "",
        "monto_total": debt.principal,
        "moneda": debt.currency,
        "fecha_pago_objetivo": debt.due_date.isoformat() if debt.due_date else "",
        "recordatorio": bool(debt.reminder),
        "interes_aplicado": bool(debt.interest_applied),
        "tasa_interes": debt.interest_rate or 0,
    }
    if user_id is not None:
        body = {"id_usuario": user_id, **body}
    return body


def payment_from_wire(data: dict) -> Payment:
    return Payment(
        id=int(data["id_abono"]),
        debt_id=int(data["id_deuda"]),
        paid_at=_parse_datetime(data.get("fecha_abono") or datetime.now().isoformat()),
        amount=_number(data.get("monto_abonado")),
        currency=data.get("moneda") or "MXN",
        exchange_rate=_number(data.get("tipo_cambio"), default=1.0) or 1.0,
        remaining_after=_number(data.get("restante_actual")),
        note=data.get("nota") or "",
    )


def payment_to_wire(payment: Payment) -> dict:
    body = {
        "id_deuda": payment.debt_id,
        "monto_abonado": payment.amount,
        "moneda": payment.currency,
        "tipo_cambio": payment.exchange_rate,
    }
    if payment.note:
        body["nota"] = payment.note
    return body


def income_from_wire(data: dict) -> Income:
    return Income(
        id=int(data["id_ingreso"]),
        user_id=int(data.get("id_usuario") or 0),
        description=data.get("descripcion", ""),
        amount=_number(data.get("monto")),
        currency=data.get("moneda") or "MXN",
        received_on=_parse_date(data.get("fecha")) or date.today(),
        category=data.get("categoria") or "Other",
    )


def income_to_wire(income: Income, *, user_id: int) -> dict:
    return {
        "id_usuario": user_id,
        "descripcion": income.description,
        "monto": income.amount,
        "moneda": income.currency,
        "fecha": income.received_on.isoformat(),
        "categoria": income.category,
    }


def dashboard_from_wire(data: dict) -> DashboardSummary:
    return DashboardSummary(
        total_debt=_number(data.get("total_deudas")),
        total_paid=_number(data.get("total_abonado")),
        outstanding=_number(data.get("saldo_pendiente")),
        debt_count=int(data.get("cantidad_deudas") or 0),
        open_count=int(data.get("deudas_pendientes") or 0),
        paid_count=int(data.get("deudas_pagadas") or 0),
    )
