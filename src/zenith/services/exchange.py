"""Simulated exchange rates and money formatting.

Quotes are reference values against the Mexican peso and do not change at
runtime; they are meant for rough conversions, not real transactions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..errors import NotFoundError
from .balance import normalize_currency

BASE_CURRENCY = "MXN"


@dataclass(frozen=True, slots=True)
class ExchangeRate:
    """Value of one unit of ``code`` in the base currency."""

    code: str
    name: str
    symbol: str
    value: float
    change: float

    @property
    def trending_up(self) -> bool:
        return self.change >= 0


SIMULATED_RATES: tuple[ExchangeRate, ...] = (
    ExchangeRate("USD", "US Dollar", "$", 17.25, 0.15),
    ExchangeRate("EUR", "Euro", "€", 18.80, -0.08),
    ExchangeRate("GBP", "Pound Sterling", "£", 21.85, 0.22),
    ExchangeRate("CAD", "Canadian Dollar", "$", 12.65, 0.05),
    ExchangeRate("JPY", "Japanese Yen", "¥", 0.115, -0.002),
    ExchangeRate("BRL", "Brazilian Real", "R$", 3.45, 0.03),
    ExchangeRate("ARS", "Argentine Peso", "$", 0.019, -0.001),
    ExchangeRate("COP", "Colombian Peso", "$", 0.0042, 0.0001),
)

_BASE_RATE = ExchangeRate(BASE_CURRENCY, "Mexican Peso", "$", 1.0, 0.0)
_RATES = {rate.code: rate for rate in SIMULATED_RATES}

# Local codes that differ from ISO-4217
_ISO_CODES = {"BS": "VES"}

_SYMBOLS = {
    "USD": "$",
    "MXN": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "BRL": "R$",
    "COP": "$",
    "ARS": "$",
    "CLP": "$",
    "PEN": "S/",
    "CAD": "$",
    "VES": "Bs.",
}


# Codes a debt, payment or income may be recorded in
SUPPORTED_CURRENCIES: tuple[str, ...] = (
    "MXN",
    "USD",
    "EUR",
    "GBP",
    "CAD",
    "JPY",
    "BRL",
    "ARS",
    "COP",
    "CLP",
    "PEN",
    "BS",
)


def validate_currency(code: Optional[str]) -> list[str]:
    """Return a message when ``code`` is not a supported currency."""

    if (code or "").strip().upper() not in SUPPORTED_CURRENCIES:
        return [f"Unsupported currency: {code}"]
    return []


def list_rates() -> list[ExchangeRate]:
    """All simulated quotes, in display order."""

    return list(SIMULATED_RATES)


def get_rate(code: str) -> ExchangeRate:
    """Quote for ``code``; the base currency is always 1."""

    code = code.strip().upper()
    if code == BASE_CURRENCY:
        return _BASE_RATE
    try:
        return _RATES[code]
    except KeyError:
        raise NotFoundError(f"No exchange rate for {code}") from None


def convert_to_base(amount: float, code: str) -> float:
    """Express ``amount`` of ``code`` in the base currency."""

    return normalize_currency(amount * get_rate(code).value)


def convert(amount: float, source: str, target: str = BASE_CURRENCY) -> float:
    """Convert between two quoted currencies through the base currency."""

    source_rate = get_rate(source)
    target_rate = get_rate(target)
    return normalize_currency(amount * source_rate.value / target_rate.value)


def iso_code(code: str) -> str:
    """ISO-4217 code for a stored currency code."""

    code = code.strip().upper()
    return _ISO_CODES.get(code, code)


def format_money(amount: float, currency: str = BASE_CURRENCY) -> str:
    """Render ``amount`` like ``$1,234.50 MXN``."""

    code = iso_code(currency)
    symbol = _SYMBOLS.get(code, "")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f} {code}"
