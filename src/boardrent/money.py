"""Monetary rounding, input coercion and currency conversion."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Tuple


@dataclass(frozen=True)
class Currency:
    code: str
    name: str
    symbol: str


CURRENCIES: Tuple[Currency, ...] = (
    Currency("LYD", "دينار ليبي", "د.ل"),
    Currency("USD", "دولار أمريكي", "$"),
    Currency("EUR", "يورو", "€"),
    Currency("GBP", "جنيه إسترليني", "£"),
    Currency("SAR", "ريال سعودي", "ر.س"),
    Currency("AED", "درهم إماراتي", "د.إ"),
)

BASE_CURRENCY = CURRENCIES[0].code
_CURRENCY_BY_CODE: Dict[str, Currency] = {c.code: c for c in CURRENCIES}


def round_money(value: object, places: int = 2) -> float:
    """Round ``value`` half away from zero to ``places`` decimals.

    Stored contract totals were produced by rounding at every accumulation
    step, so this goes through :class:`~decimal.Decimal` on the shortest repr
    of the float rather than relying on binary ``round``.
    """

    if value is None:
        return 0.0
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(numeric):
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(repr(numeric)).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded)


def _parse_number(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        numeric = float(value)
    else:
        text = str(value).replace(",", "").strip()
        if not text:
            return None
        try:
            numeric = float(Decimal(text))
        except (InvalidOperation, ValueError):
            return None
    if not math.isfinite(numeric):
        return None
    return numeric


def coerce_amount(value: object) -> float:
    """Coerce user input to a non-negative float; anything invalid becomes 0."""

    numeric = _parse_number(value)
    if numeric is None or numeric < 0:
        return 0.0
    return numeric


def coerce_rate(value: object) -> float:
    """Exchange rates must be positive; invalid input means no conversion."""

    numeric = _parse_number(value)
    if numeric is None or numeric <= 0:
        return 1.0
    return numeric


def convert_price(amount: object, exchange_rate: object = 1.0) -> float:
    """Convert a base-currency amount with ``exchange_rate`` (2 dp)."""

    return round_money(coerce_amount(amount) * coerce_rate(exchange_rate))


def currency_info(code: str | None) -> Currency:
    """Return the currency for ``code``; unknown codes fall back to LYD."""

    if not code:
        return _CURRENCY_BY_CODE[BASE_CURRENCY]
    return _CURRENCY_BY_CODE.get(str(code).strip().upper(), _CURRENCY_BY_CODE[BASE_CURRENCY])


__all__ = [
    "BASE_CURRENCY",
    "CURRENCIES",
    "Currency",
    "coerce_amount",
    "coerce_rate",
    "convert_price",
    "currency_info",
    "round_money",
]
