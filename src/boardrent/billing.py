"""Customer billing balances computed from contract and payment rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

import pandas as pd

from .money import coerce_amount, round_money
from .records import resolve_field, resolve_number

logger = logging.getLogger(__name__)

# payment entry types that reduce what the customer owes
CREDIT_ENTRY_TYPES = frozenset({"receipt", "account_payment"})

# undated payments sort first
_UNDATED = pd.Timestamp("1900-01-01", tz="UTC")


@dataclass(frozen=True)
class ContractBalance:
    total: float
    paid: float
    remaining: float


def _created_at(payment: Mapping[str, Any]) -> pd.Timestamp:
    stamp = pd.to_datetime(payment.get("created_at"), errors="coerce", utc=True)
    return _UNDATED if pd.isna(stamp) else stamp


def remaining_after_payment(payment_id: object, payments: Sequence[Mapping[str, Any]], total_debits: object) -> float:
    """Balance left once ``payment_id`` and every earlier credit are applied."""

    debits = coerce_amount(total_debits)
    ordered = sorted(payments, key=_created_at)
    target = str(payment_id)
    position = next((i for i, p in enumerate(ordered) if str(p.get("id")) == target), None)
    if position is None:
        logger.debug("Payment %s not found; balance is the full debit", target)
        return debits

    credits = 0.0
    for payment in ordered[: position + 1]:
        if payment.get("entry_type") in CREDIT_ENTRY_TYPES:
            credits = round_money(credits + coerce_amount(payment.get("amount")))
    return max(0.0, round_money(debits - credits))


def contract_balance(
    contract_number: object,
    contracts: Iterable[Mapping[str, Any]],
    payments: Iterable[Mapping[str, Any]],
) -> Optional[ContractBalance]:
    number = str(contract_number)
    contract = next(
        (row for row in contracts if str(resolve_field(row, "contract_number")) == number),
        None,
    )
    if contract is None:
        return None

    total = resolve_number(contract, "total_cost")
    paid = 0.0
    for payment in payments:
        if str(payment.get("contract_number")) == number:
            paid = round_money(paid + coerce_amount(payment.get("amount")))
    return ContractBalance(total=total, paid=paid, remaining=max(0.0, round_money(total - paid)))


__all__ = ["CREDIT_ENTRY_TYPES", "ContractBalance", "contract_balance", "remaining_after_payment"]
