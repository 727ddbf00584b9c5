"""Payment plans: splitting a contract total into dated installments."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import ROUND_FLOOR, Decimal
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from .errors import InstallmentError
from .money import coerce_amount, round_money
from .status import to_date

logger = logging.getLogger(__name__)

AT_SIGNING = "عند التوقيع"
AT_INSTALLATION = "عند التركيب"
MONTHLY = "شهري"
EVERY_TWO_MONTHS = "شهرين"
QUARTERLY = "ثلاثة أشهر"
END_OF_CONTRACT = "نهاية العقد"

PAYMENT_TYPES = (AT_SIGNING, AT_INSTALLATION, MONTHLY, EVERY_TWO_MONTHS, QUARTERLY, END_OF_CONTRACT)

# payment type -> months between consecutive installments
_MONTH_STEPS = {MONTHLY: 1, EVERY_TWO_MONTHS: 2, QUARTERLY: 3}
INSTALLATION_LEAD_DAYS = 7
MAX_INSTALLMENTS = 6
# plans within this many currency units of the total are accepted
TOLERANCE = 1.0


@dataclass(frozen=True)
class Installment:
    amount: float
    payment_type: str = MONTHLY
    description: str = ""
    due_date: Optional[str] = None


def calculate_due_date(payment_type: str, index: int, start_date: object, end_date: object = None) -> Optional[str]:
    """ISO due date of installment ``index`` (0-based); ``None`` without a start date."""

    start = to_date(start_date)
    if start is None:
        return None
    if payment_type == AT_SIGNING:
        return start.isoformat()
    if payment_type == END_OF_CONTRACT:
        end = to_date(end_date)
        return end.isoformat() if end is not None else None

    due = pd.Timestamp(start)
    if payment_type in _MONTH_STEPS:
        due = due + pd.DateOffset(months=(index + 1) * _MONTH_STEPS[payment_type])
    elif payment_type == AT_INSTALLATION:
        due = due + pd.DateOffset(days=INSTALLATION_LEAD_DAYS)
    else:
        logger.debug("Unknown payment type %r; due on start date", payment_type)
    return due.date().isoformat()


def _floor_cents(value: float) -> float:
    return float(Decimal(repr(float(value))).quantize(Decimal("0.01"), rounding=ROUND_FLOOR))


def plan_total(plan: Sequence[Installment]) -> float:
    total = 0.0
    for item in plan:
        total = round_money(total + coerce_amount(item.amount))
    return total


def distribute_evenly(total: object, count: object, start_date: object = None, end_date: object = None) -> List[Installment]:
    """
    Split ``total`` into ``count`` installments (clamped to 1..6).

    The first is due at signing and the rest monthly.  Every share is floored
    to the cent and the last one takes whatever is left, so the plan always
    sums to ``total`` exactly.
    """

    amount = coerce_amount(total)
    if amount <= 0:
        raise InstallmentError("Cannot distribute installments without a positive contract total")
    try:
        requested = int(float(count))
    except (TypeError, ValueError):
        requested = 1
    count = max(1, min(MAX_INSTALLMENTS, requested))

    share = _floor_cents(amount / count)
    plan = []
    for i in range(count):
        payment_type = AT_SIGNING if i == 0 else MONTHLY
        value = round_money(amount - share * (count - 1)) if i == count - 1 else share
        plan.append(
            Installment(
                amount=value,
                payment_type=payment_type,
                description="دفعة أولى عند التوقيع" if i == 0 else f"الدفعة {i + 1}",
                due_date=calculate_due_date(payment_type, i, start_date, end_date),
            )
        )
    logger.debug("Distributed %.2f over %d installments (%.2f each)", amount, count, share)
    return plan


def add_installment(
    plan: Sequence[Installment],
    total: object,
    payment_type: str = MONTHLY,
    start_date: object = None,
    end_date: object = None,
) -> List[Installment]:
    """Append an installment for whatever part of ``total`` is still unplanned."""

    remaining = max(0.0, round_money(coerce_amount(total) - plan_total(plan)))
    index = len(plan)
    item = Installment(
        amount=remaining,
        payment_type=payment_type,
        description=f"الدفعة {index + 1}",
        due_date=calculate_due_date(payment_type, index, start_date, end_date),
    )
    return list(plan) + [item]


def remove_installment(plan: Sequence[Installment], index: int) -> List[Installment]:
    return [item for i, item in enumerate(plan) if i != index]


def update_installment(
    plan: Sequence[Installment],
    index: int,
    start_date: object = None,
    end_date: object = None,
    **changes,
) -> List[Installment]:
    """Change one installment; a new payment type recomputes its due date."""

    updated = []
    for i, item in enumerate(plan):
        if i == index:
            item = replace(item, **changes)
            if "payment_type" in changes and "due_date" not in changes:
                item = replace(item, due_date=calculate_due_date(item.payment_type, i, start_date, end_date))
        updated.append(item)
    return updated


def validate_installments(plan: Sequence[Installment], total: object) -> Tuple[bool, str]:
    if not plan:
        return False, "يرجى إضافة دفعات للعقد"
    if abs(plan_total(plan) - coerce_amount(total)) > TOLERANCE:
        return False, "مجموع الدفعات لا يساوي إجمالي العقد"
    return True, ""


def default_split(total: object, start_date: object = None, end_date: object = None) -> List[Installment]:
    """Half at signing, half at installation."""

    amount = coerce_amount(total)
    if amount <= 0:
        return []
    first = round_money(amount / 2)
    return [
        Installment(
            amount=first,
            payment_type=AT_SIGNING,
            description="الدفعة الأولى",
            due_date=calculate_due_date(AT_SIGNING, 0, start_date, end_date),
        ),
        Installment(
            amount=round_money(amount - first),
            payment_type=AT_INSTALLATION,
            description="الدفعة الثانية",
            due_date=calculate_due_date(AT_INSTALLATION, 1, start_date, end_date),
        ),
    ]


__all__ = [
    "AT_INSTALLATION",
    "AT_SIGNING",
    "END_OF_CONTRACT",
    "EVERY_TWO_MONTHS",
    "Installment",
    "MONTHLY",
    "PAYMENT_TYPES",
    "QUARTERLY",
    "add_installment",
    "calculate_due_date",
    "default_split",
    "distribute_evenly",
    "plan_total",
    "remove_installment",
    "update_installment",
    "validate_installments",
]
