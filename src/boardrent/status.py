"""
Contract status and schedule classification.

Statuses are derived from the stored end date and amounts every time they are
needed; nothing here is persisted.
"""

import logging
import os
from datetime import date, datetime
from enum import Enum
from typing import Iterable, List, Mapping, Optional

import pandas as pd
from dotenv import load_dotenv

from .money import coerce_amount, round_money
from .records import ContractRecord, resolve_field

load_dotenv()

logger = logging.getLogger(__name__)

# Contracts ending within this many days are flagged as expiring
EXPIRING_WINDOW_DAYS = int(os.getenv('EXPIRING_WINDOW_DAYS', '30'))

MAINTENANCE_STATUSES = {'صيانة', 'maintenance'}


class ContractStatus(str, Enum):
    PAID = 'paid'
    EXPIRED = 'expired'
    PARTIALLY_DUE = 'partially_due'
    ACTIVE = 'active'
    UNKNOWN = 'unknown'


class ScheduleStatus(str, Enum):
    NOT_STARTED = 'not_started'
    ACTIVE = 'active'
    EXPIRING = 'expiring'
    EXPIRED = 'expired'
    UNDEFINED = 'undefined'


def to_date(value) -> Optional[date]:
    """Accept ``date``, ``datetime`` or text; anything unparsable is ``None``."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    parsed = pd.to_datetime(text, errors='coerce')
    if pd.isna(parsed):
        logger.debug('Unparsable date %r treated as missing', value)
        return None
    return parsed.date()


def _today(today) -> date:
    return to_date(today) or date.today()


def is_contract_expired(end_date, today=None) -> bool:
    """A contract runs through the whole of its end date."""
    end = to_date(end_date)
    if end is None:
        return False
    return end < _today(today)


def days_until_expiry(end_date, today=None) -> Optional[int]:
    end = to_date(end_date)
    if end is None:
        return None
    return (end - _today(today)).days


def classify_contract(end_date, total_paid, total_cost, remaining=None, today=None) -> ContractStatus:
    """
    Classify a contract from its end date and amounts.

    An explicit non-zero ``remaining`` wins over ``total_cost - total_paid``.
    When neither the balance nor the end date is known the status is
    ``UNKNOWN``.
    """
    explicit = coerce_amount(remaining) if remaining is not None else 0.0
    if remaining is not None and explicit:
        balance = round_money(remaining)
    elif total_cost is not None:
        balance = round_money(coerce_amount(total_cost) - coerce_amount(total_paid))
    else:
        balance = None

    end = to_date(end_date)
    if balance is None:
        if end is None:
            return ContractStatus.UNKNOWN
        return ContractStatus.EXPIRED if end < _today(today) else ContractStatus.ACTIVE

    if balance <= 0:
        return ContractStatus.PAID
    if end is not None and end < _today(today):
        return ContractStatus.EXPIRED
    return ContractStatus.PARTIALLY_DUE


def contract_status(record: ContractRecord, today=None) -> ContractStatus:
    return classify_contract(
        record.end_date,
        record.total_paid,
        record.total_cost,
        remaining=record.remaining,
        today=today,
    )


def schedule_status(start_date, end_date, today=None, window_days: int = EXPIRING_WINDOW_DAYS) -> ScheduleStatus:
    """Where ``today`` falls in the rental period."""
    current = _today(today)
    start = to_date(start_date)
    end = to_date(end_date)
    if start is not None and current < start:
        return ScheduleStatus.NOT_STARTED
    if end is None:
        return ScheduleStatus.UNDEFINED
    if end < current:
        return ScheduleStatus.EXPIRED
    remaining_days = (end - current).days
    if 0 < remaining_days <= window_days:
        return ScheduleStatus.EXPIRING
    return ScheduleStatus.ACTIVE


def is_billboard_available(billboard: Mapping[str, object], today=None) -> bool:
    """Free to book: not under maintenance and not held by a running contract."""
    status = resolve_field(billboard, 'status', 'billboard')
    if status is not None and str(status).strip().lower() in MAINTENANCE_STATUSES:
        return False
    if resolve_field(billboard, 'contract_number', 'billboard') is None:
        return True
    end = to_date(resolve_field(billboard, 'rent_end_date', 'billboard'))
    if end is None:
        # contracted without an end date: treat as held
        return False
    return end < _today(today)


def expiring_contracts(
    records: Iterable[ContractRecord],
    today=None,
    window_days: int = EXPIRING_WINDOW_DAYS,
) -> List[ContractRecord]:
    """Contracts with between 1 and ``window_days`` days left, soonest first."""
    hits = []
    for record in records:
        days = days_until_expiry(record.end_date, today)
        if days is not None and 0 < days <= window_days:
            hits.append((days, record))
    hits.sort(key=lambda item: item[0])
    return [record for _, record in hits]


__all__ = [
    'EXPIRING_WINDOW_DAYS',
    'ContractStatus',
    'ScheduleStatus',
    'classify_contract',
    'contract_status',
    'days_until_expiry',
    'expiring_contracts',
    'is_billboard_available',
    'is_contract_expired',
    'schedule_status',
    'to_date',
]
