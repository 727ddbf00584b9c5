"""
Contract draft state.

A :class:`ContractDraft` holds everything the contract form collects before
the contract is saved.  It is immutable: every edit goes through a pure
update function that validates and coerces the change and returns a new
draft, so a quote can always be recomputed from the draft alone.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from jsonschema import Draft7Validator

from .errors import DraftError
from .money import BASE_CURRENCY, coerce_amount, coerce_rate
from .price_logic import PRICING_MODES, whole_units
from .records import resolve_field, resolve_number, stored_billboard_ids, stored_price_entries

logger = logging.getLogger(__name__)

DISCOUNT_TYPES = ("fixed", "percent")
DEFAULT_CATEGORY = "عادي"
DEFAULT_OPERATING_FEE_RATE = 3.0

_NUMBER_OR_TEXT = {"type": ["number", "string", "null"]}

DRAFT_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "selected_ids": {"type": "array", "items": {"type": ["string", "integer"]}},
        "pricing_category": {"type": "string"},
        "pricing_mode": {"enum": list(PRICING_MODES)},
        "duration_months": _NUMBER_OR_TEXT,
        "duration_days": _NUMBER_OR_TEXT,
        "currency": {"type": "string", "minLength": 3, "maxLength": 3},
        "exchange_rate": _NUMBER_OR_TEXT,
        "print_cost_enabled": {"type": "boolean"},
        "print_price_per_meter": _NUMBER_OR_TEXT,
        "operating_fee_rate": _NUMBER_OR_TEXT,
        "discount_type": {"enum": list(DISCOUNT_TYPES)},
        "discount_value": _NUMBER_OR_TEXT,
        "rent_cost_override": _NUMBER_OR_TEXT,
        "use_stored_prices": {"type": "boolean"},
        "customer_name": {"type": "string"},
        "customer_id": {"type": ["string", "null"]},
        "ad_type": {"type": "string"},
        "start_date": {"type": ["string", "null"]},
        "end_date": {"type": ["string", "null"]},
    },
}


@dataclass(frozen=True)
class ContractDraft:
    selected_ids: Tuple[str, ...] = ()
    pricing_category: str = DEFAULT_CATEGORY
    pricing_mode: str = "months"
    duration_months: int = 1
    duration_days: int = 0
    currency: str = BASE_CURRENCY
    exchange_rate: float = 1.0
    print_cost_enabled: bool = False
    print_price_per_meter: float = 0.0
    operating_fee_rate: float = DEFAULT_OPERATING_FEE_RATE
    discount_type: str = "fixed"
    discount_value: float = 0.0
    rent_cost_override: float = 0.0
    use_stored_prices: bool = False
    customer_name: str = ""
    customer_id: Optional[str] = None
    ad_type: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @property
    def duration(self) -> int:
        return self.duration_months if self.pricing_mode == "months" else self.duration_days

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["selected_ids"] = list(self.selected_ids)
        return data


_FIELD_NAMES = frozenset(f.name for f in fields(ContractDraft))
_AMOUNT_FIELDS = ("print_price_per_meter", "operating_fee_rate", "discount_value", "rent_cost_override")
_WHOLE_FIELDS = ("duration_months", "duration_days")
_FLAG_FIELDS = ("print_cost_enabled", "use_stored_prices")


def _coerce_change(name: str, value: Any) -> Any:
    if name in _AMOUNT_FIELDS:
        return coerce_amount(value)
    if name in _WHOLE_FIELDS:
        return whole_units(value)
    if name in _FLAG_FIELDS:
        return bool(value)
    if name == "exchange_rate":
        return coerce_rate(value)
    if name == "selected_ids":
        ids = [str(item).strip() for item in (value or ())]
        return tuple(dict.fromkeys(item for item in ids if item))
    if name == "currency":
        return str(value or BASE_CURRENCY).strip().upper()
    if name == "pricing_mode":
        if value not in PRICING_MODES:
            raise DraftError(f"pricing_mode must be one of {PRICING_MODES}, got {value!r}")
        return value
    if name == "discount_type":
        if value not in DISCOUNT_TYPES:
            raise DraftError(f"discount_type must be one of {DISCOUNT_TYPES}, got {value!r}")
        return value
    if name == "pricing_category":
        return str(value or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY
    if name in ("customer_name", "ad_type"):
        return "" if value is None else str(value).strip()
    if value is None:
        return None
    return str(value).strip() or None


def update_draft(draft: ContractDraft, **changes: Any) -> ContractDraft:
    """Return a copy of ``draft`` with ``changes`` applied.

    Invalid numeric input is coerced to 0 (exchange rates to 1) rather than
    rejected; unknown field names and unknown enum values raise
    :class:`DraftError`.
    """

    unknown = sorted(set(changes) - _FIELD_NAMES)
    if unknown:
        raise DraftError(f"Unknown draft field(s): {', '.join(unknown)}")
    coerced = {name: _coerce_change(name, value) for name, value in changes.items()}
    return replace(draft, **coerced)


def toggle_billboard(draft: ContractDraft, billboard_id: object) -> ContractDraft:
    key = str(billboard_id)
    if key in draft.selected_ids:
        return replace(draft, selected_ids=tuple(i for i in draft.selected_ids if i != key))
    return replace(draft, selected_ids=draft.selected_ids + (key,))


def remove_billboard(draft: ContractDraft, billboard_id: object) -> ContractDraft:
    key = str(billboard_id)
    return replace(draft, selected_ids=tuple(i for i in draft.selected_ids if i != key))


def set_pricing_mode(draft: ContractDraft, mode: str, duration: object) -> ContractDraft:
    """Switch between monthly and daily pricing in one step."""

    if mode == "days":
        return update_draft(draft, pricing_mode="days", duration_days=duration)
    return update_draft(draft, pricing_mode=mode, duration_months=duration)


def validate_payload(payload: Mapping[str, Any]) -> None:
    validator = Draft7Validator(DRAFT_SCHEMA)
    errors = sorted(validator.iter_errors(payload), key=lambda err: list(err.path))
    if errors:
        details = "; ".join(
            f"{'/'.join(str(p) for p in err.path) or '<root>'}: {err.message}" for err in errors
        )
        raise DraftError(f"Invalid contract draft: {details}")


def draft_from_dict(payload: Mapping[str, Any]) -> ContractDraft:
    """Validate a JSON draft payload and build a :class:`ContractDraft` from it."""

    validate_payload(payload)
    return update_draft(ContractDraft(), **dict(payload))


_TRUE_TEXT = {"1", "true", "yes", "on"}


def _stored_flag(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_TEXT


def draft_from_contract(record: Mapping[str, Any], *, use_stored_prices: bool = True) -> ContractDraft:
    """Rebuild the draft a stored contract was saved from (edit flow)."""

    snapshots = stored_price_entries(record)
    first = snapshots[0] if snapshots else {}
    mode = first.get("pricingMode") if first.get("pricingMode") in PRICING_MODES else "months"
    duration = first.get("duration", 1 if mode == "months" else 0)
    category = first.get("pricingCategory") or resolve_field(record, "customer_category", default=DEFAULT_CATEGORY)

    rate = resolve_number(record, "operating_fee_rate", default=0.0) or DEFAULT_OPERATING_FEE_RATE
    changes: Dict[str, Any] = {
        "selected_ids": stored_billboard_ids(record),
        "pricing_category": category,
        "currency": resolve_field(record, "currency", default=BASE_CURRENCY),
        "exchange_rate": resolve_number(record, "exchange_rate", default=1.0),
        "print_cost_enabled": _stored_flag(resolve_field(record, "print_cost_enabled")),
        "print_price_per_meter": resolve_number(record, "print_price_per_meter"),
        "operating_fee_rate": rate,
        "discount_type": "fixed",
        "discount_value": resolve_number(record, "discount"),
        "use_stored_prices": use_stored_prices,
        "customer_name": resolve_field(record, "customer_name", default=""),
        "customer_id": resolve_field(record, "customer_id"),
        "ad_type": resolve_field(record, "ad_type", default=""),
        "start_date": resolve_field(record, "start_date"),
        "end_date": resolve_field(record, "end_date"),
    }
    draft = update_draft(ContractDraft(), **changes)
    logger.debug("Rebuilt draft for contract %s (%s x %s)", resolve_field(record, "contract_number"), duration, mode)
    return set_pricing_mode(draft, mode, duration)


def selected_billboards(draft: ContractDraft, billboards: Iterable[Any]) -> list:
    """Billboards from ``billboards`` that are selected in ``draft``, in selection order."""

    by_id = {str(board.id): board for board in billboards}
    return [by_id[i] for i in draft.selected_ids if i in by_id]


__all__ = [
    "DISCOUNT_TYPES",
    "DRAFT_SCHEMA",
    "ContractDraft",
    "draft_from_contract",
    "draft_from_dict",
    "remove_billboard",
    "selected_billboards",
    "set_pricing_mode",
    "toggle_billboard",
    "update_draft",
    "validate_payload",
]
