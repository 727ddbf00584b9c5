"""
Stored-record field resolution.

Contract and billboard rows written by earlier versions of the back office
carry the same value under several column names (``Total``, ``total_cost``,
``Total Rent`` ...).  Every read goes through :func:`resolve_field` with one
canonical name; the first non-empty alias wins.  Only the canonical name is
written going forward, and each hit on a legacy alias is logged once so the
remaining migration debt can be measured.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

import pandas as pd

from .models import Billboard, CostSummary
from .money import round_money

if TYPE_CHECKING:
    from .draft import ContractDraft
    from .installments import Installment

logger = logging.getLogger(__name__)

# canonical name -> ordered aliases; the canonical spelling is always first
CONTRACT_FIELDS: Dict[str, Tuple[str, ...]] = {
    "contract_number": ("contract_number", "Contract_Number"),
    "customer_name": ("customer_name", "Customer Name", "Customer_Name", "Customer"),
    "customer_id": ("customer_id",),
    "customer_category": ("customer_category", "Customer Category", "Customer_Category"),
    "ad_type": ("ad_type", "Ad Type", "Ad_Type"),
    "start_date": ("start_date", "Contract Date", "Start_Date", "Start Date"),
    "end_date": ("end_date", "End Date", "End_Date"),
    "total_cost": ("total_cost", "Total", "Total_Cost", "Total Cost", "Total Rent", "rent_cost"),
    "total_paid": ("total_paid", "Total Paid", "Total_Paid"),
    "remaining": ("remaining", "Remaining"),
    "rental_cost_only": ("rental_cost_only", "Total Rent", "Rent_Cost"),
    "installation_cost": ("installation_cost", "Installation Cost", "Installation_Cost"),
    "print_cost": ("print_cost", "Print Cost"),
    "operating_fee": ("operating_fee", "Operating Fee", "fee", "Fee"),
    "operating_fee_rate": ("operating_fee_rate", "Operating Fee Rate", "Operating_Fee_Rate"),
    "discount": ("discount", "Discount"),
    "currency": ("currency", "contract_currency"),
    "exchange_rate": ("exchange_rate",),
    "print_cost_enabled": ("print_cost_enabled",),
    "print_price_per_meter": ("print_price_per_meter",),
    "billboard_ids": ("billboard_ids",),
    "billboard_prices": ("billboard_prices",),
}

BILLBOARD_FIELDS: Dict[str, Tuple[str, ...]] = {
    "id": ("id", "ID"),
    "name": ("name", "Billboard_Name"),
    "city": ("city", "City"),
    "size": ("size", "Size", "Billboard size"),
    "level": ("level", "Level", "billboard_level"),
    "faces": ("faces", "Faces", "faces_count", "Faces_Count", "face_count", "Number_of_Faces", "Number of Faces"),
    "monthly_price": ("price", "Price"),
    "status": ("status", "Status"),
    "contract_number": ("contract_number", "Contract_Number", "contractNumber"),
    "rent_end_date": ("rent_end_date", "Rent_End_Date"),
}

FIELD_SETS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "contract": CONTRACT_FIELDS,
    "billboard": BILLBOARD_FIELDS,
}

LEGACY_ALIASES: Dict[str, Dict[str, Tuple[str, ...]]] = {
    kind: {name: aliases[1:] for name, aliases in fields.items() if len(aliases) > 1}
    for kind, fields in FIELD_SETS.items()
}

_reported_aliases: Set[Tuple[str, str]] = set()


def _is_empty(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _aliases(canonical: str, kind: str) -> Tuple[str, ...]:
    try:
        return FIELD_SETS[kind][canonical]
    except KeyError:
        raise KeyError(f"Unknown {kind} field: {canonical}") from None


def _note_legacy(kind: str, canonical: str, alias: str) -> None:
    if alias == canonical or (kind, alias) in _reported_aliases:
        return
    _reported_aliases.add((kind, alias))
    logger.debug("Legacy %s column %r used for %s", kind, alias, canonical)


def resolve_field(record: Mapping[str, Any], canonical: str, kind: str = "contract", default: Any = None) -> Any:
    """Return the first non-empty value stored under any alias of ``canonical``."""

    for alias in _aliases(canonical, kind):
        value = record.get(alias)
        if not _is_empty(value):
            _note_legacy(kind, canonical, alias)
            return value
    return default


def resolve_number(record: Mapping[str, Any], canonical: str, kind: str = "contract", default: float = 0.0) -> float:
    """Like :func:`resolve_field` but skips aliases whose value is not numeric."""

    for alias in _aliases(canonical, kind):
        value = record.get(alias)
        if _is_empty(value) or isinstance(value, bool):
            continue
        try:
            numeric = float(str(value).replace(",", "")) if isinstance(value, str) else float(value)
        except (TypeError, ValueError):
            continue
        if pd.isna(numeric):
            continue
        _note_legacy(kind, canonical, alias)
        return numeric
    return default


def normalize_record(record: Mapping[str, Any], kind: str = "contract") -> Dict[str, Any]:
    """Project ``record`` onto the canonical schema for ``kind``."""

    return {name: resolve_field(record, name, kind) for name in FIELD_SETS[kind]}


@dataclass(frozen=True)
class ContractRecord:
    """A stored contract row read through the canonical schema."""

    contract_number: Optional[str]
    customer_name: str
    customer_category: str
    start_date: Optional[str]
    end_date: Optional[str]
    total_cost: float
    total_paid: float
    remaining: Optional[float]
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ContractRecord":
        number = resolve_field(row, "contract_number")
        remaining_raw = resolve_field(row, "remaining")
        return cls(
            contract_number=str(number) if number is not None else None,
            customer_name=str(resolve_field(row, "customer_name", default="")),
            customer_category=str(resolve_field(row, "customer_category", default="عادي")),
            start_date=_text_or_none(resolve_field(row, "start_date")),
            end_date=_text_or_none(resolve_field(row, "end_date")),
            total_cost=resolve_number(row, "total_cost"),
            total_paid=resolve_number(row, "total_paid"),
            remaining=resolve_number(row, "remaining") if remaining_raw is not None else None,
            raw=dict(row),
        )


def _text_or_none(value: object) -> Optional[str]:
    if _is_empty(value):
        return None
    return str(value)


def billboard_from_row(row: Mapping[str, Any]) -> Billboard:
    faces = int(resolve_number(row, "faces", "billboard", default=1.0)) or 1
    return Billboard(
        id=str(resolve_field(row, "id", "billboard", default="")),
        size=str(resolve_field(row, "size", "billboard", default="")),
        level=str(resolve_field(row, "level", "billboard", default="")),
        faces=faces,
        monthly_price=resolve_number(row, "monthly_price", "billboard"),
        name=str(resolve_field(row, "name", "billboard", default="")),
        city=str(resolve_field(row, "city", "billboard", default="")),
    )


def _json_list(value: object) -> List[Any]:
    if _is_empty(value):
        return []
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            logger.debug("Ignoring malformed JSON column: %.80s", value)
            return []
    else:
        parsed = value
    if isinstance(parsed, dict):
        return [parsed]
    if isinstance(parsed, list):
        return parsed
    return []


def stored_price_entries(record: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Per-billboard pricing snapshots saved with the contract."""

    return [entry for entry in _json_list(resolve_field(record, "billboard_prices")) if isinstance(entry, dict)]


def stored_prices(record: Mapping[str, Any]) -> Dict[str, float]:
    """``{billboard_id: contract_price}`` saved when the contract was last written."""

    prices: Dict[str, float] = {}
    for entry in stored_price_entries(record):
        board_id = entry.get("billboardId", entry.get("billboard_id"))
        price = entry.get("contractPrice", entry.get("contract_price"))
        if board_id is None or price is None:
            continue
        try:
            prices[str(board_id)] = float(price)
        except (TypeError, ValueError):
            continue
    return prices


def stored_billboard_ids(record: Mapping[str, Any]) -> List[str]:
    ids = resolve_field(record, "billboard_ids")
    if isinstance(ids, str):
        parsed = _json_list(ids) if ids.strip().startswith("[") else ids.split(",")
        return [str(item).strip() for item in parsed if str(item).strip()]
    if isinstance(ids, (list, tuple)):
        return [str(item) for item in ids]
    return list(stored_prices(record))


def contract_payload(
    draft: "ContractDraft",
    summary: CostSummary,
    billboards: Sequence[Billboard],
    *,
    total_paid: float = 0.0,
    installments: Sequence["Installment"] = (),
) -> Dict[str, Any]:
    """Canonical contract row written on create or update."""

    duration = draft.duration_months if draft.pricing_mode == "months" else draft.duration_days
    charges = {charge.billboard_id: charge for charge in summary.charges}
    snapshots = []
    for board in billboards:
        charge = charges.get(board.id)
        snapshots.append(
            {
                "billboardId": board.id,
                "name": board.name,
                "city": board.city,
                "size": board.size,
                "level": board.level,
                "contractPrice": charge.contract_price if charge else 0.0,
                "printCost": charge.print_cost if charge else 0.0,
                "pricingCategory": draft.pricing_category,
                "pricingMode": draft.pricing_mode,
                "duration": duration,
            }
        )

    payload: Dict[str, Any] = {
        "customer_name": draft.customer_name,
        "customer_category": draft.pricing_category,
        "ad_type": draft.ad_type,
        "start_date": draft.start_date,
        "end_date": draft.end_date,
        "billboard_ids": [board.id for board in billboards],
        "billboards_count": len(billboards),
        "billboard_prices": json.dumps(snapshots, ensure_ascii=False),
        "installation_cost": summary.installation_cost,
        "print_cost": summary.print_cost_total,
        "print_cost_enabled": draft.print_cost_enabled,
        "print_price_per_meter": draft.print_price_per_meter,
        "currency": summary.currency,
        "exchange_rate": draft.exchange_rate,
        "operating_fee_rate": summary.operating_fee_rate,
        "operating_fee": summary.operating_fee,
        "discount": summary.discount_amount,
        "rental_cost_only": summary.rental_cost_only,
        "total_cost": summary.final_total,
        "total_paid": round_money(total_paid),
        "remaining": round_money(summary.final_total - total_paid),
    }
    if draft.customer_id:
        payload["customer_id"] = draft.customer_id
    if installments:
        payload["installments_data"] = json.dumps(
            [
                {
                    "amount": item.amount,
                    "paymentType": item.payment_type,
                    "description": item.description,
                    "dueDate": item.due_date,
                }
                for item in installments
            ],
            ensure_ascii=False,
        )
    return payload


__all__ = [
    "BILLBOARD_FIELDS",
    "CONTRACT_FIELDS",
    "ContractRecord",
    "LEGACY_ALIASES",
    "billboard_from_row",
    "contract_payload",
    "normalize_record",
    "resolve_field",
    "resolve_number",
    "stored_billboard_ids",
    "stored_price_entries",
    "stored_prices",
]
