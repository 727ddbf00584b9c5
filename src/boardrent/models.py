from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .money import round_money

# Duration in months -> pricing table column
MONTH_COLUMNS: Dict[int, str] = {
    1: "one_month",
    2: "two_months",
    3: "three_months",
    6: "six_months",
    12: "full_year",
}
DAY_COLUMN = "one_day"
PRICE_COLUMNS: Tuple[str, ...] = (DAY_COLUMN, *MONTH_COLUMNS.values())

# Column spellings used by the hosted ``pricing`` table
RAW_COLUMN_ALIASES: Dict[str, str] = {
    "2_months": "two_months",
    "3_months": "three_months",
    "6_months": "six_months",
}


@dataclass(frozen=True)
class PricingEntry:
    """One row of the price table keyed by (size, level, customer category)."""

    size: str
    billboard_level: str
    customer_category: str
    one_day: Optional[float] = None
    one_month: Optional[float] = None
    two_months: Optional[float] = None
    three_months: Optional[float] = None
    six_months: Optional[float] = None
    full_year: Optional[float] = None

    def price_for_column(self, column: str) -> Optional[float]:
        if column not in PRICE_COLUMNS:
            return None
        return getattr(self, column)


@dataclass(frozen=True)
class Billboard:
    """The subset of a billboard record that pricing depends on."""

    id: str
    size: str
    level: str = ""
    faces: int = 1
    monthly_price: float = 0.0
    name: str = ""
    city: str = ""


@dataclass(frozen=True)
class PriceQuote:
    """Normalized view of how a unit price was resolved."""

    price: float
    source: str
    column: Optional[str] = None
    notes: str = ""


@dataclass(frozen=True)
class InstallationDetail:
    billboard_id: str
    size: str
    price: Optional[float]

    @property
    def has_price(self) -> bool:
        return self.price is not None and self.price > 0


@dataclass(frozen=True)
class BillboardCharge:
    """Per-billboard line of a contract quote, already in contract currency."""

    billboard_id: str
    size: str
    level: str
    faces: int
    rental: float
    print_cost: float
    installation: float
    source: str
    notes: str = ""

    @property
    def contract_price(self) -> float:
        return round_money(self.rental + self.print_cost)


@dataclass(frozen=True)
class CostSummary:
    """Totals handed to persistence and to the print renderer."""

    estimated_total: float
    base_total: float
    discount_amount: float
    total_after_discount: float
    installation_cost: float
    print_cost_total: float
    rental_cost_only: float
    operating_fee: float
    final_total: float
    operating_fee_rate: float
    currency: str
    charges: Tuple[BillboardCharge, ...] = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, float]:
        return {
            "baseTotal": self.base_total,
            "discountAmount": self.discount_amount,
            "totalAfterDiscount": self.total_after_discount,
            "installationCost": self.installation_cost,
            "printCostTotal": self.print_cost_total,
            "rentalCostOnly": self.rental_cost_only,
            "operatingFee": self.operating_fee,
            "finalTotal": self.final_total,
        }
