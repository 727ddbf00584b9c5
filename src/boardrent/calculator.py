"""
Contract cost computation.

Turns a :class:`~boardrent.draft.ContractDraft` and the selected billboards
into a :class:`~boardrent.models.CostSummary`:

* each billboard is priced through :func:`~boardrent.price_logic.rental_price`
  and converted into the contract currency (2 dp);
* optional print cost ``area x faces x price per metre`` is added per
  billboard;
* the discount is taken once from the base total;
* the operating fee is a percentage of the rental share of the total, i.e.
  after installation and print costs are taken out.

Every accumulation step is rounded half away from zero to 2 decimals so the
totals agree with those stored on historical contracts.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from .draft import ContractDraft
from .installation import InstallationPriceTable, installation_details, total_installation_cost
from .models import Billboard, BillboardCharge, CostSummary, InstallationDetail
from .money import coerce_amount, convert_price, currency_info, round_money
from .price_logic import rental_price
from .pricing_table import PricingTable
from .sizes import size_area

logger = logging.getLogger(__name__)

SOURCE_STORED_PRICE = "STORED_PRICE"


def print_cost(billboard: Billboard, draft: ContractDraft) -> float:
    """Print cost of one billboard in contract currency; 0 when printing is off."""

    price_per_meter = coerce_amount(draft.print_price_per_meter)
    if not draft.print_cost_enabled or price_per_meter <= 0:
        return 0.0
    area = size_area(billboard.size)
    if area <= 0:
        return 0.0
    faces = billboard.faces if billboard.faces and billboard.faces > 0 else 1
    return convert_price(area * faces * price_per_meter, draft.exchange_rate)


def discount_amount(draft: ContractDraft, base_total: float) -> float:
    value = coerce_amount(draft.discount_value)
    if not value:
        return 0.0
    if draft.discount_type == "percent":
        return round_money(base_total * max(0.0, min(100.0, value)) / 100)
    return round_money(value)


def operating_fee(rental_cost_only: float, rate: float) -> float:
    return round_money(coerce_amount(rental_cost_only) * coerce_amount(rate) / 100)


def price_billboards(
    draft: ContractDraft,
    billboards: Sequence[Billboard],
    table: Optional[PricingTable],
    installation: Sequence[InstallationDetail] = (),
    stored_prices: Optional[Mapping[str, float]] = None,
) -> List[BillboardCharge]:
    """Price every billboard in ``billboards`` under ``draft``."""

    install_by_id: Dict[str, Optional[float]] = {d.billboard_id: d.price for d in installation}
    stored = stored_prices or {}
    charges: List[BillboardCharge] = []
    for board in billboards:
        printing = print_cost(board, draft)
        install = convert_price(install_by_id.get(board.id) or 0.0, draft.exchange_rate)

        if draft.use_stored_prices and board.id in stored:
            line_total = convert_price(stored[board.id], draft.exchange_rate)
            rental = max(0.0, round_money(line_total - printing))
            charges.append(
                BillboardCharge(
                    billboard_id=board.id,
                    size=board.size,
                    level=board.level,
                    faces=board.faces,
                    rental=rental,
                    print_cost=printing,
                    installation=install,
                    source=SOURCE_STORED_PRICE,
                    notes="saved contract price",
                )
            )
            continue

        quote = rental_price(
            table,
            board,
            draft.pricing_category,
            draft.pricing_mode,
            months=draft.duration_months,
            days=draft.duration_days,
        )
        charges.append(
            BillboardCharge(
                billboard_id=board.id,
                size=board.size,
                level=board.level,
                faces=board.faces,
                rental=convert_price(quote.price, draft.exchange_rate),
                print_cost=printing,
                installation=install,
                source=quote.source,
                notes=quote.notes,
            )
        )
        logger.debug("billboard %s :: %s :: %s => %.2f", board.id, board.size, quote.source, quote.price)
    return charges


def summarize(
    draft: ContractDraft,
    charges: Sequence[BillboardCharge],
    installation_total: float = 0.0,
) -> CostSummary:
    """Fold per-billboard charges into contract totals."""

    estimated = 0.0
    print_total = 0.0
    for charge in charges:
        estimated = round_money(estimated + charge.rental + charge.print_cost)
        print_total = round_money(print_total + charge.print_cost)

    override = coerce_amount(draft.rent_cost_override)
    base_total = override if override > 0 else estimated
    discount = discount_amount(draft, base_total)
    # Discounts larger than the base total floor the contract at zero
    final_total = max(0.0, round_money(base_total - discount))
    installation_cost = convert_price(installation_total, draft.exchange_rate)
    rental_only = max(0.0, round_money(final_total - installation_cost - print_total))
    rate = coerce_amount(draft.operating_fee_rate)

    return CostSummary(
        estimated_total=estimated,
        base_total=round_money(base_total),
        discount_amount=discount,
        total_after_discount=final_total,
        installation_cost=installation_cost,
        print_cost_total=print_total,
        rental_cost_only=rental_only,
        operating_fee=operating_fee(rental_only, rate),
        final_total=final_total,
        operating_fee_rate=rate,
        currency=currency_info(draft.currency).code,
        charges=tuple(charges),
    )


def compute_quote(
    draft: ContractDraft,
    billboards: Sequence[Billboard],
    table: Optional[PricingTable],
    installation_table: Optional[InstallationPriceTable] = None,
    stored_prices: Optional[Mapping[str, float]] = None,
) -> CostSummary:
    """
    Price ``billboards`` under ``draft`` and return the contract totals.

    ``billboards`` should already be the selected ones; see
    :func:`boardrent.draft.selected_billboards`.  ``stored_prices`` maps
    billboard ids to the price saved on an existing contract and is only used
    when ``draft.use_stored_prices`` is set.
    """

    details = installation_details(billboards, installation_table)
    charges = price_billboards(draft, billboards, table, details, stored_prices)
    summary = summarize(draft, charges, total_installation_cost(details))
    logger.debug(
        "quote: base=%.2f discount=%.2f final=%.2f rental_only=%.2f fee=%.2f",
        summary.base_total,
        summary.discount_amount,
        summary.final_total,
        summary.rental_cost_only,
        summary.operating_fee,
    )
    return summary


def charges_frame(summary: CostSummary) -> pd.DataFrame:
    """One row per billboard for auditing a quote."""

    columns = ["BILLBOARD_ID", "SIZE", "LEVEL", "FACES", "RENTAL", "PRINT_COST", "CONTRACT_PRICE", "INSTALLATION", "SOURCE", "NOTES"]
    rows = [
        {
            "BILLBOARD_ID": c.billboard_id,
            "SIZE": c.size,
            "LEVEL": c.level,
            "FACES": c.faces,
            "RENTAL": c.rental,
            "PRINT_COST": c.print_cost,
            "CONTRACT_PRICE": c.contract_price,
            "INSTALLATION": c.installation,
            "SOURCE": c.source,
            "NOTES": c.notes,
        }
        for c in summary.charges
    ]
    return pd.DataFrame(rows, columns=columns)


def print_cost_summary(billboards: Sequence[Billboard], draft: ContractDraft) -> pd.DataFrame:
    """Print cost grouped by size and face count (base currency)."""

    columns = ["SIZE", "FACES", "AREA", "COUNT", "TOTAL_AREA", "COST_PER_UNIT", "TOTAL_COST"]
    price_per_meter = coerce_amount(draft.print_price_per_meter)
    if not draft.print_cost_enabled or price_per_meter <= 0 or not billboards:
        return pd.DataFrame(columns=columns)

    rows = []
    for board in billboards:
        area = size_area(board.size)
        if area <= 0:
            continue
        faces = board.faces if board.faces and board.faces > 0 else 1
        rows.append({"SIZE": board.size, "FACES": faces, "AREA": area})
    if not rows:
        return pd.DataFrame(columns=columns)

    frame = pd.DataFrame(rows)
    grouped = frame.groupby(["SIZE", "FACES"], sort=False).agg(AREA=("AREA", "first"), COUNT=("AREA", "size")).reset_index()
    grouped["TOTAL_AREA"] = grouped["AREA"] * grouped["FACES"] * grouped["COUNT"]
    grouped["COST_PER_UNIT"] = grouped["AREA"] * grouped["FACES"] * price_per_meter
    grouped["TOTAL_COST"] = grouped["COST_PER_UNIT"] * grouped["COUNT"]
    return grouped[columns]


def installation_summary(details: Sequence[InstallationDetail]) -> pd.DataFrame:
    """Installation prices grouped by size (base currency)."""

    columns = ["SIZE", "PRICE_PER_UNIT", "COUNT", "TOTAL_FOR_SIZE", "HAS_PRICE"]
    if not details:
        return pd.DataFrame(columns=columns)
    frame = pd.DataFrame(
        {
            "SIZE": [d.size for d in details],
            "PRICE": [d.price or 0.0 for d in details],
        }
    )
    grouped = frame.groupby("SIZE", sort=False).agg(
        PRICE_PER_UNIT=("PRICE", "first"),
        COUNT=("PRICE", "size"),
        TOTAL_FOR_SIZE=("PRICE", "sum"),
    ).reset_index()
    grouped["HAS_PRICE"] = grouped["PRICE_PER_UNIT"] > 0
    return grouped[columns]


__all__ = [
    "SOURCE_STORED_PRICE",
    "charges_frame",
    "compute_quote",
    "discount_amount",
    "installation_summary",
    "operating_fee",
    "price_billboards",
    "print_cost",
    "print_cost_summary",
    "summarize",
]
