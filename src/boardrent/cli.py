import argparse
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd
from dotenv import load_dotenv

from .billing import contract_balance
from .calculator import charges_frame, compute_quote
from .config import Config
from .config import load_config as load_runtime_config
from .draft import ContractDraft, draft_from_contract, draft_from_dict, selected_billboards, set_pricing_mode, update_draft
from .errors import BoardrentError, InstallmentError
from .installation import InstallationPriceTable
from .installments import default_split, distribute_evenly, validate_installments
from .models import Billboard, CostSummary
from .pricing_table import PricingTable
from .records import billboard_from_row, contract_payload, resolve_field, stored_prices
from .reporting import make_summary_text
from .store import SupabaseStore

BASE_DIR = Path(__file__).resolve().parents[2]

load_dotenv(BASE_DIR / ".env")

logger = logging.getLogger(__name__)


def load_billboards(path: Path) -> List[Billboard]:
    """Billboards from a CSV, Excel or JSON export of the billboards table."""
    suffix = path.suffix.lower()
    if suffix == ".json":
        frame = pd.read_json(path, dtype=False)
    elif suffix in (".xlsx", ".xls"):
        frame = pd.read_excel(path, dtype=str)
    else:
        frame = pd.read_csv(path, dtype=str)
    frame = frame.where(pd.notna(frame), None)
    return [billboard_from_row(row) for row in frame.to_dict(orient="records")]


def load_draft(path: Path) -> ContractDraft:
    with open(path, "r", encoding="utf-8") as fh:
        payload = json.load(fh)
    return draft_from_dict(payload)


def apply_cli_overrides(draft: ContractDraft, args: Optional[argparse.Namespace], config: Config) -> ContractDraft:
    """Inline options win over the draft file; config supplies the defaults."""
    changes: Dict[str, object] = {}
    if config.draft_path is None and getattr(args, "contract", None) is None:
        changes["currency"] = config.default_currency
        changes["operating_fee_rate"] = config.default_operating_fee_rate
    if args is None:
        return update_draft(draft, **changes)

    if args.category:
        changes["pricing_category"] = args.category
    if args.currency:
        changes["currency"] = args.currency
    if args.exchange_rate is not None:
        changes["exchange_rate"] = args.exchange_rate
    if args.print_price is not None:
        changes["print_cost_enabled"] = args.print_price > 0
        changes["print_price_per_meter"] = args.print_price
    if args.fee_rate is not None:
        changes["operating_fee_rate"] = args.fee_rate
    if args.discount is not None:
        changes["discount_type"] = "fixed"
        changes["discount_value"] = args.discount
    if args.discount_percent is not None:
        changes["discount_type"] = "percent"
        changes["discount_value"] = args.discount_percent
    if args.select:
        changes["selected_ids"] = args.select
    draft = update_draft(draft, **changes)

    if args.days is not None:
        draft = set_pricing_mode(draft, "days", args.days)
    elif args.months is not None:
        draft = set_pricing_mode(draft, "months", args.months)
    return draft


def load_sources(config: Config, store: Optional[SupabaseStore] = None) -> Tuple[PricingTable, Optional[InstallationPriceTable]]:
    if store is not None:
        return store.fetch_pricing(), store.fetch_installation_prices()
    if config.pricing_csv is not None:
        table = PricingTable.from_path(config.pricing_csv)
        logger.info(" - Pricing table: %s (%d rows)", config.pricing_csv, len(table))
    else:
        logger.info(" - Pricing table: (none, static defaults only)")
        table = PricingTable()
    installation = None
    if config.sizes_csv is not None:
        installation = InstallationPriceTable.from_csv(config.sizes_csv)
        logger.info(" - Installation prices: %s (%d sizes)", config.sizes_csv, len(installation))
    return table, installation


def write_outputs(config: Config, summary: CostSummary) -> List[Path]:
    if config.output_dir is None:
        return []
    config.output_dir.mkdir(parents=True, exist_ok=True)
    with open(config.summary_json, "w", encoding="utf-8") as fh:
        json.dump(summary.as_dict(), fh, ensure_ascii=False, indent=2)
    charges_frame(summary).to_csv(config.breakdown_csv, index=False, encoding="utf-8")
    return [config.summary_json, config.breakdown_csv]


def save_contract(
    store: SupabaseStore,
    draft: ContractDraft,
    summary: CostSummary,
    billboards: Sequence[Billboard],
    record: Optional[Dict[str, Any]] = None,
    installment_count: Optional[int] = None,
) -> Dict[str, Any]:
    """Write the priced contract and mark its billboards as rented.

    ``record`` is the stored row when an existing contract is re-priced; its
    recorded payments carry over into the new ``total_paid``.
    """
    if installment_count:
        plan = distribute_evenly(summary.final_total, installment_count, draft.start_date, draft.end_date)
    else:
        plan = default_split(summary.final_total, draft.start_date, draft.end_date)
    if plan:
        ok, message = validate_installments(plan, summary.final_total)
        if not ok:
            raise InstallmentError(message)

    total_paid = 0.0
    number = resolve_field(record, "contract_number") if record is not None else None
    if number is not None:
        balance = contract_balance(number, [record], store.fetch_payments(number))
        total_paid = balance.paid if balance is not None else 0.0

    payload = contract_payload(draft, summary, billboards, total_paid=total_paid, installments=plan)
    if number is not None:
        stored = store.update_contract(number, payload)
    else:
        stored = store.insert_contract(payload)
        number = resolve_field(stored, "contract_number")
    store.assign_billboards(number, [board.id for board in billboards], draft.start_date, draft.end_date)
    logger.info(
        "Saved contract %s: total %.2f, paid %.2f, remaining %.2f",
        number,
        summary.final_total,
        total_paid,
        payload["remaining"],
    )
    return stored


def run(runtime_config: Config, args: Optional[argparse.Namespace] = None, store: Optional[SupabaseStore] = None) -> CostSummary:
    config = runtime_config
    if store is None and config.use_supabase:
        store = SupabaseStore(config.supabase_url, config.supabase_key)

    contract_number = getattr(args, "contract", None)
    saved_prices: Dict[str, float] = {}
    record: Optional[Dict[str, Any]] = None
    if contract_number is not None:
        if store is None:
            raise BoardrentError("--contract requires --supabase")
        record = store.fetch_contract(contract_number)
        if record is None:
            raise BoardrentError(f"Contract {contract_number} not found")
        draft = draft_from_contract(record)
        saved_prices = stored_prices(record)
    elif config.draft_path is not None:
        draft = load_draft(config.draft_path)
    else:
        draft = ContractDraft()
    draft = apply_cli_overrides(draft, args, config)

    table, installation = load_sources(config, store)

    if config.billboards_path is not None:
        billboards = load_billboards(config.billboards_path)
    elif store is not None:
        billboards = store.fetch_billboards(draft.selected_ids or None)
    else:
        raise BoardrentError("No billboards given; pass --billboards or --supabase")

    if not draft.selected_ids:
        draft = update_draft(draft, selected_ids=[board.id for board in billboards])
    chosen = selected_billboards(draft, billboards)
    missing = len(draft.selected_ids) - len(chosen)
    if missing:
        logger.warning("%d selected billboard(s) not found in the billboard list", missing)

    summary = compute_quote(draft, chosen, table, installation, saved_prices)
    logger.info(make_summary_text(summary))
    if getattr(args, "save", False):
        if store is None:
            raise BoardrentError("--save requires --supabase")
        save_contract(store, draft, summary, chosen, record, getattr(args, "installments", None))
    for path in write_outputs(config, summary):
        logger.info(" - %s", path)
    return summary


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Price a billboard rental contract")
    parser.add_argument("--pricing-csv", help="Pricing table export (CSV or XLSX)")
    parser.add_argument("--sizes-csv", help="Sizes table export with installation prices")
    parser.add_argument("--billboards", help="Billboards export (CSV, XLSX or JSON)")
    parser.add_argument("--draft", help="Contract draft JSON file")
    parser.add_argument("--contract", help="Re-price a saved contract (requires --supabase)")
    parser.add_argument("--select", nargs="+", help="Billboard ids to include (default: all)")
    parser.add_argument("--category", help="Customer pricing category")
    duration = parser.add_mutually_exclusive_group()
    duration.add_argument("--months", type=int, help="Rental duration in months")
    duration.add_argument("--days", type=int, help="Rental duration in days")
    parser.add_argument("--currency", help="Contract currency code")
    parser.add_argument("--exchange-rate", type=float, help="Units of contract currency per base unit")
    parser.add_argument("--print-price", type=float, help="Print price per square metre; enables print cost")
    parser.add_argument("--fee-rate", type=float, help="Operating fee percentage")
    discount = parser.add_mutually_exclusive_group()
    discount.add_argument("--discount", type=float, help="Fixed discount amount")
    discount.add_argument("--discount-percent", type=float, help="Discount as a percentage of the base total")
    parser.add_argument("--supabase", action="store_true", help="Read pricing and billboards from Supabase")
    parser.add_argument("--save", action="store_true", help="Store the priced contract in Supabase")
    parser.add_argument("--installments", type=int, help="Split the total into this many installments (1-6)")
    parser.add_argument("--output-dir", help="Directory for quote_summary.json and quote_breakdown.csv")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        runtime_cfg = load_runtime_config(os.environ, args)
    except BoardrentError as exc:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
        logger.error("%s", exc)
        return 2
    log_level = logging.DEBUG if runtime_cfg.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    try:
        run(runtime_cfg, args)
    except BoardrentError as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # pragma: no cover
        logger.exception("Fatal error during quote generation")
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
