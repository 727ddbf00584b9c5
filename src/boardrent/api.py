from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .cli import parse_args
from .cli import run as run_quote
from .config import load_config
from .models import CostSummary


@dataclass
class QuoteOptions:
    billboards: Optional[Path] = None
    pricing_csv: Optional[Path] = None
    sizes_csv: Optional[Path] = None
    draft: Optional[Path] = None
    output_dir: Optional[Path] = None
    select: List[str] = field(default_factory=list)
    category: Optional[str] = None
    months: Optional[int] = None
    days: Optional[int] = None
    currency: Optional[str] = None
    exchange_rate: Optional[float] = None
    print_price: Optional[float] = None
    fee_rate: Optional[float] = None
    discount: Optional[float] = None
    discount_percent: Optional[float] = None
    installments: Optional[int] = None
    use_supabase: bool = False
    save: bool = False


def _argv(options: QuoteOptions) -> List[str]:
    argv: List[str] = []
    flags = (
        ("--billboards", options.billboards),
        ("--pricing-csv", options.pricing_csv),
        ("--sizes-csv", options.sizes_csv),
        ("--draft", options.draft),
        ("--output-dir", options.output_dir),
        ("--category", options.category),
        ("--months", options.months),
        ("--days", options.days),
        ("--currency", options.currency),
        ("--exchange-rate", options.exchange_rate),
        ("--print-price", options.print_price),
        ("--fee-rate", options.fee_rate),
        ("--discount", options.discount),
        ("--discount-percent", options.discount_percent),
        ("--installments", options.installments),
    )
    for flag, value in flags:
        if value is not None:
            argv.extend([flag, str(value)])
    if options.select:
        argv.append("--select")
        argv.extend(str(i) for i in options.select)
    if options.use_supabase:
        argv.append("--supabase")
    if options.save:
        argv.append("--save")
    return argv


def quote(options: QuoteOptions) -> CostSummary:
    """Programmatic interface to price a contract and return its totals.

    Environment variables fill anything ``options`` leaves unset, exactly as
    for the ``boardrent`` command.
    """
    import os

    args = parse_args(_argv(options))
    cfg = load_config(dict(os.environ), args)
    return run_quote(cfg, args)


__all__ = ["QuoteOptions", "quote"]
