from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigError
from .money import currency_info


_BOOLEAN_TRUE = {"1", "true", "yes", "on"}

DEFAULT_OPERATING_FEE_RATE = 3.0
DEFAULT_EXPIRING_WINDOW_DAYS = 30


@dataclass(frozen=True)
class Config:
    """Runtime configuration assembled from environment variables and CLI options."""

    base_dir: Path
    pricing_csv: Optional[Path]
    sizes_csv: Optional[Path]
    billboards_path: Optional[Path]
    draft_path: Optional[Path]
    output_dir: Optional[Path]
    default_currency: str
    default_operating_fee_rate: float
    expiring_window_days: int
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    use_supabase: bool = False
    verbose: bool = False

    @property
    def summary_json(self) -> Optional[Path]:
        return self.output_dir / "quote_summary.json" if self.output_dir else None

    @property
    def breakdown_csv(self) -> Optional[Path]:
        return self.output_dir / "quote_breakdown.csv" if self.output_dir else None


def _path(value: object | None) -> Optional[Path]:
    text = "" if value is None else str(value).strip()
    return Path(text).expanduser().resolve() if text else None


def _fee_rate(value: object | None, default: float) -> float:
    """Operating fee percentage; ``"2.5"``, ``"2.5%"`` and ``"2,5٪"`` read as 2.5."""
    text = "" if value is None else str(value).replace("%", "").replace("٪", "").replace(",", ".").strip()
    try:
        rate = float(text)
    except ValueError:
        return default
    return rate if rate >= 0 else default


def _window_days(value: object | None, default: int) -> int:
    try:
        days = int(str(value).strip())
    except ValueError:
        return default
    return days if days > 0 else default


def _supabase_enabled(value: object | None) -> bool:
    if isinstance(value, bool):
        return value
    return value is not None and str(value).strip().lower() in _BOOLEAN_TRUE


def _option(cli_args: object | None, name: str) -> object | None:
    return getattr(cli_args, name, None) if cli_args is not None else None


def load_config(env: Mapping[str, str], cli_args: object | None = None) -> Config:
    """Build a runtime :class:`Config` from environment variables and CLI options.

    CLI options override the matching environment variable.  Supabase access
    needs a URL and either the anon or the service-role key.
    """

    base_dir = Path(__file__).resolve().parents[2]

    supabase_url = (env.get("SUPABASE_URL") or "").strip() or None
    supabase_key = (env.get("SUPABASE_KEY") or env.get("SUPABASE_SERVICE_ROLE_KEY") or "").strip() or None
    use_supabase = _supabase_enabled(env.get("USE_SUPABASE")) or bool(_option(cli_args, "supabase"))
    if use_supabase and not (supabase_url and supabase_key):
        raise ConfigError("USE_SUPABASE requires SUPABASE_URL and SUPABASE_KEY (or SUPABASE_SERVICE_ROLE_KEY)")

    return Config(
        base_dir=base_dir,
        pricing_csv=_path(_option(cli_args, "pricing_csv") or env.get("PRICING_CSV")),
        sizes_csv=_path(_option(cli_args, "sizes_csv") or env.get("SIZES_CSV")),
        billboards_path=_path(_option(cli_args, "billboards")),
        draft_path=_path(_option(cli_args, "draft")),
        output_dir=_path(_option(cli_args, "output_dir") or env.get("OUTPUT_DIR")),
        default_currency=currency_info(env.get("DEFAULT_CURRENCY")).code,
        default_operating_fee_rate=_fee_rate(env.get("DEFAULT_OPERATING_FEE_RATE"), DEFAULT_OPERATING_FEE_RATE),
        expiring_window_days=_window_days(env.get("EXPIRING_WINDOW_DAYS"), DEFAULT_EXPIRING_WINDOW_DAYS),
        supabase_url=supabase_url,
        supabase_key=supabase_key,
        use_supabase=use_supabase,
        verbose=bool(_option(cli_args, "verbose")),
    )


__all__ = ["Config", "load_config"]
