"""
Sparse price table keyed by (size, billboard level, customer category).

Rows come from the hosted ``pricing`` table or from a CSV/XLSX export of it.
Lookups first try an exact key match and then accept a row whose face
dimensions equal the requested ones in either orientation, so a ``4x3``
billboard is priced from a ``3x4`` row.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .models import PRICE_COLUMNS, RAW_COLUMN_ALIASES, PricingEntry
from .money import round_money
from .sizes import canonical_size, dimensions_match, parse_size

logger = logging.getLogger(__name__)

KEY_COLUMNS: Tuple[str, ...] = ("size", "billboard_level", "customer_category")

STATIC_CATEGORIES: Tuple[str, ...] = ("عادي", "المدينة", "مسوق", "شركات")
DEFAULT_LEVEL = "عادي"

_LEVEL_ALIASES: Dict[str, str] = {
    "عادي": "عادي",
    "ممتاز": "ممتاز",
    "vip": "VIP",
    "VIP": "VIP",
    "premium": "ممتاز",
    "normal": "عادي",
    "excellent": "ممتاز",
}

# size -> level -> category -> one-month base price
STATIC_DEFAULT_PRICES: Dict[str, Dict[str, Dict[str, float]]] = {
    "4x12": {
        "عادي": {"عادي": 800, "المدينة": 600, "مسوق": 700, "شركات": 750},
        "ممتاز": {"عادي": 1200, "المدينة": 900, "مسوق": 1050, "شركات": 1125},
        "VIP": {"عادي": 1600, "المدينة": 1200, "مسوق": 1400, "شركات": 1500},
    },
    "6x18": {
        "عادي": {"عادي": 1500, "المدينة": 1125, "مسوق": 1312, "شركات": 1406},
        "ممتاز": {"عادي": 2250, "المدينة": 1687, "مسوق": 1968, "شركات": 2109},
        "VIP": {"عادي": 3000, "المدينة": 2250, "مسوق": 2625, "شركات": 2812},
    },
    "8x24": {
        "عادي": {"عادي": 2400, "المدينة": 1800, "مسوق": 2100, "شركات": 2250},
        "ممتاز": {"عادي": 3600, "المدينة": 2700, "مسوق": 3150, "شركات": 3375},
        "VIP": {"عادي": 4800, "المدينة": 3600, "مسوق": 4200, "شركات": 4500},
    },
}

STATIC_MONTH_MULTIPLIERS: Dict[int, float] = {1: 1.0, 2: 1.8, 3: 2.5, 6: 4.5, 12: 8.0}


def canonical_level(level: object) -> str:
    if level is None:
        return DEFAULT_LEVEL
    text = str(level).strip()
    if not text:
        return DEFAULT_LEVEL
    return _LEVEL_ALIASES.get(text, _LEVEL_ALIASES.get(text.lower(), text))


def static_monthly_price(size: object, level: object, category: str, months: int) -> Optional[float]:
    """Price from the built-in catalogue, or ``None`` when the key is not listed."""

    by_level = STATIC_DEFAULT_PRICES.get(canonical_size(size))
    if not by_level:
        return None
    base = by_level.get(canonical_level(level), {}).get(str(category).strip())
    if not base:
        return None
    multiplier = STATIC_MONTH_MULTIPLIERS.get(int(months), float(months))
    return round_money(base * multiplier, 0)


def _key(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str) and pd.isna(value):
        return ""
    return str(value).strip()


def _prepare_frame(frame: pd.DataFrame) -> pd.DataFrame:
    out = frame.rename(columns=RAW_COLUMN_ALIASES).copy()
    for column in KEY_COLUMNS:
        if column not in out.columns:
            out[column] = ""
        out[f"_{column.upper()}"] = out[column].map(_key)
    for column in PRICE_COLUMNS:
        if column in out.columns:
            out[column] = pd.to_numeric(out[column], errors="coerce")
        else:
            out[column] = np.nan
    return out.reset_index(drop=True)


def _row_to_entry(row: pd.Series) -> PricingEntry:
    prices: Dict[str, Optional[float]] = {}
    for column in PRICE_COLUMNS:
        value = row.get(column)
        prices[column] = None if value is None or pd.isna(value) else float(value)
    return PricingEntry(
        size=_key(row.get("size")),
        billboard_level=_key(row.get("billboard_level")),
        customer_category=_key(row.get("customer_category")),
        **prices,
    )


class PricingTable:
    """In-memory view of the price table, preserving source row order."""

    def __init__(self, frame: Optional[pd.DataFrame] = None) -> None:
        if frame is None:
            frame = pd.DataFrame(columns=list(KEY_COLUMNS) + list(PRICE_COLUMNS))
        self._frame = _prepare_frame(frame)

    @classmethod
    def from_records(cls, rows: Iterable[Mapping[str, object]]) -> "PricingTable":
        return cls(pd.DataFrame(list(rows)))

    @classmethod
    def from_csv(cls, path: Path) -> "PricingTable":
        return cls(pd.read_csv(path, dtype={"size": str, "billboard_level": str, "customer_category": str}))

    @classmethod
    def from_excel(cls, path: Path) -> "PricingTable":
        return cls(pd.read_excel(path, dtype={"size": str, "billboard_level": str, "customer_category": str}))

    @classmethod
    def from_path(cls, path: Path) -> "PricingTable":
        if Path(path).suffix.lower() in {".xlsx", ".xls"}:
            return cls.from_excel(path)
        return cls.from_csv(path)

    def __len__(self) -> int:
        return len(self._frame)

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame[list(KEY_COLUMNS) + list(PRICE_COLUMNS)].copy()

    def entries(self) -> List[PricingEntry]:
        return [_row_to_entry(row) for _, row in self._frame.iterrows()]

    def categories(self) -> List[str]:
        """Static customer categories followed by any extra ones in the table."""

        seen = list(STATIC_CATEGORIES)
        for value in self._frame["_CUSTOMER_CATEGORY"].tolist():
            if value and value not in seen:
                seen.append(value)
        return seen

    def find_match(self, size: object, level: object, category: object) -> Tuple[Optional[PricingEntry], Optional[str]]:
        """
        Locate the row pricing a billboard of ``size``.

        Returns ``(entry, how)`` where ``how`` is ``"exact"`` for a key match
        (or same dimensions spelled differently) and ``"flipped"`` for an
        orientation-swapped match.  Returns ``(None, None)`` on a miss or when
        ``size`` is not a ``W x H`` string.  A row with the same orientation
        beats any swapped one; otherwise the first row in table order wins.
        """

        frame = self._frame
        if frame.empty:
            return None, None

        target = _key(size)
        level_key = _key(level)
        category_key = _key(category)
        same_group = (frame["_BILLBOARD_LEVEL"] == level_key) & (frame["_CUSTOMER_CATEGORY"] == category_key)

        exact = frame.loc[same_group & (frame["_SIZE"] == target)]
        if not exact.empty:
            return _row_to_entry(exact.iloc[0]), "exact"

        target_dims = parse_size(target)
        if target_dims is None:
            logger.debug("Unparseable size %r; no pricing match", target)
            return None, None

        candidates = frame.loc[same_group]
        if candidates.empty:
            logger.debug("No pricing rows for level=%r category=%r", level_key, category_key)
            return None, None

        flipped = None
        for _, row in candidates.iterrows():
            candidate_dims = parse_size(row["_SIZE"])
            if candidate_dims is None:
                continue
            how = dimensions_match(candidate_dims, target_dims)
            if how == "exact":
                logger.debug("Matched size %s to pricing row %s (exact)", target, row["_SIZE"])
                return _row_to_entry(row), how
            if how == "flipped" and flipped is None:
                flipped = row

        if flipped is not None:
            logger.debug("Matched size %s to pricing row %s (flipped)", target, flipped["_SIZE"])
            return _row_to_entry(flipped), "flipped"

        logger.debug("No orientation match for size %s", target)
        return None, None


__all__ = [
    "DEFAULT_LEVEL",
    "STATIC_CATEGORIES",
    "STATIC_DEFAULT_PRICES",
    "STATIC_MONTH_MULTIPLIERS",
    "PricingTable",
    "canonical_level",
    "static_monthly_price",
]
