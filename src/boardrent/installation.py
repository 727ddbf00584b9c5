"""Installation price per billboard size, read from the ``sizes`` table."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from .models import Billboard, InstallationDetail
from .sizes import parse_size, size_variants

logger = logging.getLogger(__name__)


class InstallationPriceTable:
    """Maps size names to an installation price (``None`` when unpriced)."""

    def __init__(self, prices: Mapping[str, Optional[float]] | None = None) -> None:
        self._prices: Dict[str, Optional[float]] = {}
        for name, price in (prices or {}).items():
            key = str(name).strip()
            if key and key not in self._prices:
                self._prices[key] = price

    @classmethod
    def from_records(cls, rows: Iterable[Mapping[str, object]]) -> "InstallationPriceTable":
        """Build from ``sizes`` rows (``name``/``installation_price``) or legacy
        ``size``/``install_price`` rows."""

        prices: Dict[str, Optional[float]] = {}
        for row in rows:
            name = row.get("name") or row.get("size")
            if name is None:
                continue
            raw = row.get("installation_price", row.get("install_price"))
            numeric = pd.to_numeric(pd.Series([raw]), errors="coerce").iloc[0]
            prices.setdefault(str(name).strip(), None if pd.isna(numeric) else float(numeric))
        return cls(prices)

    @classmethod
    def from_csv(cls, path: Path) -> "InstallationPriceTable":
        frame = pd.read_csv(path, dtype={"name": str, "size": str})
        return cls.from_records(frame.to_dict(orient="records"))

    def __len__(self) -> int:
        return len(self._prices)

    def lookup(self, size: object) -> Optional[float]:
        """Exact name, then any alternate spelling, then flipped dimensions."""

        if size is None:
            return None
        text = str(size).strip()
        if text in self._prices:
            return self._prices[text]

        lowered = {name.lower(): name for name in self._prices}
        for variant in size_variants(text):
            name = lowered.get(variant)
            if name is not None:
                return self._prices[name]

        target = parse_size(text)
        if target is not None:
            for name, price in self._prices.items():
                dims = parse_size(name)
                if dims is not None and (dims == target or dims == (target[1], target[0])):
                    return price

        logger.debug("No installation price for size %s", text)
        return None


def installation_details(
    billboards: Sequence[Billboard],
    table: Optional[InstallationPriceTable],
) -> List[InstallationDetail]:
    details: List[InstallationDetail] = []
    for board in billboards:
        price = table.lookup(board.size) if table is not None else None
        details.append(InstallationDetail(billboard_id=board.id, size=board.size, price=price))
    return details


def total_installation_cost(details: Sequence[InstallationDetail]) -> float:
    return float(sum(detail.price or 0.0 for detail in details))


__all__ = ["InstallationPriceTable", "installation_details", "total_installation_cost"]
