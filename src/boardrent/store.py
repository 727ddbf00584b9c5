"""
Supabase data access.

Thin wrapper around the official supabase-py client.  Every failed call is
logged and re-raised as :class:`~boardrent.errors.StoreError`; nothing is
retried and nothing is cached between calls.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from postgrest.exceptions import APIError
from supabase import Client, create_client

from .errors import ConfigError, StoreError
from .installation import InstallationPriceTable
from .models import Billboard
from .pricing_table import STATIC_CATEGORIES, PricingTable
from .records import billboard_from_row, resolve_field

logger = logging.getLogger(__name__)

PRICING_TABLE = "pricing"
CATEGORIES_TABLE = "pricing_categories"
SIZES_TABLE = "sizes"
BILLBOARDS_TABLE = "billboards"
CONTRACTS_TABLE = "Contract"
PAYMENTS_TABLE = "customer_payments"

# key columns as named in the existing database
CONTRACT_KEY = "Contract_Number"
BILLBOARD_KEY = "ID"


class SupabaseStore:
    """Reads pricing and billboards and writes contracts."""

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None, client: Optional[Client] = None) -> None:
        if client is None:
            if not url or not key:
                raise ConfigError("SUPABASE_URL and SUPABASE_KEY must be set for Supabase access")
            client = create_client(url, key)
            logger.info("supabase client initialized url=%s", url)
        self._client = client

    @property
    def client(self) -> Client:
        return self._client

    def _run(self, table: str, query) -> List[Dict[str, Any]]:
        try:
            result = query.execute()
        except APIError as e:
            logger.warning("supabase error table=%s detail=%s", table, e)
            raise StoreError(table, str(e)) from e
        return list(result.data or [])

    def fetch_pricing(self) -> PricingTable:
        rows = self._run(PRICING_TABLE, self._client.table(PRICING_TABLE).select("*").order("size"))
        logger.debug("Loaded %d pricing rows", len(rows))
        return PricingTable.from_records(rows)

    def fetch_categories(self) -> List[str]:
        rows = self._run(CATEGORIES_TABLE, self._client.table(CATEGORIES_TABLE).select("name").order("name"))
        names = list(STATIC_CATEGORIES)
        for row in rows:
            name = str(row.get("name") or "").strip()
            if name and name not in names:
                names.append(name)
        return names

    def fetch_installation_prices(self) -> InstallationPriceTable:
        rows = self._run(SIZES_TABLE, self._client.table(SIZES_TABLE).select("name, installation_price"))
        return InstallationPriceTable.from_records(rows)

    def fetch_billboards(self, ids: Optional[Sequence[object]] = None) -> List[Billboard]:
        query = self._client.table(BILLBOARDS_TABLE).select("*")
        if ids:
            query = query.in_(BILLBOARD_KEY, [str(i) for i in ids])
        return [billboard_from_row(row) for row in self._run(BILLBOARDS_TABLE, query)]

    def fetch_contract(self, number: object) -> Optional[Dict[str, Any]]:
        query = self._client.table(CONTRACTS_TABLE).select("*").eq(CONTRACT_KEY, number).limit(1)
        rows = self._run(CONTRACTS_TABLE, query)
        return rows[0] if rows else None

    def fetch_payments(self, contract_number: Optional[object] = None) -> List[Dict[str, Any]]:
        query = self._client.table(PAYMENTS_TABLE).select("*")
        if contract_number is not None:
            query = query.eq("contract_number", str(contract_number))
        return self._run(PAYMENTS_TABLE, query.order("created_at"))

    def next_contract_number(self) -> int:
        query = self._client.table(CONTRACTS_TABLE).select(CONTRACT_KEY).order(CONTRACT_KEY, desc=True).limit(1)
        rows = self._run(CONTRACTS_TABLE, query)
        if not rows:
            return 1
        try:
            return int(float(rows[0].get(CONTRACT_KEY) or 0)) + 1
        except (TypeError, ValueError):
            logger.debug("Non-numeric contract number %r; starting from 1", rows[0].get(CONTRACT_KEY))
            return 1

    def insert_contract(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert ``row`` under the next contract number and return the stored row."""

        payload = dict(row)
        number = resolve_field(payload, "contract_number") or self.next_contract_number()
        payload.pop("contract_number", None)
        payload[CONTRACT_KEY] = number
        rows = self._run(CONTRACTS_TABLE, self._client.table(CONTRACTS_TABLE).insert(payload))
        logger.info("Created contract %s", number)
        return rows[0] if rows else payload

    def update_contract(self, number: object, row: Mapping[str, Any]) -> Dict[str, Any]:
        payload = {k: v for k, v in row.items() if k not in ("contract_number", CONTRACT_KEY)}
        query = self._client.table(CONTRACTS_TABLE).update(payload).eq(CONTRACT_KEY, number)
        rows = self._run(CONTRACTS_TABLE, query)
        logger.info("Updated contract %s", number)
        return rows[0] if rows else payload

    def assign_billboards(self, number: object, ids: Sequence[object], start_date: Optional[str], end_date: Optional[str]) -> None:
        """Mark billboards as rented under contract ``number``."""

        if not ids:
            return
        payload = {"Contract_Number": number, "Rent_Start_Date": start_date, "Rent_End_Date": end_date}
        query = self._client.table(BILLBOARDS_TABLE).update(payload).in_(BILLBOARD_KEY, [str(i) for i in ids])
        self._run(BILLBOARDS_TABLE, query)


__all__ = ["SupabaseStore"]
