from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from boardrent.errors import ConfigError, StoreError
from boardrent.store import CONTRACT_KEY, SupabaseStore


def _client(rows):
    """Supabase client double whose query builder returns ``rows``."""
    client = MagicMock()
    query = MagicMock()
    for name in ("select", "order", "eq", "in_", "limit", "insert", "update"):
        getattr(query, name).return_value = query
    result = MagicMock()
    result.data = rows
    query.execute.return_value = result
    client.table.return_value = query
    return client, query


def test_requires_credentials_without_client():
    with pytest.raises(ConfigError):
        SupabaseStore(url="", key="")


def test_fetch_pricing_builds_table():
    client, query = _client(
        [{"size": "3x4", "billboard_level": "A", "customer_category": "عادي", "one_month": 250, "2_months": 480}]
    )
    table = SupabaseStore(client=client).fetch_pricing()
    client.table.assert_called_with("pricing")
    query.order.assert_called_with("size")
    entry, how = table.find_match("4x3", "A", "عادي")
    assert how == "flipped"
    assert entry.two_months == 480.0


def test_fetch_categories_merges_static_list():
    client, _ = _client([{"name": "شركات"}, {"name": "حكومي"}, {"name": ""}])
    assert SupabaseStore(client=client).fetch_categories() == ["عادي", "المدينة", "مسوق", "شركات", "حكومي"]


def test_fetch_installation_prices():
    client, _ = _client([{"name": "4x12", "installation_price": 300}])
    table = SupabaseStore(client=client).fetch_installation_prices()
    assert table.lookup("12x4") == 300.0


def test_fetch_billboards_filters_by_id():
    client, query = _client([{"ID": 1, "Size": "4x12", "Level": "A", "Faces_Count": 2}])
    boards = SupabaseStore(client=client).fetch_billboards(["1"])
    query.in_.assert_called_with("ID", ["1"])
    assert boards[0].id == "1"
    assert boards[0].faces == 2


def test_fetch_contract_returns_none_when_missing():
    client, query = _client([])
    assert SupabaseStore(client=client).fetch_contract(99) is None
    query.eq.assert_called_with(CONTRACT_KEY, 99)


@pytest.mark.parametrize("rows, expected", [([{CONTRACT_KEY: 41}], 42), ([], 1), ([{CONTRACT_KEY: "abc"}], 1)])
def test_next_contract_number(rows, expected):
    client, _ = _client(rows)
    assert SupabaseStore(client=client).next_contract_number() == expected


def test_insert_contract_writes_key_column():
    client, query = _client([{CONTRACT_KEY: 7, "total_cost": 100}])
    stored = SupabaseStore(client=client).insert_contract({"contract_number": 7, "total_cost": 100})
    query.insert.assert_called_once_with({CONTRACT_KEY: 7, "total_cost": 100})
    assert stored[CONTRACT_KEY] == 7


def test_update_contract_never_rewrites_the_key():
    client, query = _client([])
    SupabaseStore(client=client).update_contract(7, {"contract_number": 8, "total_cost": 90})
    query.update.assert_called_once_with({"total_cost": 90})
    query.eq.assert_called_with(CONTRACT_KEY, 7)


def test_api_errors_become_store_errors(caplog):
    client, query = _client([])
    query.execute.side_effect = APIError({"message": "permission denied", "code": "42501"})
    store = SupabaseStore(client=client)
    with pytest.raises(StoreError) as excinfo:
        store.fetch_pricing()
    assert excinfo.value.table == "pricing"
    assert "supabase error table=pricing" in caplog.text
