from __future__ import annotations

import importlib

import boardrent.price_logic as price_logic
from boardrent.models import Billboard
from boardrent.pricing_table import PricingTable


def test_flipped_row_prices_one_month(pricing_table):
    quote = price_logic.monthly_price(pricing_table, "4x3", "A", "عادي", 1)
    assert quote.price == 250.0
    assert quote.source == price_logic.SOURCE_DATABASE_FLIPPED
    assert quote.column == "one_month"


def test_duration_columns_are_read_by_month_count(pricing_table):
    assert price_logic.monthly_price(pricing_table, "5x10", "A", "عادي", 2).price == 550.0
    assert price_logic.monthly_price(pricing_table, "10x5", "A", "عادي", 3).price == 800.0


def test_missing_column_value_falls_through_to_no_data(pricing_table):
    quote = price_logic.monthly_price(pricing_table, "3x4", "A", "عادي", 6)
    assert quote.price == 0.0
    assert quote.source == price_logic.SOURCE_NO_DATA


def test_static_catalogue_used_when_table_has_no_row():
    quote = price_logic.monthly_price(PricingTable(), "4x12", "عادي", "عادي", 3)
    assert quote.price == 2000
    assert quote.source == price_logic.SOURCE_STATIC_DEFAULT


def test_zero_duration_is_no_data(pricing_table):
    quote = price_logic.monthly_price(pricing_table, "3x4", "A", "عادي", "abc")
    assert quote.price == 0.0
    assert quote.notes == "no duration"


def test_daily_price_derived_from_one_month():
    table = PricingTable.from_records(
        [{"size": "3x4", "billboard_level": "A", "customer_category": "عادي", "one_month": 300}]
    )
    quote = price_logic.daily_price(table, "3x4", "A", "عادي")
    assert quote.price == 10.00
    assert quote.source == price_logic.SOURCE_DERIVED_DAILY


def test_daily_price_prefers_one_day_column(pricing_table):
    quote = price_logic.daily_price(pricing_table, "18x6", "B", "شركات")
    assert quote.price == 95.0
    assert quote.source == price_logic.SOURCE_DATABASE_FLIPPED


def test_daily_price_from_static_catalogue_is_rounded():
    quote = price_logic.daily_price(PricingTable(), "4x12", "عادي", "عادي")
    assert quote.price == 26.67


def test_daily_price_without_any_monthly_price_is_zero():
    quote = price_logic.daily_price(None, "9x9", "A", "عادي")
    assert quote.price == 0.0
    assert quote.source == price_logic.SOURCE_NO_DATA


def test_rental_price_days_mode_multiplies_daily_rate(pricing_table):
    board = Billboard(id="1", size="4x3", level="A")
    quote = price_logic.rental_price(pricing_table, board, "عادي", "days", days=5)
    assert round(quote.price, 2) == 41.65


def test_rental_price_falls_back_to_billboard_price():
    board = Billboard(id="9", size="9x9", level="A", monthly_price=100.0)
    quote = price_logic.rental_price(PricingTable(), board, "عادي", "months", months=2)
    assert quote.price == 200.0
    assert quote.source == price_logic.SOURCE_BILLBOARD_PRICE


def test_days_per_month_env_override(monkeypatch):
    monkeypatch.setenv("DAYS_PER_MONTH", "20")
    importlib.reload(price_logic)
    try:
        table = PricingTable.from_records(
            [{"size": "3x4", "billboard_level": "A", "customer_category": "عادي", "one_month": 300}]
        )
        assert price_logic.DAYS_PER_MONTH == 20
        assert price_logic.daily_price(table, "3x4", "A", "عادي").price == 15.0
    finally:
        monkeypatch.delenv("DAYS_PER_MONTH", raising=False)
        importlib.reload(price_logic)


def test_catalogue_spellings_find_the_table_row_before_static_prices():
    table = PricingTable.from_records(
        [{"size": "4x12", "billboard_level": "ممتاز", "customer_category": "عادي", "one_month": 999, "one_day": 40}]
    )
    quote = price_logic.monthly_price(table, "4x12", "premium", "عادي", 1)
    assert quote.price == 999.0
    assert quote.source == price_logic.SOURCE_DATABASE

    quote = price_logic.monthly_price(table, "12*4", "ممتاز", "عادي", 1)
    assert quote.price == 999.0

    daily = price_logic.daily_price(table, "12*4", "Premium", "عادي")
    assert daily.price == 40.0
    assert daily.column == "one_day"
