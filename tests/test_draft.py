import json

import pytest

from boardrent.draft import (
    ContractDraft,
    draft_from_contract,
    draft_from_dict,
    remove_billboard,
    selected_billboards,
    set_pricing_mode,
    toggle_billboard,
    update_draft,
)
from boardrent.errors import DraftError


def test_defaults():
    draft = ContractDraft()
    assert draft.pricing_mode == "months"
    assert draft.duration == 1
    assert draft.operating_fee_rate == 3.0
    assert draft.currency == "LYD"


def test_update_draft_returns_new_state():
    draft = ContractDraft()
    updated = update_draft(draft, discount_value="150", currency="usd")
    assert updated is not draft
    assert draft.discount_value == 0.0
    assert updated.discount_value == 150.0
    assert updated.currency == "USD"


def test_invalid_numbers_are_coerced():
    draft = update_draft(
        ContractDraft(),
        duration_months="abc",
        discount_value=-20,
        exchange_rate="0",
        print_price_per_meter="",
    )
    assert draft.duration_months == 0
    assert draft.discount_value == 0.0
    assert draft.exchange_rate == 1.0
    assert draft.print_price_per_meter == 0.0


def test_unknown_fields_and_enum_values_are_rejected():
    with pytest.raises(DraftError):
        update_draft(ContractDraft(), colour="red")
    with pytest.raises(DraftError):
        update_draft(ContractDraft(), pricing_mode="weeks")
    with pytest.raises(DraftError):
        update_draft(ContractDraft(), discount_type="coupon")


def test_selection_helpers(billboards):
    draft = toggle_billboard(ContractDraft(), 1)
    draft = toggle_billboard(draft, "3")
    assert draft.selected_ids == ("1", "3")
    assert toggle_billboard(draft, "1").selected_ids == ("3",)
    assert remove_billboard(draft, "3").selected_ids == ("1",)
    assert [b.id for b in selected_billboards(draft, billboards)] == ["1", "3"]
    assert update_draft(draft, selected_ids=["2", "2", ""]).selected_ids == ("2",)


def test_set_pricing_mode_switches_duration_field():
    draft = set_pricing_mode(ContractDraft(), "days", "10")
    assert draft.pricing_mode == "days"
    assert draft.duration_days == 10
    assert draft.duration == 10
    back = set_pricing_mode(draft, "months", 3)
    assert back.duration == 3


def test_draft_from_dict_validates_schema():
    draft = draft_from_dict({"selected_ids": [1, "2"], "pricing_mode": "days", "duration_days": 7})
    assert draft.selected_ids == ("1", "2")
    assert draft.duration == 7
    with pytest.raises(DraftError, match="extra"):
        draft_from_dict({"extra": True})
    with pytest.raises(DraftError, match="pricing_mode"):
        draft_from_dict({"pricing_mode": "weeks"})


def test_draft_from_contract_uses_legacy_columns():
    row = {
        "Contract_Number": 12,
        "Customer Name": "شركة النور",
        "Total Rent": 900,
        "Discount": 20,
        "billboard_ids": "5,6",
        "print_cost_enabled": "true",
        "billboard_prices": json.dumps(
            [
                {
                    "billboardId": "5",
                    "contractPrice": 450,
                    "pricingMode": "days",
                    "duration": 10,
                    "pricingCategory": "شركات",
                }
            ]
        ),
    }
    draft = draft_from_contract(row)
    assert draft.selected_ids == ("5", "6")
    assert draft.pricing_mode == "days"
    assert draft.duration_days == 10
    assert draft.pricing_category == "شركات"
    assert draft.discount_value == 20.0
    assert draft.customer_name == "شركة النور"
    assert draft.operating_fee_rate == 3.0
    assert draft.print_cost_enabled is True
    assert draft.use_stored_prices is True


def test_draft_from_contract_without_snapshots():
    draft = draft_from_contract({"customer_category": "مسوق", "operating_fee_rate": 5}, use_stored_prices=False)
    assert draft.pricing_category == "مسوق"
    assert draft.pricing_mode == "months"
    assert draft.duration_months == 1
    assert draft.operating_fee_rate == 5.0
    assert not draft.use_stored_prices
