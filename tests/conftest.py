from __future__ import annotations

import pandas as pd
import pytest

from boardrent.draft import ContractDraft, update_draft
from boardrent.models import Billboard
from boardrent.pricing_table import PricingTable


@pytest.fixture
def pricing_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "size": ["3x4", "5x10", "6x18"],
            "billboard_level": ["A", "A", "B"],
            "customer_category": ["عادي", "عادي", "شركات"],
            "one_day": [None, None, 95.0],
            "one_month": [250.0, 300.0, 2000.0],
            "2_months": [None, 550.0, None],
            "3_months": [None, 800.0, 5200.0],
        }
    )


@pytest.fixture
def pricing_table(pricing_frame: pd.DataFrame) -> PricingTable:
    return PricingTable(pricing_frame)


@pytest.fixture
def billboards() -> list:
    return [
        Billboard(id="1", size="4x3", level="A", faces=1),
        Billboard(id="2", size="6x3", level="A", faces=2, monthly_price=100.0),
        Billboard(id="3", size="10x5", level="A", faces=1),
    ]


@pytest.fixture
def base_draft() -> ContractDraft:
    return update_draft(ContractDraft(), selected_ids=["1"], pricing_category="عادي", duration_months=1)
