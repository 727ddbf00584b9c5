"""Pricing and fee calculation for billboard rental contracts."""

from .billing import ContractBalance, contract_balance, remaining_after_payment
from .calculator import compute_quote
from .draft import ContractDraft, draft_from_contract, draft_from_dict, update_draft
from .errors import BoardrentError, ConfigError, DraftError, InstallmentError, StoreError
from .installments import Installment, default_split, distribute_evenly, validate_installments
from .models import Billboard, BillboardCharge, CostSummary, PricingEntry
from .price_logic import daily_price, monthly_price, rental_price
from .pricing_table import PricingTable
from .records import contract_payload, resolve_field
from .status import ContractStatus, classify_contract

__all__ = [
    "Billboard",
    "BillboardCharge",
    "BoardrentError",
    "ConfigError",
    "ContractBalance",
    "ContractDraft",
    "ContractStatus",
    "CostSummary",
    "DraftError",
    "Installment",
    "InstallmentError",
    "PricingEntry",
    "PricingTable",
    "StoreError",
    "classify_contract",
    "compute_quote",
    "contract_balance",
    "contract_payload",
    "daily_price",
    "default_split",
    "distribute_evenly",
    "draft_from_contract",
    "draft_from_dict",
    "monthly_price",
    "remaining_after_payment",
    "rental_price",
    "resolve_field",
    "update_draft",
    "validate_installments",
]
