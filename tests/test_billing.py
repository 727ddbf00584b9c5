from boardrent.billing import ContractBalance, contract_balance, remaining_after_payment

PAYMENTS = [
    {"id": "p3", "entry_type": "receipt", "amount": 100, "created_at": "2025-03-01T10:00:00Z", "contract_number": "7"},
    {"id": "p1", "entry_type": "receipt", "amount": 200, "created_at": "2025-01-01T10:00:00Z", "contract_number": "7"},
    {"id": "p2", "entry_type": "invoice", "amount": 999, "created_at": "2025-02-01T10:00:00Z", "contract_number": "8"},
    {"id": "p4", "entry_type": "account_payment", "amount": "50", "created_at": "2025-04-01", "contract_number": "7"},
]


def test_remaining_after_payment_counts_earlier_credits_only():
    assert remaining_after_payment("p1", PAYMENTS, 1000) == 800.0
    assert remaining_after_payment("p2", PAYMENTS, 1000) == 800.0
    assert remaining_after_payment("p3", PAYMENTS, 1000) == 700.0
    assert remaining_after_payment("p4", PAYMENTS, 1000) == 650.0


def test_remaining_after_payment_floors_and_handles_unknown_ids():
    assert remaining_after_payment("p4", PAYMENTS, 100) == 0.0
    assert remaining_after_payment("missing", PAYMENTS, 1000) == 1000.0


def test_contract_balance_reads_legacy_total_column():
    contracts = [{"Contract_Number": 7, "Total Rent": 500}, {"Contract_Number": 8, "total_cost": 100}]
    assert contract_balance("7", contracts, PAYMENTS) == ContractBalance(total=500.0, paid=350.0, remaining=150.0)
    assert contract_balance(8, contracts, PAYMENTS) == ContractBalance(total=100.0, paid=999.0, remaining=0.0)
    assert contract_balance("9", contracts, PAYMENTS) is None


def test_contract_balance_ignores_surrogate_row_id():
    contracts = [{"id": 7, "Contract_Number": 12, "total_cost": 100}]
    assert contract_balance("7", contracts, PAYMENTS) is None
    assert contract_balance("12", contracts, []) == ContractBalance(total=100.0, paid=0.0, remaining=100.0)
