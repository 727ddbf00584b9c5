from datetime import date, datetime, timedelta

from boardrent.records import ContractRecord
from boardrent.status import (
    ContractStatus,
    ScheduleStatus,
    classify_contract,
    contract_status,
    days_until_expiry,
    expiring_contracts,
    is_billboard_available,
    is_contract_expired,
    schedule_status,
    to_date,
)

TODAY = date(2025, 3, 10)


def test_unpaid_contract_past_end_date_is_expired():
    yesterday = TODAY - timedelta(days=1)
    assert classify_contract(yesterday, 0, 500, today=TODAY) == ContractStatus.EXPIRED
    assert classify_contract(yesterday.isoformat(), 0, 500, today=TODAY) == "expired"


def test_fully_paid_contract_is_paid_even_after_end():
    assert classify_contract("2025-01-01", 500, 500, today=TODAY) == ContractStatus.PAID
    assert classify_contract("2025-01-01", 600, 500, today=TODAY) == ContractStatus.PAID


def test_running_contract_with_balance_is_partially_due():
    assert classify_contract("2025-03-11", 100, 500, today=TODAY) == ContractStatus.PARTIALLY_DUE
    assert classify_contract(TODAY, 100, 500, today=TODAY) == ContractStatus.PARTIALLY_DUE


def test_explicit_remaining_wins_when_non_zero():
    assert classify_contract("2025-04-01", 0, 500, remaining=0, today=TODAY) == ContractStatus.PARTIALLY_DUE
    assert classify_contract("2025-04-01", 500, 500, remaining=50, today=TODAY) == ContractStatus.PARTIALLY_DUE


def test_unknown_and_active_when_balance_is_unknown():
    assert classify_contract(None, 0, None, today=TODAY) == ContractStatus.UNKNOWN
    assert classify_contract("2025-05-01", 0, None, today=TODAY) == ContractStatus.ACTIVE
    assert classify_contract("garbage", 0, None, today=TODAY) == ContractStatus.UNKNOWN


def test_contract_status_reads_record_fields():
    record = ContractRecord.from_row({"Contract_Number": 3, "End Date": "2025-02-01", "Total": 900, "Total Paid": 100})
    assert contract_status(record, today=TODAY) == ContractStatus.EXPIRED


def test_to_date_accepts_several_inputs():
    assert to_date(datetime(2025, 3, 10, 15, 30)) == TODAY
    assert to_date("2025-03-10T08:00:00") == TODAY
    assert to_date("") is None
    assert to_date("not a date") is None


def test_expiry_helpers():
    assert is_contract_expired("2025-03-09", TODAY)
    assert not is_contract_expired("2025-03-10", TODAY)
    assert not is_contract_expired(None, TODAY)
    assert days_until_expiry("2025-03-20", TODAY) == 10
    assert days_until_expiry(None, TODAY) is None


def test_schedule_status_transitions():
    assert schedule_status("2025-04-01", "2025-06-01", TODAY) == ScheduleStatus.NOT_STARTED
    assert schedule_status("2025-01-01", "2025-03-01", TODAY) == ScheduleStatus.EXPIRED
    assert schedule_status("2025-01-01", "2025-03-25", TODAY) == ScheduleStatus.EXPIRING
    assert schedule_status("2025-01-01", "2025-06-25", TODAY) == ScheduleStatus.ACTIVE
    assert schedule_status("2025-01-01", "2025-03-10", TODAY) == ScheduleStatus.ACTIVE
    assert schedule_status("2025-01-01", None, TODAY) == ScheduleStatus.UNDEFINED
    assert schedule_status("2025-01-01", "2025-03-25", TODAY, window_days=7) == ScheduleStatus.ACTIVE


def test_billboard_availability():
    assert not is_billboard_available({"Status": "صيانة"}, TODAY)
    assert is_billboard_available({"Status": "متاح"}, TODAY)
    assert not is_billboard_available({"Contract_Number": 12}, TODAY)
    assert not is_billboard_available({"Contract_Number": 12, "Rent_End_Date": "2025-04-01"}, TODAY)
    assert is_billboard_available({"Contract_Number": 12, "Rent_End_Date": "2025-03-01"}, TODAY)


def test_expiring_contracts_sorted_by_days_left():
    rows = [
        {"Contract_Number": 1, "End Date": "2025-04-30"},
        {"Contract_Number": 2, "End Date": "2025-03-20"},
        {"Contract_Number": 3, "End Date": "2025-03-12"},
        {"Contract_Number": 4, "End Date": "2025-03-01"},
        {"Contract_Number": 5},
    ]
    records = [ContractRecord.from_row(row) for row in rows]
    hits = expiring_contracts(records, today=TODAY, window_days=30)
    assert [r.contract_number for r in hits] == ["3", "2"]
