import pytest

from boardrent.errors import InstallmentError
from boardrent.installments import (
    AT_INSTALLATION,
    AT_SIGNING,
    END_OF_CONTRACT,
    EVERY_TWO_MONTHS,
    MONTHLY,
    QUARTERLY,
    Installment,
    add_installment,
    calculate_due_date,
    default_split,
    distribute_evenly,
    plan_total,
    remove_installment,
    update_installment,
    validate_installments,
)


def test_due_dates_by_payment_type():
    start, end = "2025-01-15", "2025-07-15"
    assert calculate_due_date(AT_SIGNING, 3, start, end) == "2025-01-15"
    assert calculate_due_date(MONTHLY, 0, start, end) == "2025-02-15"
    assert calculate_due_date(MONTHLY, 2, start, end) == "2025-04-15"
    assert calculate_due_date(EVERY_TWO_MONTHS, 1, start, end) == "2025-05-15"
    assert calculate_due_date(QUARTERLY, 0, start, end) == "2025-04-15"
    assert calculate_due_date(AT_INSTALLATION, 0, start, end) == "2025-01-22"
    assert calculate_due_date(END_OF_CONTRACT, 0, start, end) == "2025-07-15"
    assert calculate_due_date(END_OF_CONTRACT, 0, start, None) is None


def test_due_date_needs_a_start_date():
    assert calculate_due_date(MONTHLY, 0, None) is None
    assert calculate_due_date(MONTHLY, 0, "") is None


def test_month_end_is_clamped():
    assert calculate_due_date(MONTHLY, 0, "2025-01-31") == "2025-02-28"


def test_distribute_evenly_gives_remainder_to_last_share():
    plan = distribute_evenly(100, 3, "2025-01-15")
    assert [item.amount for item in plan] == [33.33, 33.33, 33.34]
    assert plan_total(plan) == 100.0
    assert plan[0].payment_type == AT_SIGNING
    assert [item.due_date for item in plan] == ["2025-01-15", "2025-03-15", "2025-04-15"]


def test_distribute_evenly_clamps_count():
    assert len(distribute_evenly(600, 10)) == 6
    assert len(distribute_evenly(600, 0)) == 1
    assert len(distribute_evenly(600, "x")) == 1


def test_distribute_evenly_requires_positive_total():
    with pytest.raises(InstallmentError):
        distribute_evenly(0, 2)
    with pytest.raises(InstallmentError):
        distribute_evenly("abc", 2)


def test_add_installment_covers_what_is_left():
    plan = [Installment(amount=300, payment_type=AT_SIGNING)]
    plan = add_installment(plan, 500, start_date="2025-01-01")
    assert plan[-1].amount == 200.0
    assert plan[-1].description == "الدفعة 2"
    assert plan[-1].due_date == "2025-03-01"

    over = add_installment([Installment(amount=700)], 500)
    assert over[-1].amount == 0.0


def test_remove_and_update_installment():
    plan = distribute_evenly(900, 3, "2025-01-01")
    assert len(remove_installment(plan, 1)) == 2
    changed = update_installment(plan, 1, start_date="2025-01-01", payment_type=QUARTERLY)
    assert changed[1].payment_type == QUARTERLY
    assert changed[1].due_date == "2025-07-01"
    assert changed[0] == plan[0]


def test_validate_installments_allows_one_unit_of_slack():
    assert validate_installments([], 100) == (False, "يرجى إضافة دفعات للعقد")
    ok, _ = validate_installments([Installment(amount=50), Installment(amount=49.5)], 100)
    assert ok
    bad, message = validate_installments([Installment(amount=50)], 100)
    assert not bad
    assert message


def test_default_split_is_two_halves():
    plan = default_split(101, "2025-01-01")
    assert [item.amount for item in plan] == [50.5, 50.5]
    assert [item.payment_type for item in plan] == [AT_SIGNING, AT_INSTALLATION]
    assert plan[1].due_date == "2025-01-08"
    assert default_split(0) == []
