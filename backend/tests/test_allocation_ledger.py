from datetime import date
from decimal import Decimal

import pytest

from models.sales_payments import SalesPayment
from services.allocation_ledger import AllocationLine, receivables_ledger
from services.exceptions import AllocationMismatchError, NotFoundError, OverAllocationError

from tests.conftest import TENANT, USER


@pytest.fixture()
def debts(make_customer, make_transaction):
    customer = make_customer()
    return {txn.id: txn for txn in (make_transaction(customer, "100"), make_transaction(customer, "40"))}


def new_payment(db, amount):
    payment = SalesPayment(
        amount=Decimal(amount),
        payment_date=date(2026, 1, 10),
        payment_method="cash",
        recorded_by=USER["email"],
        tenant_id=TENANT,
    )
    db.add(payment)
    db.flush()
    return payment


def test_rows_are_written_and_read_back(db, debts):
    first, second = debts
    payment = new_payment(db, "120")

    receivables_ledger.record_allocations(
        db, payment, Decimal("120"),
        [AllocationLine(first, Decimal("90")), AllocationLine(second, Decimal("30"))],
        debts,
    )

    assert [a.amount for a in receivables_ledger.allocations_for_payment(db, payment.id)] == [Decimal("90"), Decimal("30")]
    assert receivables_ledger.total_allocated(db, first) == Decimal("90")
    assert receivables_ledger.totals_by_debt(db, [first, second]) == {first: Decimal("90"), second: Decimal("30")}
    assert receivables_ledger.debt_snapshot(db, debts[second]).remaining == Decimal("10")


def test_nothing_is_written_when_validation_fails(db, debts):
    first, second = debts
    payment = new_payment(db, "50")

    with pytest.raises(AllocationMismatchError):
        receivables_ledger.record_allocations(db, payment, Decimal("50"), [AllocationLine(first, Decimal("49"))], debts)
    with pytest.raises(NotFoundError):
        receivables_ledger.record_allocations(db, payment, Decimal("50"), [AllocationLine(999, Decimal("50"))], debts)
    with pytest.raises(OverAllocationError):
        receivables_ledger.record_allocations(db, payment, Decimal("50"), [AllocationLine(second, Decimal("50"))], debts)

    assert receivables_ledger.allocations_for_payment(db, payment.id) == []


def test_bound_can_be_waived(db, debts):
    _, second = debts
    payment = new_payment(db, "50")

    receivables_ledger.record_allocations(
        db, payment, Decimal("50"), [AllocationLine(second, Decimal("50"))], debts, enforce_debt_bound=False
    )

    snap = receivables_ledger.debt_snapshot(db, debts[second])
    assert (snap.total_paid, snap.remaining) == (Decimal("50"), Decimal("0"))


def test_discard_for_payment(db, debts):
    first, second = debts
    payment = new_payment(db, "60")
    receivables_ledger.record_allocations(
        db, payment, Decimal("60"),
        [AllocationLine(first, Decimal("20")), AllocationLine(second, Decimal("40"))],
        debts,
    )

    assert receivables_ledger.discard_for_payment(db, payment.id) == {first, second}
    assert receivables_ledger.total_allocated(db, first) == Decimal("0")
    assert receivables_ledger.discard_for_payment(db, payment.id) == set()
