from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from crud.app_config import resolve_strict_schedule_bound, set_config
from crud.audit_log import get_audit_logs
from models.app_config import STRICT_SCHEDULE_BOUND
from models.payments import POPayment
from models.po_payment_allocations import POPaymentAllocation
from models.purchase_orders import PurchaseOrderStatus
from schemas.allocation_modes import (
    ManualScheduleTarget,
    ScheduleAllocationLine,
    ScheduleDirectTarget,
    UnscheduledTarget,
)
from services import payables, payment_schedules
from services.debt_status import DebtStatus
from services.exceptions import (
    AllocationMismatchError,
    NotFoundError,
    OverAllocationError,
    PaymentValidationError,
    ScheduleBelowPaidError,
    ScheduleExceedsPOTotalError,
    ScheduleHasPaymentsError,
)
from services.payment_recording import (
    delete_payables_payment,
    record_payables_payment,
    update_payables_payment,
)

from tests.conftest import TENANT, USER


def pay(db, po, amount, target, strict=None):
    return record_payables_payment(
        db,
        tenant_id=TENANT,
        po_id=po.id,
        amount=Decimal(str(amount)),
        payment_method="transfer",
        target=target,
        recorded_by=USER["email"],
        strict_schedule_bound=strict,
    )


def manual(*pairs):
    return ManualScheduleTarget(allocations=[
        ScheduleAllocationLine(schedule_id=schedule.id, amount=Decimal(str(amount)))
        for schedule, amount in pairs
    ])


@pytest.fixture()
def po(make_purchase_order):
    return make_purchase_order("1000")


@pytest.fixture()
def split(po, make_schedule):
    first = make_schedule(po, "400", due_date=date(2026, 2, 1))
    second = make_schedule(po, "600", due_date=date(2026, 3, 1))
    return first, second


# ----------------------------------------------------------------------
# Schedules
# ----------------------------------------------------------------------

def test_schedules_cannot_exceed_po_total(db, po, split, make_schedule):
    with pytest.raises(ScheduleExceedsPOTotalError):
        make_schedule(po, "1")
    assert len(payment_schedules.list_schedules(db, TENANT, po.id)) == 2


def test_display_order_defaults_to_next_position(db, po, split, make_purchase_order, make_schedule):
    first, second = split
    assert (first.display_order, second.display_order) == (0, 1)

    other = make_purchase_order("500")
    explicit = payment_schedules.create_schedule(
        db, TENANT, other.id, date(2026, 4, 1), Decimal("100"), USER["email"], display_order=7
    )
    following = make_schedule(other, "100")
    assert (explicit.display_order, following.display_order) == (7, 8)


def test_schedule_requires_positive_amount_and_due_date(db, po):
    with pytest.raises(PaymentValidationError):
        payment_schedules.create_schedule(db, TENANT, po.id, date(2026, 2, 1), Decimal("0"), USER["email"])
    with pytest.raises(PaymentValidationError):
        payment_schedules.create_schedule(db, TENANT, po.id, None, Decimal("10"), USER["email"])


def test_schedule_for_unknown_po(db):
    with pytest.raises(NotFoundError):
        payment_schedules.create_schedule(db, TENANT, 404, date(2026, 2, 1), Decimal("10"), USER["email"])


def test_update_cannot_go_below_paid(db, po, split):
    first, _ = split
    pay(db, po, "300", ScheduleDirectTarget(schedule_id=first.id))

    with pytest.raises(ScheduleBelowPaidError):
        payment_schedules.update_schedule(db, TENANT, po.id, first.id, {"amount": Decimal("200")}, USER["email"])

    updated = payment_schedules.update_schedule(db, TENANT, po.id, first.id, {"amount": Decimal("300")}, USER["email"])
    assert updated.amount == Decimal("300")
    assert payment_schedules.schedule_status(db, TENANT, po.id, first.id).snapshot.status == DebtStatus.PAID


def test_update_cannot_exceed_po_total(db, po, split):
    first, _ = split
    with pytest.raises(ScheduleExceedsPOTotalError):
        payment_schedules.update_schedule(db, TENANT, po.id, first.id, {"amount": Decimal("401")}, USER["email"])


def test_update_other_fields_writes_audit_log(db, po, split):
    first, _ = split
    payment_schedules.update_schedule(
        db, TENANT, po.id, first.id, {"due_date": date(2026, 2, 15), "note": "advance"}, USER["email"]
    )

    logs = get_audit_logs(db, "po_payment_schedules", first.id, TENANT)
    assert [log.action for log in logs] == ["UPDATE"]
    assert logs[0].old_values["due_date"] == "2026-02-01"
    assert logs[0].new_values["note"] == "advance"


def test_delete_schedule_with_payments_is_rejected(db, po, split):
    first, second = split
    pay(db, po, "100", ScheduleDirectTarget(schedule_id=first.id))

    with pytest.raises(ScheduleHasPaymentsError):
        payment_schedules.delete_schedule(db, TENANT, po.id, first.id, USER["email"])

    payment_schedules.delete_schedule(db, TENANT, po.id, second.id, USER["email"])
    remaining = [entry.schedule.id for entry in payment_schedules.list_schedules(db, TENANT, po.id)]
    assert remaining == [first.id]
    assert [log.action for log in get_audit_logs(db, "po_payment_schedules", second.id, TENANT)] == ["DELETE"]


# ----------------------------------------------------------------------
# Payments
# ----------------------------------------------------------------------

def test_schedule_direct_payment(db, po, split):
    first, _ = split

    result = pay(db, po, "150", ScheduleDirectTarget(schedule_id=first.id))

    assert result.payment.schedule_id == first.id
    assert [(a.schedule_id, a.amount) for a in result.allocations] == [(first.id, Decimal("150"))]
    assert result.schedules[0].remaining == Decimal("250")
    assert result.schedules[0].status == DebtStatus.PARTIAL


def test_schedule_direct_overpay_is_accepted_by_default(db, po, split):
    first, _ = split

    result = pay(db, po, "500", ScheduleDirectTarget(schedule_id=first.id))

    snap = result.schedules[0]
    assert snap.total_paid == Decimal("500")
    assert snap.remaining == Decimal("0")
    assert snap.status == DebtStatus.PAID


def test_schedule_direct_overpay_rejected_when_strict(db, po, split):
    first, _ = split

    with pytest.raises(OverAllocationError):
        pay(db, po, "500", ScheduleDirectTarget(schedule_id=first.id), strict=True)

    assert db.query(POPayment).count() == 0
    assert db.query(POPaymentAllocation).count() == 0


def test_strict_bound_from_tenant_config(db, po, split):
    first, _ = split
    assert resolve_strict_schedule_bound(db, TENANT) is False

    set_config(db, STRICT_SCHEDULE_BOUND, "true", TENANT, USER["email"])
    assert resolve_strict_schedule_bound(db, TENANT) is True
    assert resolve_strict_schedule_bound(db, TENANT, override=False) is False
    assert resolve_strict_schedule_bound(db, "another-tenant") is False

    with pytest.raises(OverAllocationError):
        pay(db, po, "401", ScheduleDirectTarget(schedule_id=first.id))
    pay(db, po, "400", ScheduleDirectTarget(schedule_id=first.id))


def test_schedule_of_another_po_is_not_found(db, po, split, make_purchase_order, make_schedule):
    other = make_purchase_order("300")
    foreign = make_schedule(other, "300")

    with pytest.raises(NotFoundError):
        pay(db, po, "10", ScheduleDirectTarget(schedule_id=foreign.id))


def test_manual_payment_across_schedules(db, po, split):
    first, second = split

    result = pay(db, po, "1000", manual((first, "400"), (second, "600")))

    assert result.payment.schedule_id is None
    assert {snap.debt_id: snap.status for snap in result.schedules} == {
        first.id: DebtStatus.PAID,
        second.id: DebtStatus.PAID,
    }


def test_manual_payment_mismatch_and_over_allocation(db, po, split):
    first, second = split

    with pytest.raises(AllocationMismatchError):
        pay(db, po, "500", manual((first, "100"), (second, "100")))
    with pytest.raises(OverAllocationError):
        pay(db, po, "450", manual((first, "450")))

    assert db.query(POPayment).count() == 0


def test_manual_line_is_bounded_by_other_payments(db, po, split):
    first, _ = split
    pay(db, po, "300", manual((first, "300")))

    with pytest.raises(OverAllocationError):
        pay(db, po, "200", manual((first, "200")))

    accepted = pay(db, po, "100", manual((first, "100")))
    assert accepted.schedules[0].status == DebtStatus.PAID
    assert db.query(POPaymentAllocation).filter(POPaymentAllocation.schedule_id == first.id).count() == 2


def test_unscheduled_payment_counts_toward_po_only(db, po, split):
    result = pay(db, po, "100", UnscheduledTarget())

    assert result.allocations == []
    assert result.payment.schedule_id is None
    summary = payables.po_payment_summary(db, TENANT, po.id)
    assert summary.total_paid == Decimal("100")
    assert all(entry.snapshot.status == DebtStatus.UNPAID for entry in summary.schedules)


def test_po_payment_summary(db, po, split):
    first, second = split
    pay(db, po, "400", ScheduleDirectTarget(schedule_id=first.id))
    pay(db, po, "100", UnscheduledTarget())

    summary = payables.po_payment_summary(db, TENANT, po.id)

    assert summary.total_amount == Decimal("1000")
    assert summary.total_paid == Decimal("500")
    assert summary.remaining_debt == Decimal("500")
    assert summary.payment_status == DebtStatus.PARTIAL
    assert [(e.schedule.id, e.snapshot.status) for e in summary.schedules] == [
        (first.id, DebtStatus.PAID),
        (second.id, DebtStatus.UNPAID),
    ]


def test_cancelled_po_rejects_payments(db, make_purchase_order):
    cancelled = make_purchase_order("100", status=PurchaseOrderStatus.CANCELLED)

    with pytest.raises(PaymentValidationError):
        pay(db, cancelled, "10", UnscheduledTarget())


@pytest.mark.parametrize("status", [PurchaseOrderStatus.DRAFT, PurchaseOrderStatus.RECEIVED])
def test_other_po_states_accept_payments(db, make_purchase_order, status):
    other = make_purchase_order("100", status=status)
    assert pay(db, other, "10", UnscheduledTarget()).payment.amount == Decimal("10")


def test_unknown_po(db):
    with pytest.raises(NotFoundError):
        pay(db, SimpleNamespace(id=999), "10", UnscheduledTarget())


# ----------------------------------------------------------------------
# Edit and delete
# ----------------------------------------------------------------------

def test_edit_moves_payment_between_schedules(db, po, split):
    first, second = split
    payment = pay(db, po, "300", ScheduleDirectTarget(schedule_id=first.id)).payment

    result = update_payables_payment(
        db, TENANT, po.id, payment.id, ScheduleDirectTarget(schedule_id=second.id), USER["email"]
    )

    assert result.payment.schedule_id == second.id
    assert {snap.debt_id: (snap.total_paid, snap.status) for snap in result.schedules} == {
        first.id: (Decimal("0"), DebtStatus.UNPAID),
        second.id: (Decimal("300"), DebtStatus.PARTIAL),
    }
    assert [log.action for log in get_audit_logs(db, "po_payments", payment.id, TENANT)] == ["UPDATE"]


def test_edit_ignores_the_payments_own_prior_allocations(db, po, split):
    first, _ = split
    payment = pay(db, po, "400", manual((first, "400"))).payment

    result = update_payables_payment(
        db, TENANT, po.id, payment.id, manual((first, "400")), USER["email"], changes={"note": "re-keyed"}
    )

    assert result.payment.note == "re-keyed"
    assert result.schedules[0].total_paid == Decimal("400")


def test_edit_changes_amount_and_reallocates(db, po, split):
    first, second = split
    payment = pay(db, po, "400", ScheduleDirectTarget(schedule_id=first.id)).payment

    result = update_payables_payment(
        db, TENANT, po.id, payment.id, manual((first, "100"), (second, "150")), USER["email"],
        changes={"amount": Decimal("250"), "payment_method": "Cheque"},
    )

    assert result.payment.amount == Decimal("250")
    assert result.payment.payment_method == "cheque"
    assert result.payment.schedule_id is None
    assert payables.po_payment_summary(db, TENANT, po.id).total_paid == Decimal("250")


def test_failed_edit_keeps_the_original_allocation(db, po, split):
    first, second = split
    payment = pay(db, po, "300", ScheduleDirectTarget(schedule_id=first.id)).payment

    with pytest.raises(AllocationMismatchError):
        update_payables_payment(db, TENANT, po.id, payment.id, manual((second, "200")), USER["email"])

    assert payment_schedules.schedule_status(db, TENANT, po.id, first.id).snapshot.total_paid == Decimal("300")
    assert payment_schedules.schedule_status(db, TENANT, po.id, second.id).snapshot.total_paid == Decimal("0")


def test_delete_payment(db, po, split):
    first, _ = split
    keep = pay(db, po, "100", ScheduleDirectTarget(schedule_id=first.id)).payment
    drop = pay(db, po, "200", ScheduleDirectTarget(schedule_id=first.id)).payment

    snapshots = delete_payables_payment(db, TENANT, po.id, drop.id, USER["email"])

    assert [(s.debt_id, s.total_paid) for s in snapshots] == [(first.id, Decimal("100"))]
    assert [p.id for p in payables.list_payments(db, TENANT, po.id)] == [keep.id]
    assert payables.po_payment_summary(db, TENANT, po.id).total_paid == Decimal("100")
    with pytest.raises(NotFoundError):
        payables.get_payment(db, TENANT, po.id, drop.id)
    assert [log.action for log in get_audit_logs(db, "po_payments", drop.id, TENANT)] == ["DELETE"]


def test_schedule_can_be_deleted_after_its_payment_is(db, po, split):
    first, second = split
    payment = pay(db, po, "100", ScheduleDirectTarget(schedule_id=first.id)).payment
    delete_payables_payment(db, TENANT, po.id, payment.id, USER["email"])

    payment_schedules.delete_schedule(db, TENANT, po.id, first.id, USER["email"])

    assert [e.schedule.id for e in payment_schedules.list_schedules(db, TENANT, po.id)] == [second.id]
