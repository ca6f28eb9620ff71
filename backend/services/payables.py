# services/payables.py

"""
PAYABLES ALLOCATOR

Supplier payments against the installment schedules of a purchase order.

MODES:
- schedule: whole payment to one installment. The installment's balance is
            only enforced when strict_schedule_bound is on.
- manual:   caller-supplied split across the PO's installments, each line
            bounded by the installment's remaining balance.
- none:     the payment counts toward the PO but no installment.

Every mutation starts by locking the purchase order row, which serialises
payments and schedule edits of the same PO. Nothing here commits.
"""

from dataclasses import dataclass
from decimal import Decimal
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from models.payments import POPayment
from models.po_payment_schedules import POPaymentSchedule
from models.purchase_orders import PurchaseOrder, PurchaseOrderStatus
from schemas.allocation_modes import ManualScheduleTarget, ScheduleDirectTarget, UnscheduledTarget
from services.allocation_ledger import AllocationLine, payables_ledger
from services.debt_status import DebtSnapshot, DebtStatus, derive_status, remaining_balance
from services.exceptions import NotFoundError, PaymentValidationError
from utils.money import money_sum, to_money

logger = logging.getLogger("payables")


@dataclass
class PayablesPlan:
    lines: List[AllocationLine]
    schedules: Dict[int, POPaymentSchedule]
    schedule_id: Optional[int] = None
    enforce_debt_bound: bool = True


@dataclass
class ScheduleStatus:
    """An installment together with its derived payment state."""
    schedule: POPaymentSchedule
    snapshot: DebtSnapshot


@dataclass
class POPaymentSummary:
    purchase_order_id: int
    total_amount: Decimal
    total_paid: Decimal
    remaining_debt: Decimal
    payment_status: DebtStatus
    schedules: List[ScheduleStatus]


# ----------------------------------------------------------------------
# Locking and lookups
# ----------------------------------------------------------------------

def get_purchase_order(db: Session, tenant_id: str, po_id: int) -> PurchaseOrder:
    po = db.query(PurchaseOrder).filter(
        PurchaseOrder.id == po_id,
        PurchaseOrder.tenant_id == tenant_id,
    ).first()
    if not po:
        raise NotFoundError(f"Purchase Order with ID {po_id} not found")
    return po


def lock_purchase_order(db: Session, tenant_id: str, po_id: int) -> PurchaseOrder:
    po = (
        db.query(PurchaseOrder)
        .filter(PurchaseOrder.id == po_id, PurchaseOrder.tenant_id == tenant_id)
        .with_for_update()
        .first()
    )
    if not po:
        raise NotFoundError(f"Purchase Order with ID {po_id} not found")
    return po


def ensure_payable(po: PurchaseOrder):
    """Payments are accepted in any PO state except cancelled."""
    if po.status == PurchaseOrderStatus.CANCELLED:
        raise PaymentValidationError(
            f"Purchase Order {po.po_number or po.id} is cancelled and cannot receive payments"
        )


def lock_schedules(db: Session, po_id: int) -> Dict[int, POPaymentSchedule]:
    rows = (
        db.query(POPaymentSchedule)
        .filter(POPaymentSchedule.purchase_order_id == po_id)
        .order_by(POPaymentSchedule.id.asc())
        .with_for_update()
        .all()
    )
    return {schedule.id: schedule for schedule in rows}


def get_schedule(db: Session, po_id: int, schedule_id: int) -> POPaymentSchedule:
    schedule = db.query(POPaymentSchedule).filter(
        POPaymentSchedule.id == schedule_id,
        POPaymentSchedule.purchase_order_id == po_id,
    ).first()
    if not schedule:
        raise NotFoundError(f"Payment schedule {schedule_id} not found for Purchase Order {po_id}")
    return schedule


def get_payment(db: Session, tenant_id: str, po_id: int, payment_id: int) -> POPayment:
    payment = db.query(POPayment).filter(
        POPayment.id == payment_id,
        POPayment.purchase_order_id == po_id,
        POPayment.tenant_id == tenant_id,
    ).first()
    if not payment:
        raise NotFoundError(f"Payment with ID {payment_id} not found")
    return payment


def list_payments(db: Session, tenant_id: str, po_id: int) -> List[POPayment]:
    return (
        db.query(POPayment)
        .filter(POPayment.purchase_order_id == po_id, POPayment.tenant_id == tenant_id)
        .order_by(POPayment.payment_date.asc(), POPayment.id.asc())
        .all()
    )


# ----------------------------------------------------------------------
# Planning
# ----------------------------------------------------------------------

def plan_allocation(db: Session, po: PurchaseOrder, amount: Decimal, target, strict_schedule_bound: bool) -> PayablesPlan:
    """Turn ``target`` into allocation lines against the PO's (locked) schedules.

    The PO row must already be locked by the caller.
    """
    if isinstance(target, UnscheduledTarget):
        return PayablesPlan(lines=[], schedules={})

    schedules = lock_schedules(db, po.id)

    if isinstance(target, ScheduleDirectTarget):
        if target.schedule_id not in schedules:
            raise NotFoundError(
                f"Payment schedule {target.schedule_id} not found for Purchase Order {po.id}"
            )
        return PayablesPlan(
            lines=[AllocationLine(debt_id=target.schedule_id, amount=amount)],
            schedules=schedules,
            schedule_id=target.schedule_id,
            enforce_debt_bound=strict_schedule_bound,
        )

    if isinstance(target, ManualScheduleTarget):
        lines = [
            AllocationLine(debt_id=line.schedule_id, amount=to_money(line.amount, "allocation amount"))
            for line in target.allocations
        ]
        # Each line is bounded by the schedule's remaining balance (allocations of
        # other payments included), so Σ allocations of a schedule never exceeds its amount.
        return PayablesPlan(lines=lines, schedules=schedules)

    raise TypeError(f"Unsupported payables allocation target: {type(target).__name__}")


def apply_plan(db: Session, payment: POPayment, plan: PayablesPlan) -> list:
    if not plan.lines:
        return []
    return payables_ledger.record_allocations(
        db,
        payment,
        Decimal(payment.amount),
        plan.lines,
        plan.schedules,
        enforce_debt_bound=plan.enforce_debt_bound,
    )


# ----------------------------------------------------------------------
# Reads
# ----------------------------------------------------------------------

def schedule_statuses(db: Session, po_id: int) -> List[ScheduleStatus]:
    schedules = (
        db.query(POPaymentSchedule)
        .filter(POPaymentSchedule.purchase_order_id == po_id)
        .order_by(POPaymentSchedule.display_order.asc(), POPaymentSchedule.id.asc())
        .all()
    )
    paid = payables_ledger.totals_by_debt(db, [s.id for s in schedules])
    statuses = []
    for schedule in schedules:
        owed = Decimal(schedule.amount)
        statuses.append(ScheduleStatus(
            schedule=schedule,
            snapshot=DebtSnapshot(
                debt_id=schedule.id,
                amount_owed=owed,
                total_paid=paid[schedule.id],
                remaining=remaining_balance(owed, paid[schedule.id]),
                status=derive_status(owed, paid[schedule.id]),
            ),
        ))
    return statuses


def po_total_paid(db: Session, po_id: int) -> Decimal:
    """Σ of live payments of the PO, unscheduled ones included."""
    payments = db.query(POPayment).filter(POPayment.purchase_order_id == po_id).all()
    return money_sum(Decimal(p.amount) for p in payments)


def po_payment_summary(db: Session, tenant_id: str, po_id: int) -> POPaymentSummary:
    po = get_purchase_order(db, tenant_id, po_id)
    total = Decimal(po.total_amount)
    paid = po_total_paid(db, po.id)
    return POPaymentSummary(
        purchase_order_id=po.id,
        total_amount=total,
        total_paid=paid,
        remaining_debt=remaining_balance(total, paid),
        payment_status=derive_status(total, paid),
        schedules=schedule_statuses(db, po.id),
    )
