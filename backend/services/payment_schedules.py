# services/payment_schedules.py

"""
PO PAYMENT SCHEDULES

Installment plans of a purchase order.

GUARDS:
- Σ schedule amounts of a PO <= PO total          (ScheduleExceedsPOTotalError)
- a schedule never shrinks below what was paid    (ScheduleBelowPaidError, checked first)
- a schedule with allocations cannot be deleted   (ScheduleHasPaymentsError)

Each mutation locks the purchase order row and commits as one unit.
"""

from datetime import date
from decimal import Decimal
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from crud.audit_log import create_audit_log
from database import atomic
from models.payments import POPayment
from models.po_payment_schedules import POPaymentSchedule
from schemas.audit_log import AuditLogCreate
from services.allocation_ledger import payables_ledger
from services.exceptions import (
    ScheduleBelowPaidError,
    ScheduleExceedsPOTotalError,
    ScheduleHasPaymentsError,
    PaymentValidationError,
)
from services.payables import (
    ScheduleStatus,
    get_purchase_order,
    get_schedule,
    lock_purchase_order,
    schedule_statuses,
)
from utils import sqlalchemy_to_dict
from utils.money import ZERO, format_money, money_sum, to_money

logger = logging.getLogger("payment_schedules")


def _validated_amount(value) -> Decimal:
    amount = to_money(value)
    if amount <= ZERO:
        raise PaymentValidationError("Schedule amount must be greater than 0")
    return amount


def _scheduled_total(db: Session, po_id: int, exclude_id: Optional[int] = None) -> Decimal:
    query = db.query(POPaymentSchedule).filter(POPaymentSchedule.purchase_order_id == po_id)
    if exclude_id is not None:
        query = query.filter(POPaymentSchedule.id != exclude_id)
    return money_sum(Decimal(s.amount) for s in query.all())


def _check_po_total(po, scheduled: Decimal, amount: Decimal):
    total = Decimal(po.total_amount)
    if scheduled + amount > total:
        raise ScheduleExceedsPOTotalError(
            f"Total scheduled amount ({format_money(scheduled + amount)}) "
            f"exceeds PO total ({format_money(total)})"
        )


def list_schedules(db: Session, tenant_id: str, po_id: int) -> List[ScheduleStatus]:
    get_purchase_order(db, tenant_id, po_id)
    return schedule_statuses(db, po_id)


def schedule_status(db: Session, tenant_id: str, po_id: int, schedule_id: int) -> ScheduleStatus:
    get_purchase_order(db, tenant_id, po_id)
    schedule = get_schedule(db, po_id, schedule_id)
    return ScheduleStatus(schedule=schedule, snapshot=payables_ledger.debt_snapshot(db, schedule))


def create_schedule(
    db: Session,
    tenant_id: str,
    po_id: int,
    due_date: date,
    amount,
    user_id: str,
    note: Optional[str] = None,
    display_order: Optional[int] = None,
) -> POPaymentSchedule:
    with atomic(db):
        if due_date is None:
            raise PaymentValidationError("Due date is required")
        amount = _validated_amount(amount)
        po = lock_purchase_order(db, tenant_id, po_id)
        _check_po_total(po, _scheduled_total(db, po.id), amount)

        if display_order is None:
            last = db.query(func.max(POPaymentSchedule.display_order)).filter(
                POPaymentSchedule.purchase_order_id == po.id
            ).scalar()
            display_order = 0 if last is None else last + 1

        schedule = POPaymentSchedule(
            purchase_order_id=po.id,
            due_date=due_date,
            amount=amount,
            note=note,
            display_order=display_order,
            created_by=user_id,
        )
        db.add(schedule)
        db.flush()

    logger.info(f"Schedule {schedule.id} of {amount} due {due_date} added to PO {po_id} by {user_id}")
    return schedule


def update_schedule(db: Session, tenant_id: str, po_id: int, schedule_id: int, changes: dict, user_id: str) -> POPaymentSchedule:
    """Apply ``changes`` (any of due_date, amount, note, display_order) to a schedule."""
    with atomic(db):
        po = lock_purchase_order(db, tenant_id, po_id)
        schedule = get_schedule(db, po.id, schedule_id)
        old_values = sqlalchemy_to_dict(schedule)

        if "amount" in changes:
            amount = _validated_amount(changes["amount"])
            paid = payables_ledger.total_allocated(db, schedule.id)
            if amount < paid:
                raise ScheduleBelowPaidError(
                    f"Schedule amount ({format_money(amount)}) cannot be less than "
                    f"amount already paid ({format_money(paid)})"
                )
            _check_po_total(po, _scheduled_total(db, po.id, exclude_id=schedule.id), amount)
            schedule.amount = amount

        if "due_date" in changes:
            if changes["due_date"] is None:
                raise PaymentValidationError("Due date is required")
            schedule.due_date = changes["due_date"]
        if "note" in changes:
            schedule.note = changes["note"]
        if changes.get("display_order") is not None:
            schedule.display_order = changes["display_order"]

        schedule.updated_by = user_id
        db.flush()

        log_entry = AuditLogCreate(
            table_name='po_payment_schedules',
            record_id=schedule.id,
            changed_by=user_id,
            action='UPDATE',
            old_values=old_values,
            new_values=sqlalchemy_to_dict(schedule),
            tenant_id=tenant_id,
        )
        create_audit_log(db=db, log_entry=log_entry)

    logger.info(f"Schedule {schedule_id} of PO {po_id} updated by {user_id}")
    return schedule


def delete_schedule(db: Session, tenant_id: str, po_id: int, schedule_id: int, user_id: str):
    with atomic(db):
        po = lock_purchase_order(db, tenant_id, po_id)
        schedule = get_schedule(db, po.id, schedule_id)
        if payables_ledger.allocations_for_debt(db, schedule.id):
            raise ScheduleHasPaymentsError(
                "Cannot delete schedule with existing payments. Remove payments first."
            )

        log_entry = AuditLogCreate(
            table_name='po_payment_schedules',
            record_id=schedule.id,
            changed_by=user_id,
            action='DELETE',
            old_values=sqlalchemy_to_dict(schedule),
            new_values=None,
            tenant_id=tenant_id,
        )
        create_audit_log(db=db, log_entry=log_entry)
        # Deleted payments may still point at the schedule.
        db.query(POPayment).filter(POPayment.schedule_id == schedule.id).update(
            {POPayment.schedule_id: None}, synchronize_session=False
        )
        db.delete(schedule)
        db.flush()

    logger.info(f"Schedule {schedule_id} removed from PO {po_id} by {user_id}")
