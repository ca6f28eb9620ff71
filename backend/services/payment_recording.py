# services/payment_recording.py

"""
PAYMENT RECORDING

Entry points that turn a payment request into persisted rows.

PIPELINE (one database transaction):
    validate -> lock debt rows -> create payment -> allocate -> recompute statuses -> commit

Any failure rolls the whole unit back: no payment row without its
allocations, no allocation without its payment.
"""

from dataclasses import dataclass
from datetime import date
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from crud.app_config import resolve_strict_schedule_bound
from crud.audit_log import create_audit_log
from database import atomic
from models.audit_mixin import local_now
from models.payments import POPayment
from models.sales_payments import SalesPayment
from schemas.audit_log import AuditLogCreate
from services import payables, receivables
from services.allocation_ledger import payables_ledger
from services.debt_status import DebtSnapshot
from services.exceptions import PaymentServiceError, PaymentValidationError
from utils import sqlalchemy_to_dict
from utils.money import ZERO, to_money

logger = logging.getLogger("payment_recording")


@dataclass
class ReceivablesPaymentResult:
    payment: SalesPayment
    allocations: list
    transactions: List[DebtSnapshot]


@dataclass
class PayablesPaymentResult:
    payment: POPayment
    allocations: list
    schedules: List[DebtSnapshot]


def _validated_amount(value):
    amount = to_money(value)
    if amount <= ZERO:
        raise PaymentValidationError("Payment amount must be greater than 0")
    return amount


def _validated_method(value) -> str:
    method = (value or "").strip().lower()
    if not method:
        raise PaymentValidationError("Payment method is required")
    return method


def _require_target(target):
    if target is None:
        raise PaymentValidationError("An allocation target is required")
    return target


def _schedule_snapshots(db: Session, schedules: dict, schedule_ids) -> List[DebtSnapshot]:
    return [payables_ledger.debt_snapshot(db, schedules[sid]) for sid in sorted(schedule_ids) if sid in schedules]


# ----------------------------------------------------------------------
# Receivables
# ----------------------------------------------------------------------

def record_receivables_payment(
    db: Session,
    tenant_id: str,
    amount,
    payment_method: str,
    target,
    recorded_by: str,
    payment_date: Optional[date] = None,
    note: Optional[str] = None,
) -> ReceivablesPaymentResult:
    """Record a customer payment and allocate it according to ``target``."""
    amount = _validated_amount(amount)
    payment_method = _validated_method(payment_method)
    _require_target(target)

    try:
        with atomic(db):
            plan = receivables.plan_allocation(db, tenant_id, amount, target)

            payment = SalesPayment(
                amount=amount,
                payment_date=payment_date or local_now().date(),
                payment_method=payment_method,
                note=note,
                customer_id=plan.customer_id,
                transaction_id=plan.transaction_id,
                recorded_by=recorded_by,
                created_by=recorded_by,
                tenant_id=tenant_id,
            )
            db.add(payment)
            db.flush()

            allocations = receivables.apply_plan(db, payment, plan)
            touched = sorted({line.debt_id for line in plan.lines})
            snapshots = [
                receivables.recompute_transaction_status(db, plan.transactions[txn_id])
                for txn_id in touched
            ]
    except PaymentServiceError as e:
        logger.warning(f"Customer payment of {amount} ({target.mode}) rejected: {e.message}")
        raise

    logger.info(
        f"Customer payment {payment.id} of {amount} recorded by {recorded_by} "
        f"({target.mode}, {len(allocations)} allocation(s))"
    )
    return ReceivablesPaymentResult(payment=payment, allocations=allocations, transactions=snapshots)


# ----------------------------------------------------------------------
# Payables
# ----------------------------------------------------------------------

def record_payables_payment(
    db: Session,
    tenant_id: str,
    po_id: int,
    amount,
    payment_method: str,
    target,
    recorded_by: str,
    payment_date: Optional[date] = None,
    note: Optional[str] = None,
    strict_schedule_bound: Optional[bool] = None,
) -> PayablesPaymentResult:
    """Record a supplier payment against a purchase order."""
    amount = _validated_amount(amount)
    payment_method = _validated_method(payment_method)
    _require_target(target)

    try:
        with atomic(db):
            po = payables.lock_purchase_order(db, tenant_id, po_id)
            payables.ensure_payable(po)
            strict = resolve_strict_schedule_bound(db, tenant_id, strict_schedule_bound)
            plan = payables.plan_allocation(db, po, amount, target, strict)

            payment = POPayment(
                purchase_order_id=po.id,
                schedule_id=plan.schedule_id,
                amount=amount,
                payment_date=payment_date or local_now().date(),
                payment_method=payment_method,
                note=note,
                recorded_by=recorded_by,
                created_by=recorded_by,
                tenant_id=tenant_id,
            )
            db.add(payment)
            db.flush()

            allocations = payables.apply_plan(db, payment, plan)
            snapshots = _schedule_snapshots(db, plan.schedules, {line.debt_id for line in plan.lines})
    except PaymentServiceError as e:
        logger.warning(f"Payment of {amount} for PO {po_id} ({target.mode}) rejected: {e.message}")
        raise

    logger.info(
        f"Payment {payment.id} of {amount} recorded for PO {po_id} by {recorded_by} "
        f"({target.mode}, {len(allocations)} allocation(s))"
    )
    return PayablesPaymentResult(payment=payment, allocations=allocations, schedules=snapshots)


def update_payables_payment(
    db: Session,
    tenant_id: str,
    po_id: int,
    payment_id: int,
    target,
    changed_by: str,
    changes: Optional[dict] = None,
    strict_schedule_bound: Optional[bool] = None,
) -> PayablesPaymentResult:
    """Edit a supplier payment: discard its allocations, apply ``changes``
    (any of amount, payment_date, payment_method, note) and allocate again."""
    changes = changes or {}
    _require_target(target)

    try:
        with atomic(db):
            po = payables.lock_purchase_order(db, tenant_id, po_id)
            payables.ensure_payable(po)
            payment = payables.get_payment(db, tenant_id, po.id, payment_id)
            old_values = sqlalchemy_to_dict(payment)

            previous = payables_ledger.discard_for_payment(db, payment.id)

            if "amount" in changes:
                payment.amount = _validated_amount(changes["amount"])
            if "payment_method" in changes:
                payment.payment_method = _validated_method(changes["payment_method"])
            if changes.get("payment_date") is not None:
                payment.payment_date = changes["payment_date"]
            if "note" in changes:
                payment.note = changes["note"]

            strict = resolve_strict_schedule_bound(db, tenant_id, strict_schedule_bound)
            plan = payables.plan_allocation(db, po, to_money(payment.amount), target, strict)
            payment.schedule_id = plan.schedule_id
            payment.updated_by = changed_by
            db.flush()

            allocations = payables.apply_plan(db, payment, plan)
            touched = previous | {line.debt_id for line in plan.lines}
            schedules = plan.schedules or payables.lock_schedules(db, po.id)
            snapshots = _schedule_snapshots(db, schedules, touched)

            log_entry = AuditLogCreate(
                table_name='po_payments',
                record_id=payment.id,
                changed_by=changed_by,
                action='UPDATE',
                old_values=old_values,
                new_values=sqlalchemy_to_dict(payment),
                tenant_id=tenant_id,
            )
            create_audit_log(db=db, log_entry=log_entry)
    except PaymentServiceError as e:
        logger.warning(f"Edit of payment {payment_id} for PO {po_id} rejected: {e.message}")
        raise

    logger.info(f"Payment {payment_id} for PO {po_id} updated by {changed_by} ({target.mode})")
    return PayablesPaymentResult(payment=payment, allocations=allocations, schedules=snapshots)


def delete_payables_payment(db: Session, tenant_id: str, po_id: int, payment_id: int, deleted_by: str) -> List[DebtSnapshot]:
    """Soft-delete a supplier payment after discarding its allocations.

    Returns the snapshots of the schedules that lost an allocation.
    """
    with atomic(db):
        po = payables.lock_purchase_order(db, tenant_id, po_id)
        payment = payables.get_payment(db, tenant_id, po.id, payment_id)
        old_values = sqlalchemy_to_dict(payment)

        touched = payables_ledger.discard_for_payment(db, payment.id)
        payment.deleted_at = local_now()
        payment.deleted_by = deleted_by
        db.flush()

        snapshots = _schedule_snapshots(db, payables.lock_schedules(db, po.id), touched)

        log_entry = AuditLogCreate(
            table_name='po_payments',
            record_id=payment.id,
            changed_by=deleted_by,
            action='DELETE',
            old_values=old_values,
            new_values=sqlalchemy_to_dict(payment),
            tenant_id=tenant_id,
        )
        create_audit_log(db=db, log_entry=log_entry)

    logger.info(f"Payment {payment_id} for PO {po_id} deleted by {deleted_by}")
    return snapshots
