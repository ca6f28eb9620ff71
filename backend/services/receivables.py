# services/receivables.py

"""
RECEIVABLES ALLOCATOR

Customer payments against the credit portion of sales transactions.

MODES:
- transaction: whole payment to one transaction, bounded by its remaining credit
- fifo:        oldest outstanding transactions of the customer first
- manual:      caller-supplied split across the customer's transactions

Planning locks the targeted transactions (SELECT ... FOR UPDATE, id order) and
turns the target into allocation lines. Writing the rows goes through the
receivables ledger; statuses are recomputed afterwards. Nothing here commits.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from models.business_partners import BusinessPartner
from models.sales_payments import SalesPayment
from models.sales_transactions import SalesTransaction
from schemas.allocation_modes import FifoTarget, ManualTransactionTarget, SingleTransactionTarget
from services.allocation_ledger import AllocationLine, receivables_ledger
from services.debt_status import DebtSnapshot, derive_status, remaining_balance
from services.exceptions import NotFoundError, PaymentExceedsDebtError, PaymentValidationError
from utils.money import ZERO, add, compare, format_money, is_negative, is_zero, money_min, subtract, to_money

logger = logging.getLogger("receivables")

DEFAULT_PAGE_SIZE = 50


@dataclass
class ReceivablesPlan:
    """Allocation lines for one payment plus the locked transactions they touch."""
    lines: List[AllocationLine]
    transactions: Dict[int, SalesTransaction]
    customer_id: Optional[int] = None
    transaction_id: Optional[int] = None
    enforce_debt_bound: bool = True


# ----------------------------------------------------------------------
# Locking and lookups
# ----------------------------------------------------------------------

def get_customer(db: Session, tenant_id: str, customer_id: int) -> BusinessPartner:
    customer = db.query(BusinessPartner).filter(
        BusinessPartner.id == customer_id,
        BusinessPartner.tenant_id == tenant_id,
    ).first()
    if not customer:
        raise NotFoundError(f"Customer {customer_id} not found")
    return customer


def get_transaction(db: Session, tenant_id: str, transaction_id: int) -> SalesTransaction:
    txn = db.query(SalesTransaction).filter(
        SalesTransaction.id == transaction_id,
        SalesTransaction.tenant_id == tenant_id,
    ).first()
    if not txn:
        raise NotFoundError(f"Transaction {transaction_id} not found")
    return txn


def lock_transactions(db: Session, tenant_id: str, transaction_ids: Sequence[int]) -> Dict[int, SalesTransaction]:
    """Lock the given transactions in id order. Every id must exist for the tenant."""
    wanted = sorted(set(transaction_ids))
    rows = (
        db.query(SalesTransaction)
        .filter(SalesTransaction.id.in_(wanted), SalesTransaction.tenant_id == tenant_id)
        .order_by(SalesTransaction.id.asc())
        .with_for_update()
        .all()
    )
    locked = {txn.id: txn for txn in rows}
    for transaction_id in wanted:
        if transaction_id not in locked:
            raise NotFoundError(f"Transaction {transaction_id} not found")
    return locked


def lock_customer_credit(db: Session, tenant_id: str, customer_id: int) -> List[SalesTransaction]:
    """Lock every credit transaction of a customer; returned oldest first."""
    rows = (
        db.query(SalesTransaction)
        .filter(
            SalesTransaction.customer_id == customer_id,
            SalesTransaction.tenant_id == tenant_id,
            SalesTransaction.credit > 0,
        )
        .order_by(SalesTransaction.id.asc())
        .with_for_update()
        .all()
    )
    return sorted(rows, key=lambda txn: (txn.created_at, txn.id))


# ----------------------------------------------------------------------
# Planning
# ----------------------------------------------------------------------

def plan_fifo(amount: Decimal, candidates: Sequence[Tuple[int, Decimal]]) -> List[AllocationLine]:
    """Spread ``amount`` over ``(transaction_id, remaining_credit)`` pairs in the given order.

    Raises PaymentExceedsDebtError when the candidates cannot absorb the
    full amount.
    """
    lines = []
    left = amount
    for transaction_id, remaining in candidates:
        if is_zero(left):
            break
        if compare(remaining, ZERO) <= 0:
            continue
        portion = money_min(left, remaining)
        lines.append(AllocationLine(debt_id=transaction_id, amount=portion))
        left = subtract(left, portion)

    if not is_zero(left):
        raise PaymentExceedsDebtError(
            f"Payment amount exceeds total debt. Remaining: {format_money(left)}"
        )
    return lines


def _plan_single(db: Session, tenant_id: str, amount: Decimal, target: SingleTransactionTarget) -> ReceivablesPlan:
    locked = lock_transactions(db, tenant_id, [target.transaction_id])
    return ReceivablesPlan(
        lines=[AllocationLine(debt_id=target.transaction_id, amount=amount)],
        transactions=locked,
        transaction_id=target.transaction_id,
    )


def _plan_fifo(db: Session, tenant_id: str, amount: Decimal, target: FifoTarget) -> ReceivablesPlan:
    get_customer(db, tenant_id, target.customer_id)
    candidates = lock_customer_credit(db, tenant_id, target.customer_id)
    paid = receivables_ledger.totals_by_debt(db, [txn.id for txn in candidates])
    lines = plan_fifo(
        amount,
        [(txn.id, remaining_balance(Decimal(txn.credit), paid[txn.id])) for txn in candidates],
    )
    return ReceivablesPlan(
        lines=lines,
        transactions={txn.id: txn for txn in candidates},
        customer_id=target.customer_id,
    )


def _plan_manual(db: Session, tenant_id: str, amount: Decimal, target: ManualTransactionTarget) -> ReceivablesPlan:
    get_customer(db, tenant_id, target.customer_id)
    lines = [
        AllocationLine(debt_id=line.transaction_id, amount=to_money(line.amount, "allocation amount"))
        for line in target.allocations
    ]
    locked = lock_transactions(db, tenant_id, [line.debt_id for line in lines])
    for txn in locked.values():
        if txn.customer_id != target.customer_id:
            raise PaymentValidationError(
                f"Transaction {txn.id} does not belong to customer {target.customer_id}"
            )
    return ReceivablesPlan(lines=lines, transactions=locked, customer_id=target.customer_id)


def plan_allocation(db: Session, tenant_id: str, amount: Decimal, target) -> ReceivablesPlan:
    if isinstance(target, SingleTransactionTarget):
        return _plan_single(db, tenant_id, amount, target)
    if isinstance(target, FifoTarget):
        return _plan_fifo(db, tenant_id, amount, target)
    if isinstance(target, ManualTransactionTarget):
        return _plan_manual(db, tenant_id, amount, target)
    raise TypeError(f"Unsupported receivables allocation target: {type(target).__name__}")


def apply_plan(db: Session, payment: SalesPayment, plan: ReceivablesPlan) -> list:
    return receivables_ledger.record_allocations(
        db,
        payment,
        Decimal(payment.amount),
        plan.lines,
        plan.transactions,
        enforce_debt_bound=plan.enforce_debt_bound,
    )


# ----------------------------------------------------------------------
# Status
# ----------------------------------------------------------------------

def recompute_transaction_status(db: Session, txn: SalesTransaction) -> DebtSnapshot:
    """Persist the derived status of ``txn``. Safe to call any number of times."""
    snap = receivables_ledger.debt_snapshot(db, txn)
    if txn.payment_status != snap.status:
        logger.info(f"Transaction {txn.id} status {txn.payment_status} -> {snap.status}")
        txn.payment_status = snap.status
        db.flush()
    return snap


def remaining_credit(db: Session, tenant_id: str, transaction_id: int) -> DebtSnapshot:
    txn = get_transaction(db, tenant_id, transaction_id)
    return receivables_ledger.debt_snapshot(db, txn)


def outstanding_transactions(db: Session, tenant_id: str, customer_id: int) -> List[Tuple[SalesTransaction, DebtSnapshot]]:
    """Unpaid and partially paid credit transactions of a customer, oldest first."""
    rows = (
        db.query(SalesTransaction)
        .filter(
            SalesTransaction.customer_id == customer_id,
            SalesTransaction.tenant_id == tenant_id,
            SalesTransaction.credit > 0,
        )
        .order_by(SalesTransaction.created_at.asc(), SalesTransaction.id.asc())
        .all()
    )
    paid = receivables_ledger.totals_by_debt(db, [txn.id for txn in rows])
    outstanding = []
    for txn in rows:
        credit = Decimal(txn.credit)
        snap = DebtSnapshot(
            debt_id=txn.id,
            amount_owed=credit,
            total_paid=paid[txn.id],
            remaining=remaining_balance(credit, paid[txn.id]),
            status=derive_status(credit, paid[txn.id]),
        )
        if snap.remaining > ZERO:
            outstanding.append((txn, snap))
    return outstanding


# ----------------------------------------------------------------------
# Payments and transactions
# ----------------------------------------------------------------------

def get_payment(db: Session, tenant_id: str, payment_id: int) -> SalesPayment:
    payment = db.query(SalesPayment).filter(
        SalesPayment.id == payment_id,
        SalesPayment.tenant_id == tenant_id,
    ).first()
    if not payment:
        raise NotFoundError(f"Payment {payment_id} not found")
    return payment


def list_payments(
    db: Session,
    tenant_id: str,
    customer_id: Optional[int] = None,
    transaction_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> List[SalesPayment]:
    """Newest first. A customer filter matches aggregate payments of the customer
    and payments against any of the customer's transactions."""
    query = db.query(SalesPayment).filter(SalesPayment.tenant_id == tenant_id)
    if customer_id is not None:
        customer_txns = select(SalesTransaction.id).where(SalesTransaction.customer_id == customer_id)
        query = query.filter(or_(
            SalesPayment.customer_id == customer_id,
            SalesPayment.transaction_id.in_(customer_txns),
        ))
    if transaction_id is not None:
        query = query.filter(SalesPayment.transaction_id == transaction_id)
    if start_date is not None:
        query = query.filter(SalesPayment.payment_date >= start_date)
    if end_date is not None:
        query = query.filter(SalesPayment.payment_date <= end_date)
    return (
        query.order_by(SalesPayment.payment_date.desc(), SalesPayment.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def create_transaction(
    db: Session,
    tenant_id: str,
    invoice_no: str,
    total,
    cash,
    credit,
    created_by: str,
    customer_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> SalesTransaction:
    """Record a completed sale. The credit portion becomes a receivable."""
    total = to_money(total, "total")
    cash = to_money(cash, "cash")
    credit = to_money(credit, "credit")
    for name, value in (("total", total), ("cash", cash), ("credit", credit)):
        if is_negative(value):
            raise PaymentValidationError(f"{name} cannot be negative")
    if add(cash, credit) != total:
        raise PaymentValidationError(
            f"cash ({cash}) + credit ({credit}) must equal total ({total})"
        )
    if compare(credit, ZERO) > 0 and customer_id is None:
        raise PaymentValidationError("A customer is required for a sale on credit")
    if customer_id is not None:
        get_customer(db, tenant_id, customer_id)

    txn = SalesTransaction(
        invoice_no=invoice_no,
        customer_id=customer_id,
        total=total,
        cash=cash,
        credit=credit,
        notes=notes,
        tenant_id=tenant_id,
        created_by=created_by,
    )
    db.add(txn)
    db.flush()
    recompute_transaction_status(db, txn)
    logger.info(f"Sales transaction {invoice_no} created (total {total}, credit {credit})")
    return txn
