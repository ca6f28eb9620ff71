# services/allocation_ledger.py

"""
ALLOCATION LEDGER

Append-only allocation rows linking a payment to the debt instances it pays.
One ledger per subdomain:

- receivables_ledger: SalesPaymentAllocation -> SalesTransaction
- payables_ledger:    POPaymentAllocation    -> POPaymentSchedule

RULES:
- Σ allocations of a payment == payment amount (checked before any write)
- Σ allocations of a debt <= amount owed (unless the caller opts out, see
  payables schedule-direct mode)
- The ledger never commits. Callers own the transaction and must have locked
  the debt rows they pass in.
"""

from dataclasses import dataclass
from decimal import Decimal
import logging
from typing import Dict, List, Sequence, Set

from sqlalchemy.orm import Session

from models.po_payment_allocations import POPaymentAllocation
from models.sales_payment_allocations import SalesPaymentAllocation
from services.debt_status import DebtSnapshot, remaining_balance, snapshot, total_paid
from services.exceptions import (
    AllocationMismatchError,
    NotFoundError,
    OverAllocationError,
    PaymentValidationError,
)
from utils.money import ZERO, add, compare, format_money, money_sum

logger = logging.getLogger("allocation_ledger")


@dataclass(frozen=True)
class AllocationLine:
    """A proposed allocation, before it becomes a ledger row."""
    debt_id: int
    amount: Decimal


class AllocationLedger:
    def __init__(self, allocation_model, debt_column: str, debt_label: str):
        self.allocation_model = allocation_model
        self.debt_column = debt_column
        self.debt_label = debt_label

    def _debt_fk(self):
        return getattr(self.allocation_model, self.debt_column)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def allocations_for_debt(self, db: Session, debt_id: int) -> list:
        return (
            db.query(self.allocation_model)
            .filter(self._debt_fk() == debt_id)
            .order_by(self.allocation_model.id.asc())
            .all()
        )

    def allocations_for_payment(self, db: Session, payment_id: int) -> list:
        return (
            db.query(self.allocation_model)
            .filter(self.allocation_model.payment_id == payment_id)
            .order_by(self.allocation_model.id.asc())
            .all()
        )

    def total_allocated(self, db: Session, debt_id: int) -> Decimal:
        return total_paid(a.amount for a in self.allocations_for_debt(db, debt_id))

    def totals_by_debt(self, db: Session, debt_ids: Sequence[int]) -> Dict[int, Decimal]:
        """Allocated total per debt id, one query for the whole set."""
        totals = {debt_id: ZERO for debt_id in debt_ids}
        if not totals:
            return totals
        rows = db.query(self.allocation_model).filter(self._debt_fk().in_(list(totals))).all()
        for row in rows:
            totals[getattr(row, self.debt_column)] += row.amount
        return totals

    def debt_snapshot(self, db: Session, debt) -> DebtSnapshot:
        return snapshot(debt, (a.amount for a in self.allocations_for_debt(db, debt.id)))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def record_allocations(
        self,
        db: Session,
        payment,
        amount: Decimal,
        lines: List[AllocationLine],
        debts: Dict[int, object],
        enforce_debt_bound: bool = True,
    ) -> list:
        """Validate ``lines`` against ``payment`` and the locked ``debts``, then add the rows.

        Validation happens in full before the first row is added, so a
        rejected call leaves the session untouched.
        """
        for line in lines:
            if compare(line.amount, ZERO) <= 0:
                raise PaymentValidationError(
                    f"Allocation amount for {self.debt_label} {line.debt_id} must be greater than 0"
                )

        allocated = money_sum(line.amount for line in lines)
        if allocated != amount:
            raise AllocationMismatchError(
                f"Total allocation ({allocated}) must equal payment amount ({amount})"
            )

        per_debt: Dict[int, Decimal] = {}
        for line in lines:
            if line.debt_id not in debts:
                raise NotFoundError(f"{self.debt_label.capitalize()} {line.debt_id} not found")
            per_debt[line.debt_id] = add(per_debt.get(line.debt_id, ZERO), line.amount)

        if enforce_debt_bound:
            already = self.totals_by_debt(db, list(per_debt))
            for debt_id, requested in per_debt.items():
                debt = debts[debt_id]
                remaining = remaining_balance(Decimal(debt.amount_owed), already[debt_id])
                if compare(requested, remaining) > 0:
                    logger.warning(
                        f"Rejected allocation of {requested} to {self.debt_label} {debt_id}; remaining {remaining}"
                    )
                    raise OverAllocationError(
                        f"Allocation amount ({requested}) exceeds remaining balance "
                        f"({format_money(remaining)}) for {self.debt_label} {debt_id}"
                    )

        rows = []
        for line in lines:
            row = self.allocation_model(payment_id=payment.id, amount=line.amount, created_by=payment.recorded_by)
            setattr(row, self.debt_column, line.debt_id)
            db.add(row)
            rows.append(row)
        db.flush()
        logger.info(
            f"Recorded {len(rows)} allocation(s) for payment {payment.id} across {self.debt_label}s {list(per_debt)}"
        )
        return rows

    def discard_for_payment(self, db: Session, payment_id: int) -> Set[int]:
        """Delete every allocation of a payment. Returns the debt ids that lost an allocation."""
        rows = self.allocations_for_payment(db, payment_id)
        touched = {getattr(row, self.debt_column) for row in rows}
        for row in rows:
            db.delete(row)
        db.flush()
        if rows:
            logger.info(f"Discarded {len(rows)} allocation(s) of payment {payment_id}")
        return touched


receivables_ledger = AllocationLedger(SalesPaymentAllocation, "transaction_id", "transaction")
payables_ledger = AllocationLedger(POPaymentAllocation, "schedule_id", "schedule")
