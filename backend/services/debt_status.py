# services/debt_status.py

"""
DEBT INSTANCE STATUS

A debt instance is anything payments are allocated against: a sales
transaction (owes its ``credit``) or a PO payment schedule entry (owes its
``amount``). Both expose ``id`` and ``amount_owed``.

Everything here is a pure function of the amount owed and the current
allocation amounts. Nothing touches the database.
"""

from dataclasses import dataclass
from decimal import Decimal
import enum
from typing import Iterable

ZERO = Decimal("0")


class DebtStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


@dataclass(frozen=True)
class DebtSnapshot:
    debt_id: int
    amount_owed: Decimal
    total_paid: Decimal
    remaining: Decimal
    status: DebtStatus


def total_paid(allocation_amounts: Iterable[Decimal]) -> Decimal:
    return sum(allocation_amounts, ZERO)


def remaining_balance(amount_owed: Decimal, paid: Decimal) -> Decimal:
    """Amount owed minus what was allocated, floored at zero."""
    remaining = amount_owed - paid
    return remaining if remaining > ZERO else ZERO


def derive_status(amount_owed: Decimal, paid: Decimal) -> DebtStatus:
    remaining = remaining_balance(amount_owed, paid)
    if remaining == ZERO:
        return DebtStatus.PAID
    if paid > ZERO:
        return DebtStatus.PARTIAL
    return DebtStatus.UNPAID


def snapshot(debt, allocation_amounts: Iterable[Decimal]) -> DebtSnapshot:
    paid = total_paid(allocation_amounts)
    amount_owed = Decimal(debt.amount_owed)
    return DebtSnapshot(
        debt_id=debt.id,
        amount_owed=amount_owed,
        total_paid=paid,
        remaining=remaining_balance(amount_owed, paid),
        status=derive_status(amount_owed, paid),
    )
