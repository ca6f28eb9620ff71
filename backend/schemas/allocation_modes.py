"""Allocation targets for a payment.

Each subdomain has a closed set of modes, modelled as a discriminated union on
the ``mode`` field. The services dispatch on the concrete class.
"""

from decimal import Decimal
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field


# --- Receivables -----------------------------------------------------------

class TransactionAllocationLine(BaseModel):
    transaction_id: int
    amount: Decimal


class SingleTransactionTarget(BaseModel):
    """The whole payment goes to one sales transaction."""
    mode: Literal["transaction"] = "transaction"
    transaction_id: int


class FifoTarget(BaseModel):
    """Oldest outstanding transactions of the customer are paid first."""
    mode: Literal["fifo"] = "fifo"
    customer_id: int


class ManualTransactionTarget(BaseModel):
    """The caller splits the payment across the customer's transactions."""
    mode: Literal["manual"] = "manual"
    customer_id: int
    allocations: List[TransactionAllocationLine] = Field(min_length=1)


ReceivablesTarget = Annotated[
    Union[SingleTransactionTarget, FifoTarget, ManualTransactionTarget],
    Field(discriminator="mode"),
]


# --- Payables --------------------------------------------------------------

class ScheduleAllocationLine(BaseModel):
    schedule_id: int
    amount: Decimal


class ScheduleDirectTarget(BaseModel):
    """The whole payment goes to one installment."""
    mode: Literal["schedule"] = "schedule"
    schedule_id: int


class ManualScheduleTarget(BaseModel):
    mode: Literal["manual"] = "manual"
    allocations: List[ScheduleAllocationLine] = Field(min_length=1)


class UnscheduledTarget(BaseModel):
    """Payment against the PO that is not tied to any installment."""
    mode: Literal["none"] = "none"


PayablesTarget = Annotated[
    Union[ScheduleDirectTarget, ManualScheduleTarget, UnscheduledTarget],
    Field(discriminator="mode"),
]
