from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from schemas.allocation_modes import ReceivablesTarget
from schemas.debts import DebtSnapshot

class SalesPaymentCreate(BaseModel):
    amount: Decimal
    payment_date: Optional[date] = None  # defaults to today
    payment_method: str = Field(min_length=1)
    note: Optional[str] = None
    target: ReceivablesTarget

class SalesPaymentAllocation(BaseModel):
    id: int
    transaction_id: int
    amount: Decimal

    class Config:
        from_attributes = True

class SalesPayment(BaseModel):
    id: int
    amount: Decimal
    payment_date: date
    payment_method: str
    note: Optional[str] = None
    customer_id: Optional[int] = None
    transaction_id: Optional[int] = None
    recorded_by: str
    created_at: datetime
    tenant_id: Optional[str] = None
    allocations: List[SalesPaymentAllocation] = []

    class Config:
        from_attributes = True

class SalesPaymentResult(BaseModel):
    payment: SalesPayment
    transactions: List[DebtSnapshot] = []

    class Config:
        from_attributes = True
