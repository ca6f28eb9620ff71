from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from schemas.allocation_modes import PayablesTarget
from schemas.debts import DebtSnapshot

class POPaymentCreate(BaseModel):
    amount: Decimal
    payment_date: Optional[date] = None  # defaults to today
    payment_method: str = Field(min_length=1)
    note: Optional[str] = None
    target: PayablesTarget

class POPaymentUpdate(BaseModel):
    # The allocation is always re-run on edit, so the target is required.
    target: PayablesTarget
    amount: Optional[Decimal] = None
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    note: Optional[str] = None

class POPaymentAllocation(BaseModel):
    id: int
    schedule_id: int
    amount: Decimal

    class Config:
        from_attributes = True

class POPayment(BaseModel):
    id: int
    purchase_order_id: int
    schedule_id: Optional[int] = None
    amount: Decimal
    payment_date: date
    payment_method: str
    note: Optional[str] = None
    recorded_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    tenant_id: Optional[str] = None
    allocations: List[POPaymentAllocation] = []

    class Config:
        from_attributes = True

class POPaymentResult(BaseModel):
    payment: POPayment
    schedules: List[DebtSnapshot] = []

    class Config:
        from_attributes = True
