from pydantic import BaseModel
from typing import Optional
from datetime import date
from decimal import Decimal
from services.debt_status import DebtStatus

class POPaymentScheduleCreate(BaseModel):
    due_date: date
    amount: Decimal
    note: Optional[str] = None
    display_order: Optional[int] = None  # appended after the last schedule when omitted

class POPaymentScheduleUpdate(BaseModel):
    due_date: Optional[date] = None
    amount: Optional[Decimal] = None
    note: Optional[str] = None
    display_order: Optional[int] = None

class POPaymentSchedule(BaseModel):
    id: int
    purchase_order_id: int
    due_date: date
    amount: Decimal
    note: Optional[str] = None
    display_order: int
    total_paid: Decimal
    remaining: Decimal
    status: DebtStatus
