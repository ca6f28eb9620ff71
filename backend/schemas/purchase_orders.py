from pydantic import BaseModel
from typing import List
from decimal import Decimal
from services.debt_status import DebtStatus
from schemas.po_payment_schedules import POPaymentSchedule

class POPaymentSummary(BaseModel):
    purchase_order_id: int
    total_amount: Decimal
    total_paid: Decimal
    remaining_debt: Decimal
    payment_status: DebtStatus
    schedules: List[POPaymentSchedule] = []
