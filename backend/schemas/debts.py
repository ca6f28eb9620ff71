from pydantic import BaseModel
from decimal import Decimal
from services.debt_status import DebtStatus

class DebtSnapshot(BaseModel):
    """Derived payment state of one sales transaction or schedule."""
    debt_id: int
    amount_owed: Decimal
    total_paid: Decimal
    remaining: Decimal
    status: DebtStatus

    class Config:
        from_attributes = True
