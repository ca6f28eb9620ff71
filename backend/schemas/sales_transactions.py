from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from services.debt_status import DebtStatus
from schemas.sales_payments import SalesPayment

class SalesTransactionCreate(BaseModel):
    invoice_no: str = Field(min_length=1)
    customer_id: Optional[int] = None
    total: Decimal
    cash: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    notes: Optional[str] = None

class SalesTransaction(BaseModel):
    id: int
    invoice_no: str
    customer_id: Optional[int] = None
    total: Decimal
    cash: Decimal
    credit: Decimal
    payment_status: DebtStatus
    notes: Optional[str] = None
    created_at: datetime
    created_by: Optional[str] = None
    tenant_id: Optional[str] = None

    class Config:
        from_attributes = True

class RemainingCredit(BaseModel):
    transaction_id: int
    credit: Decimal
    total_paid: Decimal
    remaining_credit: Decimal
    payment_status: DebtStatus

class OutstandingTransaction(BaseModel):
    id: int
    invoice_no: str
    created_at: datetime
    total: Decimal
    credit: Decimal
    remaining_credit: Decimal
    payment_status: DebtStatus

class CustomerPayments(BaseModel):
    customer_id: int
    outstanding_balance: Decimal
    payments: List[SalesPayment] = []
    unpaid_transactions: List[OutstandingTransaction] = []
