from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from utils.tenancy import get_tenant_id

from database import get_db
from schemas.sales_payments import SalesPayment
from schemas.sales_transactions import CustomerPayments, OutstandingTransaction
from services import receivables
from utils.money import money_sum

router = APIRouter(prefix="/customers", tags=["Customers"])

@router.get("/{customer_id}/payments", response_model=CustomerPayments)
def get_customer_payments(customer_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    """Payments of a customer together with the transactions that still carry credit, oldest first."""
    receivables.get_customer(db, tenant_id, customer_id)
    outstanding = receivables.outstanding_transactions(db, tenant_id, customer_id)
    return CustomerPayments(
        customer_id=customer_id,
        outstanding_balance=money_sum(snap.remaining for _, snap in outstanding),
        payments=[SalesPayment.model_validate(p) for p in receivables.list_payments(db, tenant_id, customer_id=customer_id)],
        unpaid_transactions=[
            OutstandingTransaction(
                id=txn.id,
                invoice_no=txn.invoice_no,
                created_at=txn.created_at,
                total=txn.total,
                credit=txn.credit,
                remaining_credit=snap.remaining,
                payment_status=snap.status,
            )
            for txn, snap in outstanding
        ],
    )
