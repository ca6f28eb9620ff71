from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from utils.auth_utils import get_current_user, get_user_identifier
from utils.tenancy import get_tenant_id

from database import atomic, get_db
from schemas.sales_transactions import RemainingCredit, SalesTransaction, SalesTransactionCreate
from services import receivables

router = APIRouter(prefix="/sales-transactions", tags=["Sales Transactions"])

@router.post("/", response_model=SalesTransaction, status_code=status.HTTP_201_CREATED)
def create_sales_transaction(
    txn: SalesTransactionCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    """Record a completed sale; any credit portion becomes a receivable."""
    with atomic(db):
        db_txn = receivables.create_transaction(
            db,
            tenant_id=tenant_id,
            invoice_no=txn.invoice_no,
            total=txn.total,
            cash=txn.cash,
            credit=txn.credit,
            created_by=get_user_identifier(user),
            customer_id=txn.customer_id,
            notes=txn.notes,
        )
    return db_txn

@router.get("/{transaction_id}", response_model=SalesTransaction)
def read_sales_transaction(transaction_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return receivables.get_transaction(db, tenant_id, transaction_id)

@router.get("/{transaction_id}/remaining-credit", response_model=RemainingCredit)
def get_remaining_credit(transaction_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    snap = receivables.remaining_credit(db, tenant_id, transaction_id)
    return RemainingCredit(
        transaction_id=snap.debt_id,
        credit=snap.amount_owed,
        total_paid=snap.total_paid,
        remaining_credit=snap.remaining,
        payment_status=snap.status,
    )
