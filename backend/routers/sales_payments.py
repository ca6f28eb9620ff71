from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging
from utils.auth_utils import get_user_identifier, require_group
from utils.tenancy import get_tenant_id

from database import get_db
from schemas.debts import DebtSnapshot
from schemas.sales_payments import SalesPayment, SalesPaymentCreate, SalesPaymentResult
from services import receivables
from services.payment_recording import record_receivables_payment

router = APIRouter(prefix="/sales-payments", tags=["Sales Payments"])
logger = logging.getLogger("sales_payments")

@router.post("/", response_model=SalesPaymentResult, status_code=status.HTTP_201_CREATED)
def create_sales_payment(
    payment: SalesPaymentCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin", "payment-group"])),
    tenant_id: str = Depends(get_tenant_id)
):
    """Record a customer payment against one transaction, oldest debts first, or a manual split."""
    result = record_receivables_payment(
        db,
        tenant_id=tenant_id,
        amount=payment.amount,
        payment_method=payment.payment_method,
        target=payment.target,
        recorded_by=get_user_identifier(user),
        payment_date=payment.payment_date,
        note=payment.note,
    )
    logger.info(f"Sales payment {result.payment.id} recorded by user {get_user_identifier(user)} for tenant {tenant_id}")
    return SalesPaymentResult(
        payment=SalesPayment.model_validate(result.payment),
        transactions=[DebtSnapshot.model_validate(snap) for snap in result.transactions],
    )

@router.get("/", response_model=List[SalesPayment])
def list_sales_payments(
    customer_id: Optional[int] = None,
    transaction_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(receivables.DEFAULT_PAGE_SIZE, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return receivables.list_payments(
        db,
        tenant_id,
        customer_id=customer_id,
        transaction_id=transaction_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )

@router.get("/{payment_id}", response_model=SalesPayment)
def read_sales_payment(payment_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return receivables.get_payment(db, tenant_id, payment_id)
