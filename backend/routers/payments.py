from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging
from utils.auth_utils import get_user_identifier, require_group
from utils.tenancy import get_tenant_id

from database import get_db
from schemas.debts import DebtSnapshot
from schemas.payments import POPayment, POPaymentCreate, POPaymentResult, POPaymentUpdate
from services import payables
from services.payment_recording import (
    delete_payables_payment,
    record_payables_payment,
    update_payables_payment,
)

router = APIRouter(prefix="/purchase-orders/{po_id}/payments", tags=["PO Payments"])
logger = logging.getLogger("payments")


def to_payment_result(result) -> POPaymentResult:
    return POPaymentResult(
        payment=POPayment.model_validate(result.payment),
        schedules=[DebtSnapshot.model_validate(snap) for snap in result.schedules],
    )

@router.post("/", response_model=POPaymentResult, status_code=status.HTTP_201_CREATED)
def create_payment(
    po_id: int,
    payment: POPaymentCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin", "payment-group"])),
    tenant_id: str = Depends(get_tenant_id)
):
    """Record a supplier payment for a purchase order and allocate it to its schedules."""
    result = record_payables_payment(
        db,
        tenant_id=tenant_id,
        po_id=po_id,
        amount=payment.amount,
        payment_method=payment.payment_method,
        target=payment.target,
        recorded_by=get_user_identifier(user),
        payment_date=payment.payment_date,
        note=payment.note,
    )
    logger.info(f"Payment {result.payment.id} recorded for PO {po_id} by user {get_user_identifier(user)} for tenant {tenant_id}")
    return to_payment_result(result)

@router.get("/", response_model=List[POPayment])
def get_payments_for_po(po_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    """List the live payments of a purchase order."""
    payables.get_purchase_order(db, tenant_id, po_id)
    return payables.list_payments(db, tenant_id, po_id)

@router.get("/{payment_id}", response_model=POPayment)
def read_payment(po_id: int, payment_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return payables.get_payment(db, tenant_id, po_id, payment_id)

@router.put("/{payment_id}", response_model=POPaymentResult)
def update_payment(
    po_id: int,
    payment_id: int,
    payment: POPaymentUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin", "payment-group"])),
    tenant_id: str = Depends(get_tenant_id)
):
    """Edit a payment. Its allocations are discarded and the selected mode runs again."""
    changes = payment.model_dump(exclude_unset=True, exclude={"target"})
    result = update_payables_payment(
        db,
        tenant_id=tenant_id,
        po_id=po_id,
        payment_id=payment_id,
        target=payment.target,
        changed_by=get_user_identifier(user),
        changes=changes,
    )
    return to_payment_result(result)

@router.delete("/{payment_id}", response_model=List[DebtSnapshot])
def delete_payment(
    po_id: int,
    payment_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin", "payment-group"])),
    tenant_id: str = Depends(get_tenant_id)
):
    """Delete a payment. Returns the refreshed state of the schedules it was paying."""
    snapshots = delete_payables_payment(db, tenant_id, po_id, payment_id, get_user_identifier(user))
    return [DebtSnapshot.model_validate(snap) for snap in snapshots]
