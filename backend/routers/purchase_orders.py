# backend/routers/purchase_orders.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from utils.tenancy import get_tenant_id

from database import get_db
from routers.po_payment_schedules import to_schedule_out
from schemas.purchase_orders import POPaymentSummary
from services.payables import po_payment_summary

router = APIRouter(prefix="/purchase-orders", tags=["Purchase Orders"])

@router.get("/{po_id}/payment-summary", response_model=POPaymentSummary)
def get_payment_summary(po_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    """Total, paid, remaining and status of a purchase order, plus its schedules."""
    summary = po_payment_summary(db, tenant_id, po_id)
    return POPaymentSummary(
        purchase_order_id=summary.purchase_order_id,
        total_amount=summary.total_amount,
        total_paid=summary.total_paid,
        remaining_debt=summary.remaining_debt,
        payment_status=summary.payment_status,
        schedules=[to_schedule_out(entry) for entry in summary.schedules],
    )
