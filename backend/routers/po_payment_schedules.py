from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from utils.auth_utils import get_user_identifier, require_group
from utils.tenancy import get_tenant_id

from database import get_db
from schemas.po_payment_schedules import (
    POPaymentSchedule,
    POPaymentScheduleCreate,
    POPaymentScheduleUpdate,
)
from services import payment_schedules
from services.payables import ScheduleStatus

router = APIRouter(prefix="/purchase-orders/{po_id}/payment-schedules", tags=["PO Payment Schedules"])


def to_schedule_out(entry: ScheduleStatus) -> POPaymentSchedule:
    schedule, snap = entry.schedule, entry.snapshot
    return POPaymentSchedule(
        id=schedule.id,
        purchase_order_id=schedule.purchase_order_id,
        due_date=schedule.due_date,
        amount=schedule.amount,
        note=schedule.note,
        display_order=schedule.display_order,
        total_paid=snap.total_paid,
        remaining=snap.remaining,
        status=snap.status,
    )

@router.get("/", response_model=List[POPaymentSchedule])
def list_schedules(po_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    """Installments of a purchase order with their payment state, in display order."""
    return [to_schedule_out(entry) for entry in payment_schedules.list_schedules(db, tenant_id, po_id)]

@router.post("/", response_model=POPaymentSchedule, status_code=status.HTTP_201_CREATED)
def create_schedule(
    po_id: int,
    schedule: POPaymentScheduleCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin", "payment-group"])),
    tenant_id: str = Depends(get_tenant_id)
):
    db_schedule = payment_schedules.create_schedule(
        db,
        tenant_id=tenant_id,
        po_id=po_id,
        due_date=schedule.due_date,
        amount=schedule.amount,
        user_id=get_user_identifier(user),
        note=schedule.note,
        display_order=schedule.display_order,
    )
    return to_schedule_out(payment_schedules.schedule_status(db, tenant_id, po_id, db_schedule.id))

@router.put("/{schedule_id}", response_model=POPaymentSchedule)
def update_schedule(
    po_id: int,
    schedule_id: int,
    schedule: POPaymentScheduleUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin", "payment-group"])),
    tenant_id: str = Depends(get_tenant_id)
):
    payment_schedules.update_schedule(
        db, tenant_id, po_id, schedule_id, schedule.model_dump(exclude_unset=True), get_user_identifier(user)
    )
    return to_schedule_out(payment_schedules.schedule_status(db, tenant_id, po_id, schedule_id))

@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    po_id: int,
    schedule_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin", "payment-group"])),
    tenant_id: str = Depends(get_tenant_id)
):
    payment_schedules.delete_schedule(db, tenant_id, po_id, schedule_id, get_user_identifier(user))

@router.get("/{schedule_id}/status", response_model=POPaymentSchedule)
def get_schedule_status(po_id: int, schedule_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return to_schedule_out(payment_schedules.schedule_status(db, tenant_id, po_id, schedule_id))
