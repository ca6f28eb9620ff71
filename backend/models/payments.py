from sqlalchemy import Column, Integer, Numeric, Date, String, ForeignKey, Text
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin

class POPayment(Base, AuditMixin):
    """A payment made to a supplier against a purchase order."""
    __tablename__ = "po_payments"

    id = Column(Integer, primary_key=True, index=True)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=False, index=True)
    schedule_id = Column(Integer, ForeignKey("po_payment_schedules.id"), nullable=True) # set for schedule-direct payments
    amount = Column(Numeric(14, 3), nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_method = Column(String, nullable=False) # e.g., "cash", "transfer", "cheque"
    note = Column(Text, nullable=True)
    recorded_by = Column(String, nullable=False)
    tenant_id = Column(String, index=True)

    # Relationships
    purchase_order = relationship("PurchaseOrder", back_populates="payments")
    schedule = relationship("POPaymentSchedule", foreign_keys=[schedule_id])
    allocations = relationship("POPaymentAllocation", back_populates="payment", order_by="POPaymentAllocation.id")
