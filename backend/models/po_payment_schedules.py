from sqlalchemy import Column, Integer, Numeric, Date, ForeignKey, Text
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class POPaymentSchedule(Base, TimestampMixin):
    """One installment of a purchase order. Payables debt instance."""
    __tablename__ = "po_payment_schedules"

    id = Column(Integer, primary_key=True, index=True)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=False, index=True)
    due_date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 3), nullable=False)
    note = Column(Text, nullable=True)
    display_order = Column(Integer, default=0, nullable=False)

    # Relationships
    purchase_order = relationship("PurchaseOrder", back_populates="schedules")
    allocations = relationship("POPaymentAllocation", back_populates="schedule")

    @property
    def amount_owed(self):
        return self.amount
