from sqlalchemy import Column, Integer, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class POPaymentAllocation(Base, TimestampMixin):
    """The part of a supplier payment applied to one schedule entry."""
    __tablename__ = "po_payment_allocations"

    id = Column(Integer, primary_key=True, index=True)
    payment_id = Column(Integer, ForeignKey("po_payments.id"), nullable=False, index=True)
    schedule_id = Column(Integer, ForeignKey("po_payment_schedules.id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(Numeric(14, 3), nullable=False)

    # Relationships
    payment = relationship("POPayment", back_populates="allocations")
    schedule = relationship("POPaymentSchedule", back_populates="allocations")
