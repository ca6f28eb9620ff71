from sqlalchemy import Column, Integer, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class SalesPaymentAllocation(Base, TimestampMixin):
    """The part of a customer payment applied to one sales transaction. Append-only."""
    __tablename__ = "sales_payment_allocations"

    id = Column(Integer, primary_key=True, index=True)
    payment_id = Column(Integer, ForeignKey("sales_payments.id", ondelete="RESTRICT"), nullable=False, index=True)
    transaction_id = Column(Integer, ForeignKey("sales_transactions.id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(Numeric(14, 3), nullable=False)

    # Relationships
    payment = relationship("SalesPayment", back_populates="allocations")
    transaction = relationship("SalesTransaction", back_populates="allocations")
