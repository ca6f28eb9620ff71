from sqlalchemy import Column, Integer, Numeric, Date, String, ForeignKey, Text
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class SalesPayment(Base, TimestampMixin):
    """A customer payment. Immutable once recorded."""
    __tablename__ = "sales_payments"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Numeric(14, 3), nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_method = Column(String, nullable=False)  # e.g. "cash", "transfer", "bank_transfer"
    note = Column(Text, nullable=True)
    customer_id = Column(Integer, ForeignKey("business_partners.id"), nullable=True, index=True)  # aggregate payment
    transaction_id = Column(Integer, ForeignKey("sales_transactions.id"), nullable=True, index=True)  # single-invoice payment
    recorded_by = Column(String, nullable=False)
    tenant_id = Column(String, index=True)

    # Relationships
    customer = relationship("BusinessPartner", foreign_keys=[customer_id])
    transaction = relationship("SalesTransaction", foreign_keys=[transaction_id])
    allocations = relationship("SalesPaymentAllocation", back_populates="payment", order_by="SalesPaymentAllocation.id")
