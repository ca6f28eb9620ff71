from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin
from services.debt_status import DebtStatus

class SalesTransaction(Base, TimestampMixin):
    """A completed sale. Whatever was not paid in cash is extended as credit
    and becomes a receivable debt instance."""
    __tablename__ = "sales_transactions"
    __table_args__ = (UniqueConstraint('tenant_id', 'invoice_no', name='_tenant_invoice_no_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    invoice_no = Column(String, nullable=False)
    customer_id = Column(Integer, ForeignKey("business_partners.id"), nullable=True, index=True)
    total = Column(Numeric(14, 3), nullable=False)
    cash = Column(Numeric(14, 3), default=0, nullable=False)
    credit = Column(Numeric(14, 3), default=0, nullable=False)  # fixed at creation
    payment_status = Column(Enum(DebtStatus), default=DebtStatus.UNPAID, nullable=False)
    notes = Column(Text, nullable=True)
    tenant_id = Column(String, index=True)

    # Relationships
    customer = relationship("BusinessPartner", back_populates="sales_transactions", foreign_keys=[customer_id])
    allocations = relationship("SalesPaymentAllocation", back_populates="transaction")

    @property
    def amount_owed(self):
        return self.credit
