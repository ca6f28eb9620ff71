from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import AuditMixin

class PurchaseOrderStatus(enum.Enum):
    DRAFT = "Draft"
    APPROVED = "Approved"
    RECEIVED = "Received"
    CANCELLED = "Cancelled"

class PurchaseOrder(Base, AuditMixin):
    __tablename__ = "purchase_orders"
    __table_args__ = (UniqueConstraint('tenant_id', 'po_number', name='_tenant_po_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    po_number = Column(Integer, index=True) # Tenant-specific sequential number
    vendor_id = Column(Integer, ForeignKey("business_partners.id"), nullable=False)
    order_date = Column(Date, nullable=False)
    total_amount = Column(Numeric(14, 3), default=0, nullable=False)
    status = Column(Enum(PurchaseOrderStatus), default=PurchaseOrderStatus.DRAFT, nullable=False)
    notes = Column(Text, nullable=True)
    tenant_id = Column(String, index=True)

    # Relationships
    vendor = relationship("BusinessPartner", back_populates="purchase_orders", foreign_keys=[vendor_id])
    schedules = relationship("POPaymentSchedule", back_populates="purchase_order", order_by="POPaymentSchedule.display_order")
    payments = relationship("POPayment", back_populates="purchase_order")
