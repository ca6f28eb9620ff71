from sqlalchemy import Column, Integer, String, Text, Boolean
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class BusinessPartner(Base, TimestampMixin):
    """A customer (owes on sales transactions) or vendor (is owed on purchase orders)."""
    __tablename__ = "business_partners"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    is_vendor = Column(Boolean, default=False, nullable=False)
    is_customer = Column(Boolean, default=True, nullable=False)

    # Relationships
    purchase_orders = relationship("PurchaseOrder", back_populates="vendor", foreign_keys="PurchaseOrder.vendor_id")
    sales_transactions = relationship("SalesTransaction", back_populates="customer", foreign_keys="SalesTransaction.customer_id")
