from models.app_config import AppConfig
from models.audit_log import AuditLog
from models.business_partners import BusinessPartner
from models.sales_transactions import SalesTransaction
from models.sales_payments import SalesPayment
from models.sales_payment_allocations import SalesPaymentAllocation
from models.purchase_orders import PurchaseOrder, PurchaseOrderStatus
from models.po_payment_schedules import POPaymentSchedule
from models.payments import POPayment
from models.po_payment_allocations import POPaymentAllocation

__all__ = ['AppConfig', 'AuditLog', 'BusinessPartner', 'POPayment', 'POPaymentAllocation', 'POPaymentSchedule', 'PurchaseOrder', 'PurchaseOrderStatus', 'SalesPayment', 'SalesPaymentAllocation', 'SalesTransaction',]
