"""initial payment allocation schema

Revision ID: 1a2f0c9d3e41
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '1a2f0c9d3e41'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(14, 3)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def _soft_delete():
    return [
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'app_config',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('value', sa.String(length=255), nullable=False),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('name', 'tenant_id', name='_app_config_name_tenant_uc'),
    )
    op.create_index('ix_app_config_id', 'app_config', ['id'])
    op.create_index('ix_app_config_name', 'app_config', ['name'])
    op.create_index('ix_app_config_tenant_id', 'app_config', ['tenant_id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
    )
    op.create_index('ix_audit_log_id', 'audit_log', ['id'])
    op.create_index('ix_audit_log_tenant_id', 'audit_log', ['tenant_id'])

    op.create_table(
        'business_partners',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('is_vendor', sa.Boolean(), nullable=False),
        sa.Column('is_customer', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_business_partners_id', 'business_partners', ['id'])
    op.create_index('ix_business_partners_tenant_id', 'business_partners', ['tenant_id'])

    op.create_table(
        'sales_transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('invoice_no', sa.String(), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('business_partners.id'), nullable=True),
        sa.Column('total', MONEY, nullable=False),
        sa.Column('cash', MONEY, nullable=False),
        sa.Column('credit', MONEY, nullable=False),
        sa.Column('payment_status', sa.Enum('UNPAID', 'PARTIAL', 'PAID', name='debtstatus'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'invoice_no', name='_tenant_invoice_no_uc'),
    )
    op.create_index('ix_sales_transactions_id', 'sales_transactions', ['id'])
    op.create_index('ix_sales_transactions_customer_id', 'sales_transactions', ['customer_id'])
    op.create_index('ix_sales_transactions_tenant_id', 'sales_transactions', ['tenant_id'])

    op.create_table(
        'sales_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('payment_method', sa.String(), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('business_partners.id'), nullable=True),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('sales_transactions.id'), nullable=True),
        sa.Column('recorded_by', sa.String(), nullable=False),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_sales_payments_id', 'sales_payments', ['id'])
    op.create_index('ix_sales_payments_customer_id', 'sales_payments', ['customer_id'])
    op.create_index('ix_sales_payments_transaction_id', 'sales_payments', ['transaction_id'])
    op.create_index('ix_sales_payments_tenant_id', 'sales_payments', ['tenant_id'])

    op.create_table(
        'sales_payment_allocations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('payment_id', sa.Integer(), sa.ForeignKey('sales_payments.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('sales_transactions.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_sales_payment_allocations_id', 'sales_payment_allocations', ['id'])
    op.create_index('ix_sales_payment_allocations_payment_id', 'sales_payment_allocations', ['payment_id'])
    op.create_index('ix_sales_payment_allocations_transaction_id', 'sales_payment_allocations', ['transaction_id'])

    op.create_table(
        'purchase_orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('po_number', sa.Integer(), nullable=True),
        sa.Column('vendor_id', sa.Integer(), sa.ForeignKey('business_partners.id'), nullable=False),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('total_amount', MONEY, nullable=False),
        sa.Column('status', sa.Enum('DRAFT', 'APPROVED', 'RECEIVED', 'CANCELLED', name='purchaseorderstatus'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        *_soft_delete(),
        sa.UniqueConstraint('tenant_id', 'po_number', name='_tenant_po_number_uc'),
    )
    op.create_index('ix_purchase_orders_id', 'purchase_orders', ['id'])
    op.create_index('ix_purchase_orders_po_number', 'purchase_orders', ['po_number'])
    op.create_index('ix_purchase_orders_tenant_id', 'purchase_orders', ['tenant_id'])

    op.create_table(
        'po_payment_schedules',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('purchase_order_id', sa.Integer(), sa.ForeignKey('purchase_orders.id'), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_po_payment_schedules_id', 'po_payment_schedules', ['id'])
    op.create_index('ix_po_payment_schedules_purchase_order_id', 'po_payment_schedules', ['purchase_order_id'])

    op.create_table(
        'po_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('purchase_order_id', sa.Integer(), sa.ForeignKey('purchase_orders.id'), nullable=False),
        sa.Column('schedule_id', sa.Integer(), sa.ForeignKey('po_payment_schedules.id'), nullable=True),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('payment_method', sa.String(), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('recorded_by', sa.String(), nullable=False),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index('ix_po_payments_id', 'po_payments', ['id'])
    op.create_index('ix_po_payments_purchase_order_id', 'po_payments', ['purchase_order_id'])
    op.create_index('ix_po_payments_tenant_id', 'po_payments', ['tenant_id'])

    op.create_table(
        'po_payment_allocations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('payment_id', sa.Integer(), sa.ForeignKey('po_payments.id'), nullable=False),
        sa.Column('schedule_id', sa.Integer(), sa.ForeignKey('po_payment_schedules.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_po_payment_allocations_id', 'po_payment_allocations', ['id'])
    op.create_index('ix_po_payment_allocations_payment_id', 'po_payment_allocations', ['payment_id'])
    op.create_index('ix_po_payment_allocations_schedule_id', 'po_payment_allocations', ['schedule_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('po_payment_allocations')
    op.drop_table('po_payments')
    op.drop_table('po_payment_schedules')
    op.drop_table('purchase_orders')
    op.drop_table('sales_payment_allocations')
    op.drop_table('sales_payments')
    op.drop_table('sales_transactions')
    op.drop_table('business_partners')
    op.drop_table('audit_log')
    op.drop_table('app_config')
    sa.Enum(name='purchaseorderstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='debtstatus').drop(op.get_bind(), checkfirst=True)
