import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_backoffice.db")
os.environ.setdefault("STRICT_SCHEDULE_BOUND", "false")
os.environ.setdefault("LOG_DIR", "logs")

from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402
import itertools  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from database import Base, SessionLocal, engine, get_db  # noqa: E402
from main import app  # noqa: E402
from models.business_partners import BusinessPartner  # noqa: E402
from models.purchase_orders import PurchaseOrder, PurchaseOrderStatus  # noqa: E402
from services import payment_schedules, receivables  # noqa: E402
from utils.auth_utils import get_current_user  # noqa: E402

TENANT = "tenant-a"
USER = {"email": "cashier@example.com", "cognito:groups": ["admin"]}


@pytest.fixture()
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_user] = lambda: USER
    test_client = TestClient(app)
    test_client.headers.update({"X-Tenant-ID": TENANT})
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_customer(db):
    def factory(name="Walk-in Customer", tenant_id=TENANT):
        customer = BusinessPartner(name=name, tenant_id=tenant_id, is_customer=True)
        db.add(customer)
        db.commit()
        return customer
    return factory


@pytest.fixture()
def make_transaction(db):
    invoice_numbers = itertools.count(1)

    def factory(customer, credit, cash=Decimal("0"), created_at=None, tenant_id=TENANT):
        credit = Decimal(str(credit))
        cash = Decimal(str(cash))
        txn = receivables.create_transaction(
            db,
            tenant_id=tenant_id,
            invoice_no=f"INV-{next(invoice_numbers):04d}",
            total=cash + credit,
            cash=cash,
            credit=credit,
            created_by=USER["email"],
            customer_id=customer.id if customer else None,
        )
        if created_at is not None:
            txn.created_at = created_at
        db.commit()
        return txn
    return factory


@pytest.fixture()
def make_purchase_order(db):
    po_numbers = itertools.count(1)

    def factory(total_amount, status=PurchaseOrderStatus.APPROVED, tenant_id=TENANT):
        vendor = BusinessPartner(name="Acme Supplies", tenant_id=tenant_id, is_vendor=True, is_customer=False)
        db.add(vendor)
        db.flush()
        po = PurchaseOrder(
            po_number=next(po_numbers),
            vendor_id=vendor.id,
            order_date=date(2026, 1, 5),
            total_amount=Decimal(str(total_amount)),
            status=status,
            tenant_id=tenant_id,
            created_by=USER["email"],
        )
        db.add(po)
        db.commit()
        return po
    return factory


@pytest.fixture()
def make_schedule(db):
    def factory(po, amount, due_date=date(2026, 2, 1), tenant_id=TENANT):
        return payment_schedules.create_schedule(
            db,
            tenant_id=tenant_id,
            po_id=po.id,
            due_date=due_date,
            amount=Decimal(str(amount)),
            user_id=USER["email"],
        )
    return factory
