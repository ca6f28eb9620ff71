from decimal import Decimal

from main import app
from utils.auth_utils import get_current_user


def money(value):
    return Decimal(str(value))


def create_sale(client, customer_id, invoice_no, credit, cash="0"):
    response = client.post("/sales-transactions/", json={
        "invoice_no": invoice_no,
        "customer_id": customer_id,
        "total": str(Decimal(credit) + Decimal(cash)),
        "cash": cash,
        "credit": credit,
    })
    assert response.status_code == 201, response.text
    return response.json()


def test_root(client):
    assert client.get("/").status_code == 200


def test_receivables_flow(client, make_customer):
    customer = make_customer("Meena Stores")
    first = create_sale(client, customer.id, "INV-1", "100")
    second = create_sale(client, customer.id, "INV-2", "50")
    assert first["payment_status"] == "unpaid"

    response = client.post("/sales-payments/", json={
        "amount": "120",
        "payment_method": "cash",
        "target": {"mode": "fifo", "customer_id": customer.id},
    })
    assert response.status_code == 201, response.text
    body = response.json()
    assert {a["transaction_id"]: money(a["amount"]) for a in body["payment"]["allocations"]} == {
        first["id"]: Decimal("100"),
        second["id"]: Decimal("20"),
    }
    assert {t["debt_id"]: t["status"] for t in body["transactions"]} == {
        first["id"]: "paid",
        second["id"]: "partial",
    }

    credit = client.get(f"/sales-transactions/{second['id']}/remaining-credit").json()
    assert money(credit["remaining_credit"]) == Decimal("30")
    assert credit["payment_status"] == "partial"

    overview = client.get(f"/customers/{customer.id}/payments").json()
    assert money(overview["outstanding_balance"]) == Decimal("30")
    assert [t["id"] for t in overview["unpaid_transactions"]] == [second["id"]]
    assert [p["id"] for p in overview["payments"]] == [body["payment"]["id"]]

    listed = client.get("/sales-payments/", params={"customer_id": customer.id}).json()
    assert [p["id"] for p in listed] == [body["payment"]["id"]]
    assert client.get(f"/sales-payments/{body['payment']['id']}").json()["recorded_by"] == "cashier@example.com"


def test_receivables_errors(client, make_customer):
    customer = make_customer()
    sale = create_sale(client, customer.id, "INV-9", "100")

    over = client.post("/sales-payments/", json={
        "amount": "150",
        "payment_method": "cash",
        "target": {"mode": "fifo", "customer_id": customer.id},
    })
    assert over.status_code == 400
    assert over.json()["error"] == "PaymentExceedsDebtError"

    mismatch = client.post("/sales-payments/", json={
        "amount": "100",
        "payment_method": "cash",
        "target": {
            "mode": "manual",
            "customer_id": customer.id,
            "allocations": [{"transaction_id": sale["id"], "amount": "90"}],
        },
    })
    assert mismatch.status_code == 400
    assert mismatch.json()["error"] == "AllocationMismatchError"

    missing = client.post("/sales-payments/", json={
        "amount": "10",
        "payment_method": "cash",
        "target": {"mode": "transaction", "transaction_id": 9999},
    })
    assert missing.status_code == 404

    bad_mode = client.post("/sales-payments/", json={
        "amount": "10",
        "payment_method": "cash",
        "target": {"mode": "lifo", "customer_id": customer.id},
    })
    assert bad_mode.status_code == 422

    no_target = client.post("/sales-payments/", json={"amount": "10", "payment_method": "cash"})
    assert no_target.status_code == 422

    assert client.get("/sales-payments/").json() == []
    assert client.get("/sales-transactions/9999/remaining-credit").status_code == 404


def test_sale_totals_must_add_up(client, make_customer):
    customer = make_customer()
    response = client.post("/sales-transactions/", json={
        "invoice_no": "INV-BAD", "customer_id": customer.id, "total": "100", "cash": "10", "credit": "80",
    })
    assert response.status_code == 400


def test_tenant_header_is_required(client):
    del client.headers["X-Tenant-ID"]

    assert client.get("/sales-payments/").status_code == 422


def test_writes_require_payment_group(client, make_customer):
    customer = make_customer()
    app.dependency_overrides[get_current_user] = lambda: {"email": "viewer@example.com", "cognito:groups": ["viewer"]}

    response = client.post("/sales-payments/", json={
        "amount": "10",
        "payment_method": "cash",
        "target": {"mode": "fifo", "customer_id": customer.id},
    })

    assert response.status_code == 403


def test_payables_flow(client, make_purchase_order):
    po = make_purchase_order("1000")
    base = f"/purchase-orders/{po.id}"

    first = client.post(f"{base}/payment-schedules/", json={"due_date": "2026-02-01", "amount": "400"})
    assert first.status_code == 201, first.text
    second = client.post(f"{base}/payment-schedules/", json={"due_date": "2026-03-01", "amount": "600"}).json()
    first = first.json()
    assert (first["display_order"], second["display_order"]) == (0, 1)

    too_much = client.post(f"{base}/payment-schedules/", json={"due_date": "2026-04-01", "amount": "1"})
    assert too_much.status_code == 400
    assert too_much.json()["error"] == "ScheduleExceedsPOTotalError"

    paid = client.post(f"{base}/payments/", json={
        "amount": "400",
        "payment_method": "transfer",
        "target": {"mode": "schedule", "schedule_id": first["id"]},
    })
    assert paid.status_code == 201, paid.text
    payment = paid.json()["payment"]
    assert payment["schedule_id"] == first["id"]

    status = client.get(f"{base}/payment-schedules/{first['id']}/status").json()
    assert status["status"] == "paid"

    blocked = client.delete(f"{base}/payment-schedules/{first['id']}")
    assert blocked.status_code == 409

    below = client.put(f"{base}/payment-schedules/{first['id']}", json={"amount": "300"})
    assert below.status_code == 400
    assert below.json()["error"] == "ScheduleBelowPaidError"

    moved = client.put(f"{base}/payments/{payment['id']}", json={
        "target": {"mode": "schedule", "schedule_id": second["id"]},
    })
    assert moved.status_code == 200, moved.text
    assert moved.json()["payment"]["schedule_id"] == second["id"]

    summary = client.get(f"{base}/payment-summary").json()
    assert money(summary["total_paid"]) == Decimal("400")
    assert money(summary["remaining_debt"]) == Decimal("600")
    assert summary["payment_status"] == "partial"
    assert [s["status"] for s in summary["schedules"]] == ["unpaid", "partial"]

    listed = client.get(f"{base}/payments/").json()
    assert [p["id"] for p in listed] == [payment["id"]]

    deleted = client.delete(f"{base}/payments/{payment['id']}")
    assert deleted.status_code == 200
    assert [money(s["total_paid"]) for s in deleted.json()] == [Decimal("0")]
    assert client.get(f"{base}/payments/{payment['id']}").status_code == 404
    assert client.get(f"{base}/payment-summary").json()["payment_status"] == "unpaid"

    assert client.delete(f"{base}/payment-schedules/{first['id']}").status_code == 204
    assert len(client.get(f"{base}/payment-schedules/").json()) == 1


def test_payables_errors(client, make_purchase_order):
    assert client.get("/purchase-orders/999/payment-summary").status_code == 404

    po = make_purchase_order("100")
    edit_without_target = client.put(f"/purchase-orders/{po.id}/payments/1", json={"amount": "10"})
    assert edit_without_target.status_code == 422

    unknown = client.put(f"/purchase-orders/{po.id}/payments/1", json={"target": {"mode": "none"}})
    assert unknown.status_code == 404


def test_strict_schedule_bound_configuration(client, make_purchase_order):
    po = make_purchase_order("1000")
    base = f"/purchase-orders/{po.id}"
    schedule = client.post(f"{base}/payment-schedules/", json={"due_date": "2026-02-01", "amount": "400"}).json()

    configured = client.put("/configurations/strict_schedule_bound/", json={"value": "true"})
    assert configured.status_code == 200, configured.text
    assert client.get("/configurations/", params={"name": "strict_schedule_bound"}).json()[0]["value"] == "true"

    response = client.post(f"{base}/payments/", json={
        "amount": "450",
        "payment_method": "transfer",
        "target": {"mode": "schedule", "schedule_id": schedule["id"]},
    })
    assert response.status_code == 400
    assert response.json()["error"] == "OverAllocationError"
