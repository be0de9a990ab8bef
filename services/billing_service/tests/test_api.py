from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from services.billing_service.app.config import Settings
from services.billing_service.app.main import create_app


@pytest.fixture
def app(settings, clock):
    return create_app(settings=settings, clock=clock)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def seeded(client: TestClient) -> TestClient:
    plans = [
        {"id": 1, "name": "Basic Monthly", "monthly_price": "500", "features": ["A"], "trial_days": 7},
        {"id": 2, "name": "Premium Annual", "monthly_price": "1000", "kind": "annual", "trial_days": 14},
    ]
    for plan in plans:
        assert client.post("/billing/plans", json=plan).status_code == 201
    subscribers = [
        {"id": 101, "name": "Alice", "email": "alice@mail.com", "plan_id": 1},
        {"id": 102, "name": "Bob", "email": "bob@mail.com", "plan_id": 2},
    ]
    for subscriber in subscribers:
        assert client.post("/billing/subscribers", json=subscriber).status_code == 201
    return client


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert "X-Correlation-ID" in response.headers


def test_plans_expose_computed_amount(seeded: TestClient) -> None:
    response = seeded.get("/billing/plans")

    assert response.status_code == 200
    amounts = {item["id"]: Decimal(item["amount"]) for item in response.json()}
    assert amounts == {1: Decimal("500"), 2: Decimal("10800")}


def test_plan_rejects_negative_price(client: TestClient) -> None:
    response = client.post("/billing/plans", json={"id": 9, "name": "Bad", "monthly_price": "-1"})

    assert response.status_code == 422


def test_subscriber_requires_existing_plan(client: TestClient) -> None:
    response = client.post(
        "/billing/subscribers",
        json={"id": 1, "name": "Nobody", "email": "n@mail.com", "plan_id": 42},
    )

    assert response.status_code == 404


def test_invoice_lifecycle(seeded: TestClient) -> None:
    first = seeded.post("/billing/invoices", json={"subscriber_id": 101})
    second = seeded.post(
        "/billing/invoices", json={"subscriber_id": 102, "prorated": True, "discount": "100"}
    )

    assert first.status_code == 201
    assert first.json()["invoice_no"] == 100
    assert first.json()["state"] == "pending"
    assert second.json()["invoice_no"] == 101
    assert Decimal(second.json()["amount"]) == Decimal("5300")

    payment = seeded.post("/billing/invoices/100/payment")
    assert payment.status_code == 200
    assert payment.json() == {"invoice_no": 100, "state": "paid", "message": "Invoice 100 marked as Paid."}

    sweep = seeded.post("/billing/overdues/check")
    assert sweep.json() == {"flagged": []}

    revenue = seeded.get("/billing/reports/revenue").json()
    assert Decimal(revenue["total"]) == Decimal("500")
    assert revenue["paid_invoices"] == 1
    assert revenue["message"] == "Total Revenue Collected: 500.00"

    listing = seeded.get("/billing/invoices").json()
    assert [(item["invoice_no"], item["state"]) for item in listing] == [(100, "paid"), (101, "pending")]


def test_payment_for_unknown_invoice_is_404(seeded: TestClient) -> None:
    response = seeded.post("/billing/invoices/777/payment")

    assert response.status_code == 404
    assert response.json()["detail"] == "Invoice not found."


def test_overdue_sweep_uses_injected_clock(seeded: TestClient, clock) -> None:
    seeded.post("/billing/invoices", json={"subscriber_id": 101})
    clock.advance(days=8)

    assert seeded.post("/billing/overdues/check").json() == {"flagged": [100]}
    assert seeded.post("/billing/overdues/check").json() == {"flagged": []}
    assert seeded.get("/billing/invoices").json()[0]["state"] == "overdue"


def test_invoice_for_unknown_subscriber_is_404(seeded: TestClient) -> None:
    response = seeded.post("/billing/invoices", json={"subscriber_id": 999})

    assert response.status_code == 404


def test_strict_mode_maps_rejections_to_422(clock) -> None:
    settings = Settings(service_name="billing-service-tests", strict_amounts=True, log_json=False)
    client = TestClient(create_app(settings=settings, clock=clock))
    client.post("/billing/plans", json={"id": 1, "name": "Basic", "monthly_price": "500"})
    client.post(
        "/billing/subscribers", json={"id": 101, "name": "Alice", "email": "a@mail.com", "plan_id": 1}
    )

    response = client.post("/billing/invoices", json={"subscriber_id": 101, "discount": "900"})

    assert response.status_code == 422
    assert client.get("/billing/invoices").json() == []


def test_change_plan_and_status_transitions(seeded: TestClient) -> None:
    change = seeded.post("/billing/subscribers/101/plan", json={"plan_id": 2})
    assert change.status_code == 200
    assert change.json()["message"] == "Alice switched to Premium Annual"

    invoice = seeded.post("/billing/invoices", json={"subscriber_id": 101}).json()
    assert Decimal(invoice["amount"]) == Decimal("10800")

    assert seeded.post("/billing/subscribers/101/suspend").json()["status"] == "suspended"
    assert seeded.post("/billing/subscribers/101/cancel").json()["status"] == "cancelled"
    assert seeded.get("/billing/subscribers/101").json()["plan_id"] == 2
    assert seeded.post("/billing/subscribers/404/suspend").status_code == 404
    assert seeded.post("/billing/subscribers/101/plan", json={"plan_id": 77}).status_code == 404


def test_metrics_endpoint_reports_billing_counters(seeded: TestClient) -> None:
    seeded.post("/billing/invoices", json={"subscriber_id": 101})

    response = seeded.get("/metrics")

    assert response.status_code == 200
    assert "billing_invoices_generated_total" in response.text


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_metrics_count_unknown_payments_and_overdue_transitions(seeded: TestClient, clock) -> None:
    not_found_before = _sample("billing_payments_recorded_total", {"outcome": "not_found"})
    paid_before = _sample("billing_payments_recorded_total", {"outcome": "paid"})
    overdue_before = _sample("billing_invoices_overdue_total")

    seeded.post("/billing/invoices", json={"subscriber_id": 101})
    seeded.post("/billing/invoices", json={"subscriber_id": 102})
    seeded.post("/billing/invoices/100/payment")
    seeded.post("/billing/invoices/555/payment")
    clock.advance(days=8)
    seeded.post("/billing/overdues/check")
    seeded.post("/billing/overdues/check")

    assert _sample("billing_payments_recorded_total", {"outcome": "not_found"}) == not_found_before + 1
    assert _sample("billing_payments_recorded_total", {"outcome": "paid"}) == paid_before + 1
    assert _sample("billing_invoices_overdue_total") == overdue_before + 1

    exposition = seeded.get("/metrics").text
    assert 'billing_payments_recorded_total{outcome="not_found"}' in exposition
    assert "billing_invoices_overdue_total" in exposition


def test_duplicate_plan_is_a_conflict(seeded: TestClient) -> None:
    response = seeded.post(
        "/billing/plans", json={"id": 1, "name": "Basic Monthly", "monthly_price": "9999"}
    )

    assert response.status_code == 409
    invoice = seeded.post("/billing/invoices", json={"subscriber_id": 101}).json()
    assert Decimal(invoice["amount"]) == Decimal("500")


def test_duplicate_subscriber_is_a_conflict(seeded: TestClient) -> None:
    response = seeded.post(
        "/billing/subscribers",
        json={"id": 101, "name": "Mallory", "email": "mallory@mail.com", "plan_id": 2},
    )

    assert response.status_code == 409
    subscriber = seeded.get("/billing/subscribers/101").json()
    assert (subscriber["name"], subscriber["plan_id"]) == ("Alice", 1)


def test_non_finite_discount_is_unprocessable(seeded: TestClient) -> None:
    response = seeded.post("/billing/invoices", json={"subscriber_id": 101, "discount": "NaN"})

    assert response.status_code == 422
    assert seeded.get("/billing/invoices").json() == []
