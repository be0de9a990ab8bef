"""Billing counters exported through Prometheus."""
from __future__ import annotations

from libs.observability.metrics import service_counter

INVOICES_GENERATED = service_counter(
    "billing_invoices_generated_total",
    "Invoices generated, by plan kind",
    labelnames=("plan_kind",),
)
PAYMENTS_RECORDED = service_counter(
    "billing_payments_recorded_total",
    "Payment attempts, by outcome",
    labelnames=("outcome",),
)
INVOICES_OVERDUE = service_counter(
    "billing_invoices_overdue_total",
    "Invoices transitioned to overdue",
)
