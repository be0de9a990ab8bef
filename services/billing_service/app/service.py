"""Invoice orchestration over in-memory plans, subscribers and invoices."""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Iterator, Optional

from .config import Settings, get_settings
from .errors import (
    DuplicatePlanError,
    DuplicateSubscriberError,
    InvalidDiscountError,
    InvoiceNotFoundError,
    NegativeAmountError,
    PlanNotFoundError,
    SubscriberNotFoundError,
)
from .invoices import Invoice, InvoiceState
from .metrics import INVOICES_GENERATED, INVOICES_OVERDUE, PAYMENTS_RECORDED
from .plans import Plan, to_decimal
from .reporting import PaymentOutcome, PaymentResult, RevenueReport
from .subscribers import PlanChanged, Subscriber

logger = logging.getLogger("billing.service")

Clock = Callable[[], datetime]

PRORATION_FACTOR = Decimal("0.5")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BillingService:
    """Owns the invoice ledger and the plan/subscriber lookup tables.

    One instance is created per process (or per application) and passed
    around explicitly. Every read and write of the ledger happens under a
    single re-entrant lock.
    """

    def __init__(self, settings: Settings | None = None, *, clock: Clock | None = None) -> None:
        self._settings = settings or get_settings()
        self._clock: Clock = clock or utc_now
        self._lock = threading.RLock()
        self._plans: dict[int, Plan] = {}
        self._subscribers: dict[int, Subscriber] = {}
        self._invoices: list[Invoice] = []
        self._next_invoice_no = self._settings.invoice_start_number

    @property
    def settings(self) -> Settings:
        return self._settings

    # Plans and subscribers

    def register_plan(self, plan: Plan) -> Plan:
        with self._lock:
            if plan.id in self._plans:
                raise DuplicatePlanError(f"plan {plan.id} is already registered")
            self._plans[plan.id] = plan
            return plan

    def get_plan(self, plan_id: Optional[int]) -> Plan:
        with self._lock:
            plan = self._plans.get(plan_id) if plan_id is not None else None
        if plan is None:
            raise PlanNotFoundError(plan_id)
        return plan

    def plans(self) -> list[Plan]:
        with self._lock:
            return list(self._plans.values())

    def register_subscriber(self, subscriber: Subscriber) -> Subscriber:
        with self._lock:
            if subscriber.id in self._subscribers:
                raise DuplicateSubscriberError(f"subscriber {subscriber.id} is already registered")
            self._subscribers[subscriber.id] = subscriber
            return subscriber

    def get_subscriber(self, subscriber_id: int) -> Subscriber:
        with self._lock:
            subscriber = self._subscribers.get(subscriber_id)
        if subscriber is None:
            raise SubscriberNotFoundError(subscriber_id)
        return subscriber

    def subscribers(self) -> list[Subscriber]:
        with self._lock:
            return list(self._subscribers.values())

    def change_plan(self, subscriber_id: int, plan_id: int) -> PlanChanged:
        with self._lock:
            subscriber = self.get_subscriber(subscriber_id)
            return subscriber.change_plan(self.get_plan(plan_id))

    # Invoices

    def generate_invoice(
        self,
        subscriber: Subscriber,
        prorated: bool = False,
        discount: Decimal | int | float | str = 0,
    ) -> Invoice:
        """Bill ``subscriber`` for one cycle of its current plan.

        Proration halves the plan amount and a positive ``discount`` is then
        subtracted. Nothing stops the result from going negative unless
        ``strict_amounts`` is enabled.
        """

        discount = to_decimal(discount)
        if not discount.is_finite():
            raise InvalidDiscountError(f"discount must be a finite number, got {discount}")
        with self._lock:
            plan = self.get_plan(subscriber.plan_id)
            amount = plan.compute_amount()
            if prorated:
                amount *= PRORATION_FACTOR
            if self._settings.strict_amounts and discount < 0:
                raise InvalidDiscountError(f"discount must be non-negative, got {discount}")
            if discount > 0:
                amount -= discount
            if self._settings.strict_amounts and amount < 0:
                raise NegativeAmountError(
                    f"invoice amount for subscriber {subscriber.id} would be {amount}"
                )

            invoice = Invoice(
                invoice_no=self._next_invoice_no,
                subscriber_id=subscriber.id,
                amount=amount,
                due_date=self._clock() + timedelta(days=self._settings.payment_terms_days),
            )
            self._next_invoice_no += 1
            self._invoices.append(invoice)

        INVOICES_GENERATED.labels(plan.kind.value).inc()
        logger.info(
            "Generated invoice %s for subscriber %s",
            invoice.invoice_no,
            subscriber.id,
            extra={"amount": str(amount), "prorated": prorated, "plan_id": plan.id},
        )
        return invoice

    def get_invoice(self, invoice_no: int) -> Invoice:
        with self._lock:
            for invoice in self._invoices:
                if invoice.invoice_no == invoice_no:
                    return invoice
        raise InvoiceNotFoundError(invoice_no)

    def invoices_for(self, subscriber_id: int) -> list[Invoice]:
        with self._lock:
            return [invoice for invoice in self._invoices if invoice.subscriber_id == subscriber_id]

    def record_payment(self, invoice_no: int) -> PaymentResult:
        """Mark ``invoice_no`` as paid; an unknown number is reported, not raised."""

        with self._lock:
            try:
                invoice = self.get_invoice(invoice_no)
            except InvoiceNotFoundError:
                result = PaymentResult(invoice_no, PaymentOutcome.NOT_FOUND)
            else:
                invoice.mark_paid()
                result = PaymentResult(invoice_no, PaymentOutcome.PAID, invoice)

        PAYMENTS_RECORDED.labels(result.outcome.value).inc()
        if result.found:
            logger.info("Invoice %s marked as paid", invoice_no)
        else:
            logger.warning("Payment recorded against unknown invoice %s", invoice_no)
        return result

    def check_overdues(self) -> list[Invoice]:
        """Flag every pending invoice whose due date has passed.

        Returns only the invoices changed by this call, so a second sweep at
        the same instant returns an empty list.
        """

        with self._lock:
            now = self._clock()
            flagged: list[Invoice] = []
            for invoice in self._invoices:
                if invoice.state is InvoiceState.PENDING and invoice.is_past_due(now):
                    invoice.mark_overdue()
                    flagged.append(invoice)

        if flagged:
            INVOICES_OVERDUE.inc(len(flagged))
            logger.info(
                "Marked %d invoice(s) overdue",
                len(flagged),
                extra={"invoice_nos": [invoice.invoice_no for invoice in flagged]},
            )
        return flagged

    def revenue_report(self) -> RevenueReport:
        with self._lock:
            paid = [invoice for invoice in self._invoices if invoice.state is InvoiceState.PAID]
        return RevenueReport(
            total=sum((invoice.amount for invoice in paid), Decimal("0")),
            paid_invoices=len(paid),
        )

    def show_invoices(self) -> Iterator[Invoice]:
        """Yield invoices in insertion order from a snapshot taken on first use."""

        with self._lock:
            snapshot = list(self._invoices)
        yield from snapshot


__all__ = ["BillingService", "Clock", "PRORATION_FACTOR", "utc_now"]
