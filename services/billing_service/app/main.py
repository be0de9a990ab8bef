from __future__ import annotations

import logging
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.routing import APIRouter

from libs.observability.logging import RequestContextMiddleware, configure_logging
from libs.observability.metrics import setup_metrics

from .config import Settings, get_settings
from .errors import (
    BillingError,
    DuplicatePlanError,
    DuplicateSubscriberError,
    PlanNotFoundError,
    SubscriberNotFoundError,
)
from .invoices import Invoice
from .plans import Plan
from .schemas import (
    InvoiceOut,
    InvoiceRequest,
    OverdueSweepOut,
    PaymentOut,
    PlanChangeIn,
    PlanChangeOut,
    PlanIn,
    PlanOut,
    RevenueOut,
    SubscriberIn,
    SubscriberOut,
)
from .service import BillingService, Clock
from .subscribers import Subscriber

logger = logging.getLogger(__name__)


def _plan_out(plan: Plan) -> PlanOut:
    return PlanOut(
        id=plan.id,
        name=plan.name,
        monthly_price=plan.monthly_price,
        features=list(plan.features),
        trial_days=plan.trial_days,
        kind=plan.kind,
        amount=plan.compute_amount(),
    )


def _not_found(exc: BillingError) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{type(exc).__name__}: {exc.args[0]}")


def _conflict(exc: BillingError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(exc))


def _invoice_out(invoice: Invoice) -> InvoiceOut:
    return InvoiceOut(
        invoice_no=invoice.invoice_no,
        subscriber_id=invoice.subscriber_id,
        amount=invoice.amount,
        due_date=invoice.due_date,
        state=invoice.state,
    )


def get_service(request: Request) -> BillingService:
    return request.app.state.billing_service


def _subscriber_or_404(service: BillingService, subscriber_id: int) -> Subscriber:
    try:
        return service.get_subscriber(subscriber_id)
    except SubscriberNotFoundError as exc:
        raise _not_found(exc) from exc


router = APIRouter(prefix="/billing", tags=["billing"])


@router.post("/plans", status_code=201, response_model=PlanOut)
def create_plan(payload: PlanIn, service: BillingService = Depends(get_service)):
    plan = Plan(
        id=payload.id,
        name=payload.name,
        monthly_price=payload.monthly_price,
        features=tuple(payload.features),
        trial_days=payload.trial_days,
        kind=payload.kind,
    )
    try:
        service.register_plan(plan)
    except DuplicatePlanError as exc:
        raise _conflict(exc) from exc
    return _plan_out(plan)


@router.get("/plans", response_model=List[PlanOut])
def list_plans(service: BillingService = Depends(get_service)):
    return [_plan_out(plan) for plan in service.plans()]


@router.post("/subscribers", status_code=201, response_model=SubscriberOut)
def create_subscriber(payload: SubscriberIn, service: BillingService = Depends(get_service)):
    try:
        plan = service.get_plan(payload.plan_id)
    except PlanNotFoundError as exc:
        raise _not_found(exc) from exc
    subscriber = Subscriber.on_plan(payload.id, payload.name, payload.email, plan)
    try:
        return service.register_subscriber(subscriber)
    except DuplicateSubscriberError as exc:
        raise _conflict(exc) from exc


@router.get("/subscribers/{subscriber_id}", response_model=SubscriberOut)
def read_subscriber(subscriber_id: int, service: BillingService = Depends(get_service)):
    return _subscriber_or_404(service, subscriber_id)


@router.post("/subscribers/{subscriber_id}/plan", response_model=PlanChangeOut)
def change_plan(
    subscriber_id: int, payload: PlanChangeIn, service: BillingService = Depends(get_service)
):
    try:
        event = service.change_plan(subscriber_id, payload.plan_id)
    except (SubscriberNotFoundError, PlanNotFoundError) as exc:
        raise _not_found(exc) from exc
    return PlanChangeOut(subscriber_id=event.subscriber_id, plan_id=event.plan_id, message=str(event))


@router.post("/subscribers/{subscriber_id}/suspend", response_model=SubscriberOut)
def suspend_subscriber(subscriber_id: int, service: BillingService = Depends(get_service)):
    subscriber = _subscriber_or_404(service, subscriber_id)
    subscriber.suspend()
    return subscriber


@router.post("/subscribers/{subscriber_id}/cancel", response_model=SubscriberOut)
def cancel_subscriber(subscriber_id: int, service: BillingService = Depends(get_service)):
    subscriber = _subscriber_or_404(service, subscriber_id)
    subscriber.cancel()
    return subscriber


@router.post("/invoices", status_code=201, response_model=InvoiceOut)
def generate_invoice(payload: InvoiceRequest, service: BillingService = Depends(get_service)):
    subscriber = _subscriber_or_404(service, payload.subscriber_id)
    try:
        invoice = service.generate_invoice(
            subscriber, prorated=payload.prorated, discount=payload.discount
        )
    except PlanNotFoundError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _invoice_out(invoice)


@router.get("/invoices", response_model=List[InvoiceOut])
def list_invoices(service: BillingService = Depends(get_service)):
    return [_invoice_out(invoice) for invoice in service.show_invoices()]


@router.post("/invoices/{invoice_no}/payment", response_model=PaymentOut)
def record_payment(invoice_no: int, service: BillingService = Depends(get_service)):
    result = service.record_payment(invoice_no)
    if not result.found:
        raise HTTPException(status_code=404, detail=str(result))
    return PaymentOut(invoice_no=invoice_no, state=result.invoice.state, message=str(result))


@router.post("/overdues/check", response_model=OverdueSweepOut)
def check_overdues(service: BillingService = Depends(get_service)):
    flagged = service.check_overdues()
    return OverdueSweepOut(flagged=[invoice.invoice_no for invoice in flagged])


@router.get("/reports/revenue", response_model=RevenueOut)
def revenue_report(service: BillingService = Depends(get_service)):
    report = service.revenue_report()
    return RevenueOut(total=report.total, paid_invoices=report.paid_invoices, message=str(report))


def create_app(
    settings: Settings | None = None,
    service: BillingService | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.service_name, level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(title="Billing Service", version="0.1.0")
    app.state.billing_service = service or BillingService(settings, clock=clock)
    app.add_middleware(RequestContextMiddleware, service_name=settings.service_name)
    setup_metrics(app, service_name=settings.service_name)
    app.include_router(router)

    @app.get("/health")
    def healthcheck():
        return {"status": "ok"}

    logger.info("Billing service application created")
    return app
