"""Pydantic models for the billing service API."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .invoices import InvoiceState
from .plans import PlanKind
from .subscribers import SubscriberStatus


class PlanIn(BaseModel):
    id: int
    name: str
    monthly_price: Decimal = Field(..., ge=0)
    features: List[str] = Field(default_factory=list)
    trial_days: int = Field(default=0, ge=0)
    kind: PlanKind = PlanKind.MONTHLY


class PlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    monthly_price: Decimal
    features: List[str]
    trial_days: int
    kind: PlanKind
    amount: Decimal


class SubscriberIn(BaseModel):
    id: int
    name: str
    email: str
    plan_id: int


class SubscriberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    plan_id: Optional[int] = None
    status: SubscriberStatus


class PlanChangeIn(BaseModel):
    plan_id: int


class PlanChangeOut(BaseModel):
    subscriber_id: int
    plan_id: int
    message: str


class InvoiceRequest(BaseModel):
    subscriber_id: int
    prorated: bool = False
    discount: Decimal = Field(default=Decimal("0"))


class InvoiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    invoice_no: int
    subscriber_id: int
    amount: Decimal
    due_date: datetime
    state: InvoiceState


class PaymentOut(BaseModel):
    invoice_no: int
    state: InvoiceState
    message: str


class OverdueSweepOut(BaseModel):
    flagged: List[int]


class RevenueOut(BaseModel):
    total: Decimal
    paid_invoices: int
    message: str
