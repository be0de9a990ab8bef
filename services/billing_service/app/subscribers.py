"""Subscriber accounts and their plan assignments."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .plans import Plan

logger = logging.getLogger("billing.subscribers")


class SubscriberStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class PlanChanged:
    """Emitted when a subscriber moves to another plan."""

    subscriber_id: int
    subscriber_name: str
    plan_id: int
    plan_name: str

    def __str__(self) -> str:
        return f"{self.subscriber_name} switched to {self.plan_name}"


@dataclass(slots=True)
class Subscriber:
    """A billed account.

    The plan is referenced by id only; plans are shared and resolved through
    the billing service's lookup table.
    """

    id: int
    name: str
    email: str
    plan_id: Optional[int] = None
    status: SubscriberStatus = SubscriberStatus.ACTIVE

    @classmethod
    def on_plan(cls, subscriber_id: int, name: str, email: str, plan: Plan) -> "Subscriber":
        return cls(id=subscriber_id, name=name, email=email, plan_id=plan.id)

    @property
    def is_active(self) -> bool:
        return self.status is SubscriberStatus.ACTIVE

    def subscribe(self, plan: Plan) -> None:
        self.plan_id = plan.id
        self.status = SubscriberStatus.ACTIVE

    def change_plan(self, plan: Plan) -> PlanChanged:
        self.plan_id = plan.id
        event = PlanChanged(
            subscriber_id=self.id,
            subscriber_name=self.name,
            plan_id=plan.id,
            plan_name=plan.name,
        )
        logger.info("%s", event, extra={"subscriber_id": self.id, "plan_id": plan.id})
        return event

    def suspend(self) -> None:
        self.status = SubscriberStatus.SUSPENDED

    def cancel(self) -> None:
        self.status = SubscriberStatus.CANCELLED


__all__ = ["PlanChanged", "Subscriber", "SubscriberStatus"]
