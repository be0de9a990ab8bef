"""Billing plans and their pricing rules."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable

MONTHS_PER_YEAR = 12
ANNUAL_DISCOUNT = Decimal("0.10")


class PlanKind(str, Enum):
    """Billing cadence of a plan."""

    MONTHLY = "monthly"
    ANNUAL = "annual"


def _monthly_amount(monthly_price: Decimal) -> Decimal:
    return monthly_price


def _annual_amount(monthly_price: Decimal) -> Decimal:
    return monthly_price * MONTHS_PER_YEAR * (1 - ANNUAL_DISCOUNT)


_PRICING: dict[PlanKind, Callable[[Decimal], Decimal]] = {
    PlanKind.MONTHLY: _monthly_amount,
    PlanKind.ANNUAL: _annual_amount,
}


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce ``value`` without inheriting binary float noise."""

    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True, slots=True)
class Plan:
    """Immutable billing template."""

    id: int
    name: str
    monthly_price: Decimal
    features: tuple[str, ...] = field(default_factory=tuple)
    trial_days: int = 0
    kind: PlanKind = PlanKind.MONTHLY

    def __post_init__(self) -> None:
        price = to_decimal(self.monthly_price)
        if price < 0:
            raise ValueError("monthly price must be non-negative")
        if self.trial_days < 0:
            raise ValueError("trial days must be non-negative")
        object.__setattr__(self, "monthly_price", price)
        object.__setattr__(self, "features", tuple(self.features))
        object.__setattr__(self, "kind", PlanKind(self.kind))

    def compute_amount(self) -> Decimal:
        """Amount billed for one cycle of this plan."""

        return _PRICING[self.kind](self.monthly_price)

    def __str__(self) -> str:
        return f"Plan: {self.name} | Price: {self.monthly_price} | Trial: {self.trial_days} days"


def monthly_plan(
    plan_id: int,
    name: str,
    monthly_price: Decimal | int | float | str,
    features: Iterable[str] = (),
    trial_days: int = 0,
) -> Plan:
    return Plan(plan_id, name, to_decimal(monthly_price), tuple(features), trial_days, PlanKind.MONTHLY)


def annual_plan(
    plan_id: int,
    name: str,
    monthly_price: Decimal | int | float | str,
    features: Iterable[str] = (),
    trial_days: int = 0,
) -> Plan:
    return Plan(plan_id, name, to_decimal(monthly_price), tuple(features), trial_days, PlanKind.ANNUAL)


__all__ = [
    "ANNUAL_DISCOUNT",
    "MONTHS_PER_YEAR",
    "Plan",
    "PlanKind",
    "annual_plan",
    "monthly_plan",
    "to_decimal",
]
