"""Exceptions raised by the billing domain."""
from __future__ import annotations


class BillingError(Exception):
    """Base class for billing failures."""


class PlanNotFoundError(BillingError, KeyError):
    """Raised when a subscriber references no plan or an unknown plan."""


class SubscriberNotFoundError(BillingError, KeyError):
    """Raised when a subscriber id is not registered."""


class InvoiceNotFoundError(BillingError, KeyError):
    """Raised by explicit invoice lookups for an unknown number."""


class DuplicatePlanError(BillingError, ValueError):
    """Raised when a plan id is already registered."""


class DuplicateSubscriberError(BillingError, ValueError):
    """Raised when a subscriber id is already registered."""


class InvalidDiscountError(BillingError, ValueError):
    """Raised for a non-finite discount, or in strict mode for a negative one."""


class NegativeAmountError(BillingError, ValueError):
    """Raised in strict mode when an invoice amount would drop below zero."""


__all__ = [
    "BillingError",
    "DuplicatePlanError",
    "DuplicateSubscriberError",
    "InvalidDiscountError",
    "InvoiceNotFoundError",
    "NegativeAmountError",
    "PlanNotFoundError",
    "SubscriberNotFoundError",
]
