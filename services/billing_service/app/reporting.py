"""Result objects and console rendering for billing operations."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, Iterator, Optional

from .invoices import Invoice


class PaymentOutcome(str, Enum):
    PAID = "paid"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class PaymentResult:
    """Outcome of recording a payment against an invoice number."""

    invoice_no: int
    outcome: PaymentOutcome
    invoice: Optional[Invoice] = None

    @property
    def found(self) -> bool:
        return self.outcome is PaymentOutcome.PAID

    def __str__(self) -> str:
        if self.found:
            return f"Invoice {self.invoice_no} marked as Paid."
        return "Invoice not found."


@dataclass(frozen=True, slots=True)
class RevenueReport:
    total: Decimal
    paid_invoices: int

    def __str__(self) -> str:
        return f"Total Revenue Collected: {self.total:.2f}"


def invoice_lines(invoices: Iterable[Invoice]) -> Iterator[str]:
    for invoice in invoices:
        yield str(invoice)


__all__ = ["PaymentOutcome", "PaymentResult", "RevenueReport", "invoice_lines"]
