"""Invoices and their payment state."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum


class InvoiceState(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Invoice:
    """A single bill issued to a subscriber.

    Only ``state`` can change once the invoice exists; the number, subscriber,
    amount and due date are read-only. The setters below are unconditional;
    which transitions are allowed is decided by :class:`BillingService`.
    """

    __slots__ = ("_invoice_no", "_subscriber_id", "_amount", "_due_date", "state")

    def __init__(
        self,
        invoice_no: int,
        subscriber_id: int,
        amount: Decimal,
        due_date: datetime,
        state: InvoiceState = InvoiceState.PENDING,
    ) -> None:
        self._invoice_no = invoice_no
        self._subscriber_id = subscriber_id
        self._amount = amount
        self._due_date = due_date
        self.state = state

    @property
    def invoice_no(self) -> int:
        return self._invoice_no

    @property
    def subscriber_id(self) -> int:
        return self._subscriber_id

    @property
    def amount(self) -> Decimal:
        return self._amount

    @property
    def due_date(self) -> datetime:
        return self._due_date

    def mark_paid(self) -> None:
        self.state = InvoiceState.PAID

    def mark_overdue(self) -> None:
        self.state = InvoiceState.OVERDUE

    def is_past_due(self, now: datetime) -> bool:
        return now > self._due_date

    def __repr__(self) -> str:
        return (
            f"Invoice(invoice_no={self._invoice_no!r}, subscriber_id={self._subscriber_id!r}, "
            f"amount={self._amount!r}, due_date={self._due_date!r}, state={self.state!r})"
        )

    def __str__(self) -> str:
        return (
            f"Invoice#{self._invoice_no} | Subscriber: {self._subscriber_id} | "
            f"Amount: {self._amount:.2f} | Due: {self._due_date.isoformat(timespec='seconds')} | "
            f"State: {self.state.label}"
        )


__all__ = ["Invoice", "InvoiceState"]
