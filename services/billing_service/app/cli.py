"""Command line entrypoint printing the billing console report."""

from __future__ import annotations

import argparse
from typing import Callable, Sequence

from libs.observability.logging import configure_logging

from .config import LOG_LEVELS, Settings, get_settings
from .plans import annual_plan, monthly_plan
from .reporting import invoice_lines
from .service import BillingService
from .subscribers import Subscriber

Printer = Callable[[str], None]


def run_demo(service: BillingService, out: Printer = print) -> BillingService:
    """Bill two subscribers, collect one payment and report revenue."""

    basic = service.register_plan(monthly_plan(1, "Basic Monthly", 500, ["Feature A", "Feature B"], 7))
    premium = service.register_plan(
        annual_plan(2, "Premium Annual", 1000, ["Feature X", "Feature Y", "Feature Z"], 14)
    )

    alice = service.register_subscriber(Subscriber.on_plan(101, "Alice", "alice@mail.com", basic))
    bob = service.register_subscriber(Subscriber.on_plan(102, "Bob", "bob@mail.com", premium))

    first = service.generate_invoice(alice)
    service.generate_invoice(bob, prorated=True, discount=100)

    for line in invoice_lines(service.show_invoices()):
        out(line)

    out(str(service.record_payment(first.invoice_no)))
    service.check_overdues()
    out(str(service.revenue_report()))
    return service


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Subscription billing console")
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override BILLING_LOG_LEVEL",
    )
    parser.add_argument(
        "--text-logs", action="store_true", help="Emit plain text logs instead of JSON"
    )
    subcommands = parser.add_subparsers(dest="command", required=True)
    subcommands.add_parser("demo", help="Run the sample billing scenario")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings: Settings = get_settings()
    if args.log_level or args.text_logs:
        settings = settings.model_copy(
            update={
                "log_level": args.log_level or settings.log_level,
                "log_json": settings.log_json and not args.text_logs,
            }
        )
    configure_logging(settings.service_name, level=settings.log_level, json_output=settings.log_json)

    if args.command == "demo":
        run_demo(BillingService(settings))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI
    raise SystemExit(main())
