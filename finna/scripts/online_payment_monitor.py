"""
Online payment monitor command.

Usage:
    finna-payment-monitor <expire_hours> <from_email> <report_interval_hours>

Validates unregistered online payment transactions. Meant to be run
periodically, e.g. from cron.

Dependencies: argparse, finna.application.services.payment_monitor
System role: Scheduled payment reconciliation entry point
"""

import argparse
import asyncio
import logging
import sys

from finna.application.services.payment_monitor import MonitorReport, OnlinePaymentMonitor
from finna.boundary.db.connection import get_async_engine, get_async_session_factory
from finna.boundary.ils.connection import ILSConnection
from finna.boundary.mail.mailer import Mailer
from finna.configs import get_settings
from finna.observability.logger import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="finna-payment-monitor",
        description="Validates unregistered online payment transactions.",
    )
    parser.add_argument(
        "expire_hours",
        type=int,
        help="Number of hours before considering unregistered transaction to be expired",
    )
    parser.add_argument(
        "from_email",
        help="Sender email address for notification of expired transactions",
    )
    parser.add_argument(
        "report_interval_hours",
        type=int,
        help="Interval when to re-send report of unresolved transactions",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser


async def run_monitor(args: argparse.Namespace) -> MonitorReport:
    """Run one monitor pass in its own database transaction."""
    settings = get_settings()
    ils = ILSConnection.from_config(settings.ils.load_datasources())
    mailer = Mailer(settings.mail)

    session_factory = get_async_session_factory()
    try:
        async with session_factory() as session:
            monitor = OnlinePaymentMonitor(
                session,
                ils,
                mailer,
                expire_hours=args.expire_hours,
                from_email=args.from_email,
                report_interval_hours=args.report_interval_hours,
                minimum_paid_age=settings.online_payment.minimum_paid_age,
            )
            try:
                report = await monitor.run()
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    finally:
        await get_async_engine().dispose()
    return report


def main(argv: list[str] | None = None) -> int:
    """Command entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(getattr(logging, args.log_level))

    report = asyncio.run(run_monitor(args))
    for label, count in (
        ("registered", report.registered),
        ("expired", report.expired),
        ("failed", report.failed),
        ("to be reminded", report.reminded),
    ):
        if count:
            logger.info(f"Total {label}: {count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
