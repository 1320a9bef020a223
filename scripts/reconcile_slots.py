"""Cron entry point for expiring live slot listings."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from datetime import datetime

from src.slotmarket.config import load_config
from src.slotmarket.dependencies import build_services
from src.slotmarket.logging import configure_logging


@dataclass(slots=True)
class ReconcileSummary:
    processed: int
    updated: int
    failed: int
    dry_run: bool


def perform_reconcile(*, dry_run: bool, reference_time: datetime | None = None) -> ReconcileSummary:
    """Run one reconciliation pass (or count expirations) and return counters."""
    config = load_config()
    services = build_services(config)

    if dry_run:
        expired = services.reconciler.preview(now=reference_time)
        return ReconcileSummary(processed=len(expired), updated=0, failed=0, dry_run=True)

    report = services.reconciler.run(now=reference_time)
    return ReconcileSummary(
        processed=report.processed,
        updated=report.updated,
        failed=len(report.failures),
        dry_run=False,
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Expire live slot listings whose end time has passed.")
    parser.add_argument("--dry-run", action="store_true", help="Only report how many listings would expire.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    configure_logging()
    try:
        summary = perform_reconcile(dry_run=args.dry_run)
    except Exception as exc:
        print(f"reconcile failed: {exc}", file=sys.stderr)
        return 2

    if summary.dry_run:
        print(f"reconcile dry-run, expired={summary.processed}", file=sys.stdout)
    else:
        print(
            f"reconcile done, processed={summary.processed}, updated={summary.updated}, failed={summary.failed}",
            file=sys.stdout,
        )
        if summary.failed:
            print(f"reconcile failed for {summary.failed} slot(s)", file=sys.stderr)
            return 2
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
