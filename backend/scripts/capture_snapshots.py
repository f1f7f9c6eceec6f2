#!/usr/bin/env python
"""Capture the daily portfolio snapshot for every user with lots.

Meant for cron or a systemd timer on hosts that don't call the
``POST /api/snapshots/run`` endpoint. Running it twice on the same day
overwrites that day's snapshots.

Usage:
    python -m scripts.capture_snapshots
    python -m scripts.capture_snapshots --date 2025-01-10 --refresh-rates
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from database import get_session_local
from logging_config import setup_logging
from services.exchange_rate_service import ExchangeRateService
from services.snapshot_service import SnapshotService

logger = logging.getLogger(__name__)


def run(snapshot_date: date | None = None, refresh_rates: bool = False) -> int:
    """Capture snapshots and return a process exit code (1 if any user failed)."""
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        if refresh_rates:
            refresh = ExchangeRateService().refresh_rates(db)
            db.commit()
            if refresh.success:
                print(f"Exchange rates: {refresh.pairs_written} pairs from {refresh.source}")
            else:
                print(f"Exchange rates not refreshed: {'; '.join(refresh.errors)}")

        result = SnapshotService().capture_all(db, snapshot_date)
    finally:
        db.close()

    print(f"\nSnapshots for {result.snapshot_date}:")
    print(f"  Created: {result.created}")
    print(f"  Updated: {result.updated}")
    print(f"  Failed:  {result.failed}")
    for error in result.errors:
        print(f"    ! {error}")
    return 1 if result.failed else 0


def main():
    parser = argparse.ArgumentParser(description="Capture daily portfolio snapshots")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Snapshot date as YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--refresh-rates",
        action="store_true",
        help="Refresh exchange rates before valuing portfolios",
    )
    args = parser.parse_args()

    setup_logging()
    sys.exit(run(args.date, refresh_rates=args.refresh_rates))


if __name__ == "__main__":
    main()
