"""
import_companies.py — Bulk-load companies from a CSV export into the database.

Existing company codes are skipped, never overwritten.

Example:
    python scripts/import_companies.py --csv data/companies.csv
"""

from __future__ import annotations

import argparse
import sys

from app.core.config import resolve_backend_path, settings
from app.core.database import SessionLocal, init_db
from app.core.logging import configure_logging, get_logger
from app.services.companies.importer import import_companies_csv
from app.services.companies.repository import CompanyRepository

logger = get_logger(__name__)


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Import companies from a CSV file into the companies table"
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=settings.COMPANIES_CSV_PATH,
        help=f"CSV file path (default: {settings.COMPANIES_CSV_PATH})",
    )
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)

    if SessionLocal is None:
        logger.error("DATABASE_URL is not configured")
        return 1

    csv_path = resolve_backend_path(args.csv)
    init_db()

    db = SessionLocal()
    try:
        summary = import_companies_csv(csv_path, CompanyRepository(db))
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1
    finally:
        db.close()

    print(f"\n✓ Processed {summary['processed']} rows from {csv_path}")
    print(f"  Inserted: {summary['inserted']}")
    print(f"  Skipped (duplicate code): {summary['skipped']}")
    if summary["errors"]:
        print(f"  Errors: {len(summary['errors'])}")
        for err in summary["errors"][:10]:
            print(f"    line {err['line']}: {err['error']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
