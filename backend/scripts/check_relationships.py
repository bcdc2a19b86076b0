"""
check_relationships.py — Report relationship entries that do not match a company.

Loads the relationship CSV and every company code from the database, then
lists child codes and parent codes with no matching company. Such entries are
skipped silently by the hierarchy endpoint; this script makes them visible.
Nothing is modified.

Example:
    python scripts/check_relationships.py --csv data/relationships.csv
"""

from __future__ import annotations

import argparse
import sys

from app.core.config import resolve_backend_path, settings
from app.core.database import SessionLocal
from app.core.logging import configure_logging, get_logger
from app.services.companies.relationships import load_relationships
from app.services.companies.repository import CompanyRepository

logger = get_logger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="List relationship entries that reference unknown companies"
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=settings.RELATIONSHIPS_CSV_PATH,
        help=f"Relationship CSV path (default: {settings.RELATIONSHIPS_CSV_PATH})",
    )
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)

    if SessionLocal is None:
        logger.error("DATABASE_URL is not configured")
        return 1

    csv_path = resolve_backend_path(args.csv)
    try:
        entries = load_relationships(csv_path)
    except OSError as e:
        logger.error("Cannot read %s: %s", csv_path, e)
        return 1

    db = SessionLocal()
    try:
        known = {c.company_code for c in CompanyRepository(db).find_all()}
    finally:
        db.close()

    missing_children = sorted({e.company_code for e in entries if e.company_code not in known})
    missing_parents = sorted({e.parent_company for e in entries if e.parent_company and e.parent_company not in known})

    print(f"\n{len(entries)} relationships, {len(known)} companies")
    print(f"  Unknown child codes: {len(missing_children)}")
    for code in missing_children[:20]:
        print(f"    {code}")
    print(f"  Unknown parent codes: {len(missing_parents)}")
    for code in missing_parents[:20]:
        print(f"    {code}")

    return 0 if not (missing_children or missing_parents) else 2


if __name__ == "__main__":
    sys.exit(main())
