"""
importer.py — Bulk Company Import from CSV

Purpose:
- Load company rows from a CSV export into the `companies` table.
- Expected header:
    company_code,company_name,level,country,city,founded_year,annual_revenue,employees
- Blank cells become NULL; level / annual_revenue / employees are parsed as
  integers.

Behavior:
- Codes already in the store (or repeated earlier in the same file) are
  skipped with a warning; existing rows are never overwritten.
- Rows that fail to parse, or that the database rejects, are logged and
  counted as errors; the rest of the file is still imported.
- Each row is saved in its own commit.
- Returns a summary dict: processed / inserted / skipped / errors.
"""

from __future__ import annotations

import csv
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from app.core.cache import TTLCache
from app.core.logging import get_logger
from app.services.companies.repository import CompanyRepository
from app.services.companies.service import all_key
from app.services.companies.types import BIGINT_MAX, INTEGER_MAX

logger = get_logger(__name__)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_int(value: Optional[str], field_name: str, maximum: Optional[int] = None) -> Optional[int]:
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        number = int(value)
    except ValueError:
        # Exports sometimes write integers as "1000000.0"
        decimal_value = Decimal(value)
        if not decimal_value.is_finite() or decimal_value != decimal_value.to_integral_value():
            raise ValueError(f"{field_name} must be an integer, got {value!r}")
        number = int(decimal_value)
    if maximum is not None and abs(number) > maximum:
        raise ValueError(f"{field_name} out of range: {value}")
    return number


def parse_company_row(row: Dict[str, Optional[str]]) -> Dict[str, Any]:
    """
    Map one CSV row to Company column values.

    Raises:
        ValueError: missing code/name, or a numeric cell that is not an
            integer or does not fit its column.
        decimal.InvalidOperation: a numeric cell that is not a number at all.
    """
    code = _blank_to_none(row.get("company_code"))
    name = _blank_to_none(row.get("company_name"))
    if not code or not name:
        raise ValueError("company_code and company_name are required")

    return {
        "company_code": code,
        "company_name": name,
        "level": _parse_int(row.get("level"), "level", INTEGER_MAX),
        "country": _blank_to_none(row.get("country")),
        "city": _blank_to_none(row.get("city")),
        "year_founded": _blank_to_none(row.get("founded_year") or row.get("year_founded")),
        "annual_revenue": _parse_int(row.get("annual_revenue"), "annual_revenue", BIGINT_MAX),
        "employees": _parse_int(row.get("employees"), "employees", INTEGER_MAX),
    }


def import_company_rows(
    rows: Iterable[Dict[str, Optional[str]]],
    repository: CompanyRepository,
    cache: Optional[TTLCache] = None,
) -> Dict[str, Any]:
    summary: Dict[str, Any] = {
        "processed": 0,
        "inserted": 0,
        "skipped": 0,
        "errors": [],
    }

    parsed: List[Tuple[int, Dict[str, Any]]] = []
    for line_no, row in enumerate(rows, start=2):
        summary["processed"] += 1
        try:
            parsed.append((line_no, parse_company_row(row)))
        except (ValueError, ArithmeticError) as exc:
            logger.error("Error parsing company row %d: %s", line_no, exc)
            summary["errors"].append({"line": line_no, "error": str(exc)})

    existing = repository.existing_codes(values["company_code"] for _, values in parsed)
    for line_no, values in parsed:
        code = values["company_code"]
        if code in existing:
            logger.warning("Skipping duplicate entry for company code %s", code)
            summary["skipped"] += 1
            continue
        existing.add(code)

        try:
            repository.add(values)
        except (SQLAlchemyError, OverflowError) as exc:
            repository.rollback()
            logger.error("Error saving company %s (row %d): %s", code, line_no, exc)
            summary["errors"].append({"line": line_no, "error": str(exc)})
            continue
        summary["inserted"] += 1

    if summary["inserted"] and cache is not None:
        cache.delete(all_key())

    logger.info(
        "Company import finished: %d processed, %d inserted, %d skipped, %d errors",
        summary["processed"],
        summary["inserted"],
        summary["skipped"],
        len(summary["errors"]),
    )
    return summary


def import_companies_csv(
    path: Path,
    repository: CompanyRepository,
    cache: Optional[TTLCache] = None,
) -> Dict[str, Any]:
    """
    Import every row of the CSV at `path`.

    Raises:
        FileNotFoundError: `path` does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"Company CSV not found at {path}")

    with path.open("r", encoding="utf-8-sig", newline="") as fh:
        reader = csv.DictReader(fh)
        return import_company_rows(reader, repository, cache=cache)
