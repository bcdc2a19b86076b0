"""
repository.py — Company Entity Store

Purpose:
- Encapsulate all SQLAlchemy access to the `companies` table.
- Point lookup, full scan, predicate-pushdown scan, and the write helpers
  used by the service and the CSV importer.

This module does NOT:
- Touch the cache (see service.py).
- Validate payloads (pydantic schemas in types.py do that at the boundary).
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.company import Company
from app.services.companies.filters import build_filtered_select
from app.services.companies.types import CompanyFilter

logger = get_logger(__name__)


class CompanyRepository:
    def __init__(self, db: Session) -> None:
        self._db = db

    # ------------------------------------------------------------------ #
    # Reads
    def find_by_code(self, code: str) -> Optional[Company]:
        return self._db.get(Company, code)

    def find_all(self) -> List[Company]:
        return list(self._db.scalars(select(Company)))

    def find_where(self, flt: Optional[CompanyFilter]) -> List[Company]:
        stmt = build_filtered_select(flt)
        return list(self._db.scalars(stmt))

    def existing_codes(self, codes: Iterable[str]) -> Set[str]:
        wanted = list(set(codes))
        if not wanted:
            return set()
        stmt = select(Company.company_code).where(Company.company_code.in_(wanted))
        return set(self._db.scalars(stmt))

    # ------------------------------------------------------------------ #
    # Writes
    def add(self, values: Dict[str, Any]) -> Company:
        company = Company(**values)
        self._db.add(company)
        self._db.commit()
        self._db.refresh(company)
        return company

    def apply_changes(self, company: Company, changes: Dict[str, Any]) -> Company:
        for field_name, value in changes.items():
            setattr(company, field_name, value)
        self._db.commit()
        self._db.refresh(company)
        return company

    def remove(self, company: Company) -> None:
        self._db.delete(company)
        self._db.commit()

    def rollback(self) -> None:
        self._db.rollback()
