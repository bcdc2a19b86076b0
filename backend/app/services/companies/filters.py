"""
filters.py — Translate a CompanyFilter into SQL Predicates

Purpose:
- Push every supplied predicate into one filtered scan of `companies`.
- Set predicates (level, country, city) become IN clauses; empty lists are
  ignored.
- Range predicates are inclusive: BETWEEN when both bounds are present,
  >= / <= when only one is.

Note:
- year_founded is a text column, so year bounds are compared as strings.
  Four-digit years order correctly under string comparison.
"""

from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import Select, select
from sqlalchemy.sql.elements import ColumnElement

from app.models.company import Company
from app.services.companies.types import CompanyFilter


def range_clause(column: Any, low: Optional[Any], high: Optional[Any]) -> Optional[ColumnElement]:
    """Inclusive range predicate, or None when neither bound is given."""
    if low is not None and high is not None:
        return column.between(low, high)
    if low is not None:
        return column >= low
    if high is not None:
        return column <= high
    return None


def filter_clauses(flt: Optional[CompanyFilter]) -> List[ColumnElement]:
    if flt is None:
        return []

    clauses: List[ColumnElement] = []

    if flt.level:
        clauses.append(Company.level.in_(flt.level))
    if flt.country:
        clauses.append(Company.country.in_(flt.country))
    if flt.city:
        clauses.append(Company.city.in_(flt.city))

    if flt.founded_year:
        start = flt.founded_year.start
        end = flt.founded_year.end
        clause = range_clause(
            Company.year_founded,
            str(start) if start is not None else None,
            str(end) if end is not None else None,
        )
        if clause is not None:
            clauses.append(clause)

    if flt.annual_revenue:
        clause = range_clause(Company.annual_revenue, flt.annual_revenue.min, flt.annual_revenue.max)
        if clause is not None:
            clauses.append(clause)

    if flt.employees:
        clause = range_clause(Company.employees, flt.employees.min, flt.employees.max)
        if clause is not None:
            clauses.append(clause)

    return clauses


def build_filtered_select(flt: Optional[CompanyFilter]) -> Select:
    stmt = select(Company)
    for clause in filter_clauses(flt):
        stmt = stmt.where(clause)
    return stmt
