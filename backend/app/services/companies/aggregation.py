"""
aggregation.py — Group Companies Along a Dimension

Purpose:
- Bucket an already-filtered list of companies by level, country or city.
- Null, missing or blank keys go to the "_unknown" bucket.
- Bucket order and member order follow the input (scan) order.

This module does NOT:
- Count, sort or total anything. Derived statistics are computed by the
  chart layer from the buckets.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional

from app.services.companies.types import CompanyDimension

UNKNOWN_KEY = "_unknown"


def _level_key(company: Any) -> Optional[str]:
    level = getattr(company, "level", None)
    return None if level is None else str(level)


def _attribute_key(name: str) -> Callable[[Any], Optional[str]]:
    def key(company: Any) -> Optional[str]:
        return getattr(company, name, None)
    return key


DIMENSION_KEYS: Dict[CompanyDimension, Callable[[Any], Optional[str]]] = {
    CompanyDimension.LEVEL: _level_key,
    CompanyDimension.COUNTRY: _attribute_key("country"),
    CompanyDimension.CITY: _attribute_key("city"),
}

# Adding a CompanyDimension member without a key function fails at import.
_missing = set(CompanyDimension) - set(DIMENSION_KEYS)
if _missing:
    raise RuntimeError(f"No grouping key defined for dimensions: {sorted(d.value for d in _missing)}")


def normalize_key(raw: Optional[str]) -> str:
    if raw is None:
        return UNKNOWN_KEY
    text = str(raw)
    if not text.strip():
        return UNKNOWN_KEY
    return text


def group_by_dimension(companies: Iterable[Any], dimension: CompanyDimension) -> Dict[str, List[Any]]:
    """
    Group companies by the value of `dimension`.

    Example:
        C0(level=None), C1(level=1), C2(level=1), dimension=level
        → {"_unknown": [C0], "1": [C1, C2]}
    """
    key_of = DIMENSION_KEYS[CompanyDimension(dimension)]
    grouped: Dict[str, List[Any]] = {}
    for company in companies:
        grouped.setdefault(normalize_key(key_of(company)), []).append(company)
    return grouped
