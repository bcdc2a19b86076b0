"""
types.py — Shared Schemas for the Company Services

Purpose:
- Request/response models shared by the API layer and the services.
- Boundary validation (dimension enum, filter shapes, value ranges) lives
  here so the services can assume validated input.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

LEVEL_MIN = 1
LEVEL_MAX = 4
FOUNDED_YEAR_MIN = 1000
HIERARCHY_MAX_DEPTH = 10
# Largest values the Integer / BigInteger columns hold
BIGINT_MAX = 2**63 - 1
INTEGER_MAX = 2**31 - 1

Level = Annotated[int, Field(ge=LEVEL_MIN, le=LEVEL_MAX)]


# -----------------------------------------------------------------------------
# Company records
# -----------------------------------------------------------------------------

class CompanyFields(BaseModel):
    level: Optional[Level] = None
    country: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=255)
    year_founded: Optional[str] = Field(None, max_length=50)
    annual_revenue: Optional[int] = Field(None, ge=0, le=BIGINT_MAX)
    employees: Optional[int] = Field(None, ge=0, le=INTEGER_MAX)


class CompanyCreate(CompanyFields):
    """Payload for POST /company."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "company_code": "C001",
                "company_name": "Acme Corporation",
                "level": 2,
                "country": "United States",
                "city": "New York",
                "year_founded": "1990",
                "annual_revenue": 1000000,
                "employees": 100,
            }
        }
    )

    company_code: str = Field(..., min_length=1, max_length=255)
    company_name: str = Field(..., min_length=1, max_length=255)

    @field_validator("company_code", "company_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class CompanyUpdate(CompanyFields):
    """
    Payload for PATCH /company/{code}. Only supplied fields change;
    company_code cannot be changed.
    """
    model_config = ConfigDict(extra="forbid")

    company_name: Optional[str] = Field(None, min_length=1, max_length=255)


class CompanyOut(BaseModel):
    """Read model for a company record. Cached values are instances of this."""
    model_config = ConfigDict(from_attributes=True)

    company_code: str
    company_name: str
    level: Optional[int] = None
    country: Optional[str] = None
    city: Optional[str] = None
    year_founded: Optional[str] = None
    annual_revenue: Optional[int] = None
    employees: Optional[int] = None


# -----------------------------------------------------------------------------
# Dimensional query
# -----------------------------------------------------------------------------

class CompanyDimension(str, Enum):
    LEVEL = "level"
    COUNTRY = "country"
    CITY = "city"


class FoundedYearRange(BaseModel):
    start: Optional[int] = None
    end: Optional[int] = None

    @field_validator("start", "end")
    @classmethod
    def year_in_range(cls, v: Optional[int]) -> Optional[int]:
        if v is None:
            return v
        current = datetime.date.today().year
        if not FOUNDED_YEAR_MIN <= v <= current:
            raise ValueError(f"year must be between {FOUNDED_YEAR_MIN} and {current}")
        return v


class NumericRange(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None


class CompanyFilter(BaseModel):
    """
    Conjunction of optional predicates. Empty lists and absent bounds
    impose no constraint.
    """
    level: Optional[List[Level]] = None
    country: Optional[List[str]] = None
    city: Optional[List[str]] = None
    founded_year: Optional[FoundedYearRange] = None
    annual_revenue: Optional[NumericRange] = None
    employees: Optional[NumericRange] = None


class DimensionQuery(BaseModel):
    """Payload for POST /company/filter."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "dimension": "country",
                "filter": {
                    "level": [1, 2],
                    "annual_revenue": {"min": 1000000, "max": 50000000},
                },
            }
        }
    )

    dimension: CompanyDimension
    filter: Optional[CompanyFilter] = None

    def cache_identity(self) -> dict:
        """Stable, JSON-able form used to build the cache key."""
        return self.model_dump(mode="json", exclude_none=True)


class DimensionQueryResult(BaseModel):
    dimension: CompanyDimension
    data: Dict[str, List[CompanyOut]] = Field(default_factory=dict)


# -----------------------------------------------------------------------------
# Hierarchy
# -----------------------------------------------------------------------------

class HierarchyRequest(BaseModel):
    """Payload for POST /company/hierarchy. Missing values use settings defaults."""
    company_code: Optional[str] = None
    max_depth: Optional[int] = Field(None, ge=0, le=HIERARCHY_MAX_DEPTH)

    @model_validator(mode="after")
    def blank_code_is_default(self) -> "HierarchyRequest":
        if self.company_code is not None and not self.company_code.strip():
            self.company_code = None
        return self


class HierarchyNode(BaseModel):
    """
    Read-only tree node. `children` is None (omitted from responses) when
    the node has no children or the depth bound was reached.
    """
    company_code: str
    company_name: str
    level: Optional[int] = None
    country: Optional[str] = None
    city: Optional[str] = None
    year_founded: Optional[str] = None
    annual_revenue: Optional[int] = None
    employees: Optional[int] = None
    children: Optional[List["HierarchyNode"]] = None


HierarchyNode.model_rebuild()
