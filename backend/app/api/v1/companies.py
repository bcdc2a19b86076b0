"""
Purpose:
- Expose API endpoints for company records, dimensional queries (dashboard
  charts) and the company hierarchy (bubble chart).
    • POST   /company                        → create a company
    • GET    /company                        → list all companies
    • GET    /company/{code}                 → one company
    • PATCH  /company/{code}                 → partial update
    • DELETE /company/{code}                 → delete
    • POST   /company/filter                 → group filtered companies by a dimension
    • POST   /company/hierarchy              → parent/child tree rooted at a company
    • GET    /company/relationships          → relationship table summary
    • POST   /company/relationships/reload   → re-read the relationship file

Role in System:
- The API layer should NOT contain business logic.
- It builds a CompanyService per request and maps service errors to HTTP
  status codes (404 not found, 409 duplicate code).

Data Flow:
Client → FastAPI Router → (this file) → CompanyService → cache / DB → response
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.cache import TTLCache, get_cache
from app.core.config import settings
from app.core.database import get_db
from app.core.logging import get_logger
from app.services.companies.errors import CompanyAlreadyExistsError, CompanyNotFoundError
from app.services.companies.relationships import RelationshipTable
from app.services.companies.repository import CompanyRepository
from app.services.companies.service import CompanyService
from app.services.companies.types import (
    CompanyCreate,
    CompanyOut,
    CompanyUpdate,
    DimensionQuery,
    DimensionQueryResult,
    HierarchyNode,
    HierarchyRequest,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/company",
    tags=["companies"]
)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------

class RelationshipSummary(BaseModel):
    source: Optional[str] = None
    total: int
    roots: int


class ReloadResult(RelationshipSummary):
    reloaded: bool


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------

def get_relationship_table(request: Request) -> RelationshipTable:
    """
    The table is created and loaded by the app lifespan (see main.py).
    Before startup completes it is simply empty.
    """
    table = getattr(request.app.state, "relationships", None)
    if table is None:
        table = RelationshipTable()
        request.app.state.relationships = table
    return table


def get_company_service(
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
    relationships: RelationshipTable = Depends(get_relationship_table),
) -> CompanyService:
    return CompanyService(CompanyRepository(db), cache, relationships, settings)


def _not_found(exc: CompanyNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _summarize(table: RelationshipTable) -> dict:
    snapshot = table.snapshot()
    return {
        "source": snapshot.source,
        "total": len(snapshot),
        "roots": sum(1 for entry in snapshot.entries if entry.is_root),
    }


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@router.post("", response_model=CompanyOut, status_code=status.HTTP_201_CREATED)
def create_company(payload: CompanyCreate, service: CompanyService = Depends(get_company_service)):
    """
    POST /company

    Create a company. 409 if the code is already taken.
    """
    try:
        return service.create(payload)
    except CompanyAlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.post("/filter", response_model=DimensionQueryResult)
def query_companies(query: DimensionQuery, service: CompanyService = Depends(get_company_service)):
    """
    POST /company/filter

    Apply the optional filter and group matching companies by `dimension`.
    No matches → {"dimension": ..., "data": {}}.
    """
    return service.query_by_dimension(query)


@router.post(
    "/hierarchy",
    response_model=HierarchyNode,
    response_model_exclude_none=True,
)
def get_company_hierarchy(
    body: Optional[HierarchyRequest] = None,
    service: CompanyService = Depends(get_company_service),
):
    """
    POST /company/hierarchy

    Body (all optional): {"company_code": "C0", "max_depth": 3}
    404 if the root company does not exist.
    """
    try:
        return service.get_hierarchy(body or HierarchyRequest())
    except CompanyNotFoundError as exc:
        raise _not_found(exc)


@router.get("/relationships", response_model=RelationshipSummary)
def read_relationships(table: RelationshipTable = Depends(get_relationship_table)):
    """
    GET /company/relationships

    Size and source of the relationship snapshot currently in use.
    """
    return _summarize(table)


@router.post("/relationships/reload", response_model=ReloadResult)
def reload_relationships(table: RelationshipTable = Depends(get_relationship_table)):
    """
    POST /company/relationships/reload

    Re-read the relationship file and swap it in. On failure the previous
    table stays active and `reloaded` is false. Cached hierarchies are not
    dropped; they refresh when their TTL expires.
    """
    logger.info("Relationship reload requested (source: %s)", table.source)
    reloaded = table.reload()
    return {"reloaded": reloaded, **_summarize(table)}


@router.get("", response_model=List[CompanyOut])
def list_companies(service: CompanyService = Depends(get_company_service)):
    """
    GET /company
    """
    return service.find_all()


@router.get("/{company_code}", response_model=CompanyOut)
def get_company(company_code: str, service: CompanyService = Depends(get_company_service)):
    """
    GET /company/{company_code}
    """
    try:
        return service.find_one(company_code)
    except CompanyNotFoundError as exc:
        raise _not_found(exc)


@router.patch("/{company_code}", response_model=CompanyOut)
def update_company(
    company_code: str,
    payload: CompanyUpdate,
    service: CompanyService = Depends(get_company_service),
):
    """
    PATCH /company/{company_code}

    Only fields present in the body are changed.
    """
    try:
        return service.update(company_code, payload)
    except CompanyNotFoundError as exc:
        raise _not_found(exc)


@router.delete("/{company_code}", status_code=status.HTTP_204_NO_CONTENT)
def delete_company(company_code: str, service: CompanyService = Depends(get_company_service)):
    """
    DELETE /company/{company_code}

    Relationship entries that mention the company are left in place.
    """
    try:
        service.delete(company_code)
    except CompanyNotFoundError as exc:
        raise _not_found(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
