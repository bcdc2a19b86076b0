"""
service.py — Company Service (CRUD, Dimensional Query, Hierarchy)

Purpose:
- Single entry point used by the API layer for company operations.
- Wraps the entity store with the TTL cache:
    * company:all              → list of every company      (CACHE_TTL_ALL_SECONDS)
    * company:id.<code>        → one company                (CACHE_TTL_ENTITY_SECONDS)
    * company:query.<json>     → dimension query result     (CACHE_TTL_QUERY_SECONDS)
    * company:hierarchy.<json> → hierarchy tree             (CACHE_TTL_HIERARCHY_SECONDS)

Cache invalidation:
- create / update / delete drop `company:all` and `company:id.<code>`.
- Query and hierarchy entries are NOT dropped on mutation; they go stale
  until their TTL expires.

Concurrency:
- No per-key in-flight deduplication. Concurrent misses for the same key
  each recompute and each write the cache.

Data Flow:
API → CompanyService → cache hit? return : repository scan → aggregation /
hierarchy → cache.set → return
"""

from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from app.core.cache import TTLCache, make_key
from app.core.config import Settings, settings as default_settings
from app.core.logging import get_logger
from app.services.companies.aggregation import group_by_dimension
from app.services.companies.errors import CompanyAlreadyExistsError, CompanyNotFoundError
from app.services.companies.hierarchy import build_hierarchy
from app.services.companies.relationships import RelationshipTable
from app.services.companies.repository import CompanyRepository
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

CACHE_NAMESPACE = "company"


def all_key() -> str:
    return make_key(CACHE_NAMESPACE, "all")


def entity_key(code: str) -> str:
    return make_key(CACHE_NAMESPACE, "id", code)


def query_key(query: DimensionQuery) -> str:
    return make_key(CACHE_NAMESPACE, "query", query.cache_identity())


def hierarchy_key(root_code: str, max_depth: int) -> str:
    return make_key(CACHE_NAMESPACE, "hierarchy", {"company_code": root_code, "max_depth": max_depth})


class CompanyService:
    def __init__(
        self,
        repository: CompanyRepository,
        cache: TTLCache,
        relationships: RelationshipTable,
        config: Optional[Settings] = None,
    ) -> None:
        self._repo = repository
        self._cache = cache
        self._relationships = relationships
        self._config = config or default_settings

    # ------------------------------------------------------------------ #
    # Cache helpers
    def clean_company_cache(self, company_code: Optional[str] = None) -> None:
        logger.info("Cleaning company cache")
        self._cache.delete(all_key())
        if company_code:
            self._cache.delete(entity_key(company_code))

    # ------------------------------------------------------------------ #
    # CRUD
    def create(self, payload: CompanyCreate) -> CompanyOut:
        if self._repo.find_by_code(payload.company_code) is not None:
            raise CompanyAlreadyExistsError(payload.company_code)
        try:
            company = self._repo.add(payload.model_dump())
        except IntegrityError as exc:
            # Lost a race with a concurrent create of the same code
            self._repo.rollback()
            raise CompanyAlreadyExistsError(payload.company_code) from exc

        self.clean_company_cache(company.company_code)
        logger.info("Created company %s", company.company_code)
        return CompanyOut.model_validate(company)

    def find_all(self) -> List[CompanyOut]:
        key = all_key()
        cached = self._cache.get(key)
        if cached is not None:
            logger.info("Returning all companies from cache")
            return cached

        companies = [CompanyOut.model_validate(c) for c in self._repo.find_all()]
        self._cache.set(key, companies, self._config.CACHE_TTL_ALL_SECONDS)
        return companies

    def find_one(self, code: str) -> CompanyOut:
        key = entity_key(code)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info("Returning company %s from cache", code)
            return cached

        company = self._repo.find_by_code(code)
        if company is None:
            raise CompanyNotFoundError(code)

        result = CompanyOut.model_validate(company)
        self._cache.set(key, result, self._config.CACHE_TTL_ENTITY_SECONDS)
        return result

    def update(self, code: str, payload: CompanyUpdate) -> CompanyOut:
        company = self._repo.find_by_code(code)
        if company is None:
            raise CompanyNotFoundError(code)

        changes = payload.model_dump(exclude_unset=True)
        if changes:
            company = self._repo.apply_changes(company, changes)
            logger.info("Updated company %s fields: %s", code, ", ".join(sorted(changes)))

        self.clean_company_cache(code)
        return CompanyOut.model_validate(company)

    def delete(self, code: str) -> None:
        company = self._repo.find_by_code(code)
        if company is None:
            raise CompanyNotFoundError(code)

        self._repo.remove(company)
        self.clean_company_cache(code)

        # Relationship entries are not cascaded
        if self._relationships.snapshot().references(code):
            logger.warning("Deleted company %s is still referenced by the relationship table", code)
        logger.info("Deleted company %s", code)

    # ------------------------------------------------------------------ #
    # Dimensional query
    def query_by_dimension(self, query: DimensionQuery) -> DimensionQueryResult:
        key = query_key(query)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info("Returning queried companies from cache for query: %s", query.cache_identity())
            return cached

        logger.debug("Querying companies with dimension: %s", query.dimension.value)
        if query.filter is not None:
            logger.debug("Filters: %s", query.filter.model_dump(exclude_none=True))

        companies = [CompanyOut.model_validate(c) for c in self._repo.find_where(query.filter)]
        if not companies:
            return DimensionQueryResult(dimension=query.dimension, data={})

        grouped: Dict[str, List[CompanyOut]] = group_by_dimension(companies, query.dimension)
        result = DimensionQueryResult(dimension=query.dimension, data=grouped)

        self._cache.set(key, result, self._config.CACHE_TTL_QUERY_SECONDS)
        return result

    # ------------------------------------------------------------------ #
    # Hierarchy
    def get_hierarchy(self, request: HierarchyRequest) -> HierarchyNode:
        root_code = request.company_code or self._config.HIERARCHY_DEFAULT_ROOT
        max_depth = (
            request.max_depth
            if request.max_depth is not None
            else self._config.HIERARCHY_DEFAULT_MAX_DEPTH
        )

        key = hierarchy_key(root_code, max_depth)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info("Returning company hierarchy from cache for %s (depth %d)", root_code, max_depth)
            return cached

        company_map = {c.company_code: c for c in self._repo.find_all()}
        hierarchy = build_hierarchy(
            root_code,
            max_depth,
            company_map,
            self._relationships.snapshot(),
            prefix_fallback=self._config.HIERARCHY_PREFIX_FALLBACK,
        )

        self._cache.set(key, hierarchy, self._config.CACHE_TTL_HIERARCHY_SECONDS)
        return hierarchy
