"""
hierarchy.py — Company Hierarchy Builder

Purpose:
- Build a depth-bounded parent/child tree rooted at one company.
- Children come from the relationship snapshot; when a node has no
  explicit children the optional code-prefix fallback guesses them
  (e.g., "C1" → "C10", "C1A").

Inputs:
- companies: code → record map built once per request from a full scan.
  Iteration order of the map is the fallback's discovery order.
- relationships: a RelationshipSnapshot taken once per request.

Depth semantics:
- The root is at depth 0. A node at depth == max_depth is a leaf, so no
  path from the root is longer than max_depth edges.

This module does NOT:
- Query the database or the cache (see service.py).
- Detect cycles. The depth bound is what terminates recursion.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Set

from app.core.logging import get_logger
from app.services.companies.errors import CompanyNotFoundError
from app.services.companies.relationships import RelationshipSnapshot
from app.services.companies.types import HierarchyNode

logger = get_logger(__name__)

_NODE_ATTRIBUTES = (
    "level",
    "country",
    "city",
    "year_founded",
    "annual_revenue",
    "employees",
)


def _make_node(company: Any, children: Optional[List[HierarchyNode]] = None) -> HierarchyNode:
    return HierarchyNode(
        company_code=company.company_code,
        company_name=company.company_name,
        children=children or None,
        **{attr: getattr(company, attr, None) for attr in _NODE_ATTRIBUTES},
    )


def prefix_children(code: str, companies: Mapping[str, Any]) -> List[str]:
    """
    Codes that start with `code` and are strictly longer.
    """
    return [
        other for other in companies
        if len(other) > len(code) and other.startswith(code)
    ]


class HierarchyBuilder:
    """
    One-shot tree builder. Create per request; not shared across threads.
    """

    def __init__(
        self,
        companies: Mapping[str, Any],
        relationships: RelationshipSnapshot,
        prefix_fallback: bool = True,
    ) -> None:
        self._companies = companies
        self._relationships = relationships
        self._prefix_fallback = prefix_fallback
        self._dangling: Set[str] = set()

    def build(self, root_code: str, max_depth: int) -> HierarchyNode:
        root = self._companies.get(root_code)
        if root is None:
            raise CompanyNotFoundError(root_code)

        tree = self._build_node(root, max(max_depth, 0), 0)

        if self._dangling:
            logger.warning(
                "Skipped %d relationship entries referencing unknown companies: %s",
                len(self._dangling),
                ", ".join(sorted(self._dangling)[:10]),
            )
        return tree

    def _build_node(self, company: Any, max_depth: int, depth: int) -> HierarchyNode:
        if depth >= max_depth:
            return _make_node(company)

        code = company.company_code
        children: List[HierarchyNode] = []

        for child_code in self._relationships.children_of(code):
            child = self._companies.get(child_code)
            if child is None:
                self._dangling.add(child_code)
                continue
            children.append(self._build_node(child, max_depth, depth + 1))

        if not children and self._prefix_fallback:
            for child_code in prefix_children(code, self._companies):
                children.append(self._build_node(self._companies[child_code], max_depth, depth + 1))

        return _make_node(company, children)


def build_hierarchy(
    root_code: str,
    max_depth: int,
    companies: Mapping[str, Any],
    relationships: RelationshipSnapshot,
    prefix_fallback: bool = True,
) -> HierarchyNode:
    """
    Build the tree rooted at `root_code`.

    Raises:
        CompanyNotFoundError: root_code is not in `companies`. Raised before
        any recursion, so there are no partial trees.
    """
    builder = HierarchyBuilder(companies, relationships, prefix_fallback=prefix_fallback)
    return builder.build(root_code, max_depth)
