"""
Tests for the hierarchy builder: depth bound, relationship children,
dangling entries and the code-prefix fallback.
"""

from typing import Dict, List, Optional

import pytest

from app.services.companies.errors import CompanyNotFoundError
from app.services.companies.hierarchy import build_hierarchy, prefix_children
from app.services.companies.relationships import RelationshipEntry, RelationshipSnapshot
from app.services.companies.types import CompanyOut, HierarchyNode


def _companies(*codes: str, **levels) -> Dict[str, CompanyOut]:
    return {
        code: CompanyOut(company_code=code, company_name=f"Company {code}", level=levels.get(code))
        for code in codes
    }


def _snapshot(*pairs) -> RelationshipSnapshot:
    return RelationshipSnapshot.build(RelationshipEntry(child, parent) for child, parent in pairs)


def _depth(node: HierarchyNode) -> int:
    if not node.children:
        return 0
    return 1 + max(_depth(child) for child in node.children)


def _codes(nodes: Optional[List[HierarchyNode]]) -> List[str]:
    return [n.company_code for n in nodes or []]


def test_two_children_with_depth_two():
    companies = _companies("C0", "C1", "C2", C1=1, C2=1)
    rels = _snapshot(("C1", "C0"), ("C2", "C0"))

    root = build_hierarchy("C0", 2, companies, rels)

    assert root.company_code == "C0"
    assert root.company_name == "Company C0"
    assert root.level is None
    assert _codes(root.children) == ["C1", "C2"]
    assert all(child.children is None for child in root.children)
    assert root.children[0].level == 1


def test_missing_root_raises_not_found():
    with pytest.raises(CompanyNotFoundError) as exc_info:
        build_hierarchy("NONEXISTENT", 3, _companies("C0"), _snapshot())
    assert exc_info.value.company_code == "NONEXISTENT"


def test_depth_zero_returns_leaf():
    companies = _companies("C0", "C1")
    root = build_hierarchy("C0", 0, companies, _snapshot(("C1", "C0")))
    assert root.children is None


@pytest.mark.parametrize("max_depth", [0, 1, 2, 3, 5])
def test_no_path_longer_than_max_depth(max_depth):
    # A chain C0 → C1 → C2 → C3 → C4 → C5 → C6
    codes = [f"C{i}" for i in range(7)]
    rels = _snapshot(*[(codes[i + 1], codes[i]) for i in range(6)])

    root = build_hierarchy("C0", max_depth, _companies(*codes), rels, prefix_fallback=False)

    assert _depth(root) == min(max_depth, 6)


def test_depth_bound_terminates_cycles():
    rels = _snapshot(("A", "B"), ("B", "A"))
    root = build_hierarchy("A", 4, _companies("A", "B"), rels, prefix_fallback=False)
    assert _depth(root) == 4
    assert _codes(root.children) == ["B"]
    assert _codes(root.children[0].children) == ["A"]


def test_dangling_relationship_is_skipped(caplog):
    rels = _snapshot(("C1", "C0"), ("GHOST", "C0"))

    root = build_hierarchy("C0", 3, _companies("C0", "C1"), rels)

    assert _codes(root.children) == ["C1"]
    assert "GHOST" in caplog.text


def test_prefix_fallback_when_no_relationships():
    companies = _companies("C1", "C10", "C11", "C2", "C110")

    root = build_hierarchy("C1", 1, companies, _snapshot())

    # Every longer code sharing the prefix is a direct child at depth 1
    assert _codes(root.children) == ["C10", "C11", "C110"]


def test_prefix_fallback_applies_to_nodes_without_explicit_children():
    companies = _companies("C0", "C1", "C1A", "C1B")
    rels = _snapshot(("C1", "C0"))

    root = build_hierarchy("C0", 3, companies, rels)

    assert _codes(root.children) == ["C1"]
    assert _codes(root.children[0].children) == ["C1A", "C1B"]


def test_prefix_fallback_used_when_all_explicit_children_dangle():
    companies = _companies("C0", "C0X")
    rels = _snapshot(("GHOST", "C0"))

    root = build_hierarchy("C0", 1, companies, rels)

    assert _codes(root.children) == ["C0X"]


def test_prefix_fallback_can_be_disabled():
    companies = _companies("C1", "C10", "C11")
    root = build_hierarchy("C1", 3, companies, _snapshot(), prefix_fallback=False)
    assert root.children is None


def test_explicit_children_suppress_prefix_guess():
    companies = _companies("C1", "C10", "X")
    root = build_hierarchy("C1", 1, companies, _snapshot(("X", "C1")))
    assert _codes(root.children) == ["X"]


def test_prefix_children_excludes_self_and_shorter_codes():
    assert prefix_children("C1", {"C": 1, "C1": 1, "C12": 1, "D1": 1}) == ["C12"]
