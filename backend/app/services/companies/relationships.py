"""
relationships.py — Company Parent/Child Relationship Table

Purpose:
- Load the (company_code, parent_company) side file into memory.
- Hold it as an immutable snapshot that is swapped by reference, so readers
  either see the previous table or the new one, never a half-loaded list.
- Answer "which codes list X as their parent?" in discovery order.

Source format (CSV with header):
    company_code,parent_company
    C1,C0
    C0,

An empty parent_company marks a root.

Failure policy:
- A missing or unreadable source is logged and leaves the table empty;
  hierarchy queries then rely on the code-prefix fallback.
- Nothing here raises into application startup.
"""

from __future__ import annotations

import csv
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from app.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RelationshipEntry:
    company_code: str
    parent_company: str = ""

    @property
    def is_root(self) -> bool:
        return not self.parent_company


@dataclass(frozen=True)
class RelationshipSnapshot:
    """
    Immutable view of the relationship table plus a parent → children index.
    """
    entries: Tuple[RelationshipEntry, ...] = ()
    source: Optional[str] = None
    _by_parent: Dict[str, Tuple[str, ...]] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def build(cls, entries: Iterable[RelationshipEntry], source: Optional[str] = None) -> "RelationshipSnapshot":
        frozen = tuple(entries)
        grouped: Dict[str, List[str]] = {}
        for entry in frozen:
            if entry.parent_company:
                grouped.setdefault(entry.parent_company, []).append(entry.company_code)
        return cls(
            entries=frozen,
            source=source,
            _by_parent={parent: tuple(codes) for parent, codes in grouped.items()},
        )

    def __len__(self) -> int:
        return len(self.entries)

    def children_of(self, parent_code: str) -> Tuple[str, ...]:
        """Child codes whose parent is `parent_code`, in file order."""
        return self._by_parent.get(parent_code, ())

    def references(self, code: str) -> bool:
        """True if `code` appears as a child or a parent."""
        return code in self._by_parent or any(e.company_code == code for e in self.entries)


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------

def parse_relationship_rows(rows: Iterable[Dict[str, Optional[str]]]) -> List[RelationshipEntry]:
    """
    Convert csv.DictReader rows into entries. Rows without a company_code
    are skipped with a warning.
    """
    entries: List[RelationshipEntry] = []
    for line_no, row in enumerate(rows, start=2):
        code = (row.get("company_code") or "").strip()
        if not code:
            logger.warning("Relationship row %d has no company_code; skipping", line_no)
            continue
        parent = (row.get("parent_company") or "").strip()
        entries.append(RelationshipEntry(company_code=code, parent_company=parent))
    return entries


def load_relationships(path: Path) -> List[RelationshipEntry]:
    """
    Read the relationship CSV at `path`.

    Raises:
        OSError / csv.Error / UnicodeDecodeError on unreadable input.
        Callers that must not fail use RelationshipTable.load().
    """
    with path.open("r", encoding="utf-8-sig", newline="") as fh:
        reader = csv.DictReader(fh)
        return parse_relationship_rows(reader)


class RelationshipTable:
    """
    Owner of the current relationship snapshot.

    Readers call `snapshot()` once per operation and use that object for the
    whole computation. Writers build a complete new snapshot and swap it in.
    """

    def __init__(self, entries: Optional[Iterable[RelationshipEntry]] = None, source: Optional[Path] = None) -> None:
        self._source = source
        self._snapshot = RelationshipSnapshot.build(entries or ())
        self._reload_lock = threading.Lock()

    @property
    def source(self) -> Optional[Path]:
        return self._source

    def snapshot(self) -> RelationshipSnapshot:
        return self._snapshot

    def replace(self, entries: Iterable[RelationshipEntry], source: Optional[str] = None) -> RelationshipSnapshot:
        new_snapshot = RelationshipSnapshot.build(entries, source=source)
        self._snapshot = new_snapshot
        return new_snapshot

    def load(self, path: Optional[Path] = None) -> bool:
        """
        Load `path` (or the configured source) and swap it in.

        Returns:
            True if the file was read. On failure the error is logged, the
            previous snapshot is kept and False is returned.
        """
        target = path or self._source
        if target is None:
            logger.warning("No relationship source configured; hierarchy will use code-prefix fallback")
            return False

        with self._reload_lock:
            try:
                entries = load_relationships(target)
            except FileNotFoundError:
                logger.error("Relationship file not found at %s; keeping %d existing entries", target, len(self._snapshot))
                return False
            except (OSError, csv.Error, UnicodeDecodeError) as exc:
                logger.error("Error loading relationships from %s: %s", target, exc)
                return False

            self._source = target
            self.replace(entries, source=str(target))
            logger.info("Loaded %d relationships from %s", len(entries), target)
            return True

    def reload(self) -> bool:
        return self.load()
