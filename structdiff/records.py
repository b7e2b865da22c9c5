"""
structdiff.records — Diff records and the result container.

Every difference found by a comparison is reported as one immutable
record.  There are four shapes, all sharing ``path``, ``left`` and
``right``:

    ValueDiff    root-level or leaf mismatch, kind implied by which
                 sides are present
    FieldDiff    a struct field (or an identity mismatch of a struct)
    ElementDiff  a sequence element at a given index
    EntryDiff    a mapping entry for a given key

An absent side is the ``MISSING`` sentinel, never ``None``: ``None`` is
a perfectly good value to have on either side of a difference.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Union


class _Missing:
    """Marker for the absent side of an ADDED or REMOVED record."""
    __slots__ = ()

    def __repr__(self) -> str:
        return "<missing>"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return "MISSING"


MISSING = _Missing()


class ChangeKind(Enum):
    """What happened at a location."""
    ADDED = "ADDED"
    REMOVED = "REMOVED"
    UPDATED = "UPDATED"
    ID_MISMATCH = "ID_MISMATCH"

    def __str__(self) -> str:
        return self.value


# ═══════════════════════════════════════════════════════════════════
#  RECORDS
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class ValueDiff:
    """
    A mismatch with no explicit change kind.

    Emitted for root-level mismatches, type mismatches, values resolved
    by custom comparators or handlers, and order-insensitive sequence
    residue.  The kind is implied:

        left is MISSING   → ADDED
        right is MISSING  → REMOVED
        both present      → UPDATED
    """
    path: str
    left: Any
    right: Any

    @property
    def kind(self) -> ChangeKind:
        if self.left is MISSING:
            return ChangeKind.ADDED
        if self.right is MISSING:
            return ChangeKind.REMOVED
        return ChangeKind.UPDATED


@dataclass(frozen=True, slots=True)
class FieldDiff(ValueDiff):
    """
    A struct field that changed.

    For ``ChangeKind.ID_MISMATCH`` the path is the struct's own path,
    ``field_name`` is empty and left/right hold the whole records.
    """
    field_name: str
    change: ChangeKind

    @property
    def kind(self) -> ChangeKind:
        return self.change


@dataclass(frozen=True, slots=True)
class ElementDiff(ValueDiff):
    """A sequence element; ``path`` locates the sequence, ``index`` the element."""
    index: int
    change: ChangeKind

    @property
    def kind(self) -> ChangeKind:
        return self.change


@dataclass(frozen=True, slots=True)
class EntryDiff(ValueDiff):
    """A mapping entry; ``path`` already ends with ``[key]``."""
    key: Any
    change: ChangeKind

    @property
    def kind(self) -> ChangeKind:
        return self.change


DiffRecord = Union[ValueDiff, FieldDiff, ElementDiff, EntryDiff]


# ═══════════════════════════════════════════════════════════════════
#  RESULT
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DiffResult:
    """Ordered, immutable collection of the records found by one comparison."""
    records: tuple[DiffRecord, ...] = ()

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def has_differences(self) -> bool:
        return bool(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[DiffRecord]:
        return iter(self.records)

    def __getitem__(self, index):
        return self.records[index]

    def __repr__(self) -> str:
        if not self.records:
            return "DiffResult(no differences)"
        return f"DiffResult({len(self.records)} differences)"
