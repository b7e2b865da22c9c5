"""
structdiff.formats — Render diff results for people and machines.

Supported conversions:
    • DiffResult → line-oriented text summary
    • DiffResult → list of plain dicts
    • DiffResult → JSON string
"""

import json
from typing import Any, Iterable

from .records import (
    MISSING, ChangeKind, DiffRecord,
    ElementDiff, EntryDiff, FieldDiff, ValueDiff,
)


# ═══════════════════════════════════════════════════════════════════
#  TEXT
# ═══════════════════════════════════════════════════════════════════

def location(record: DiffRecord) -> str:
    """
    Where a record points, as shown to people.

    Element records carry the index separately from the sequence path;
    every other record's path is already complete.
    """
    if isinstance(record, ElementDiff):
        return f"{record.path}[{record.index}]"
    return record.path or "(root)"


def format_record(record: DiffRecord) -> str:
    """
    One line per record:

        UPDATED name: 'Alice' -> 'Bob'
        ADDED [d]: 5
        REMOVED items[3]: 4
    """
    kind = record.kind
    if kind is ChangeKind.ADDED:
        values = repr(record.right)
    elif kind is ChangeKind.REMOVED:
        values = repr(record.left)
    else:
        values = f"{record.left!r} -> {record.right!r}"
    return f"{kind} {location(record)}: {values}"


def to_text(records: Iterable[DiffRecord]) -> str:
    """Human-readable summary of a comparison result."""
    records = list(records)
    if not records:
        return "No differences found"
    lines = [f"Found {len(records)} differences:"]
    lines.extend(format_record(record) for record in records)
    return "\n".join(lines) + "\n"


# ═══════════════════════════════════════════════════════════════════
#  STRUCTURED FORMS
# ═══════════════════════════════════════════════════════════════════

def record_to_python(record: DiffRecord) -> dict[str, Any]:
    """
    Convert one record to a plain dict.

    Absent sides are omitted rather than written as null, so a real
    ``None`` value stays distinguishable from "not there".
    """
    if isinstance(record, FieldDiff):
        out = {"type": "struct", "path": record.path, "fieldName": record.field_name}
    elif isinstance(record, ElementDiff):
        out = {"type": "sequence", "path": record.path, "index": record.index}
    elif isinstance(record, EntryDiff):
        out = {"type": "mapping", "path": record.path, "key": str(record.key)}
    elif isinstance(record, ValueDiff):
        out = {"type": "value", "path": record.path}
    else:
        raise TypeError(f"Unknown diff record type: {type(record)}")

    if record.left is not MISSING:
        out["leftValue"] = record.left
    if record.right is not MISSING:
        out["rightValue"] = record.right
    out["change"] = record.kind.value
    return out


def to_python(records: Iterable[DiffRecord]) -> list[dict[str, Any]]:
    """Convert a comparison result to a list of plain dicts."""
    return [record_to_python(record) for record in records]


def to_json(records: Iterable[DiffRecord], **kwargs) -> str:
    """
    Convert a comparison result to a JSON array.

    Values JSON cannot represent are written with ``str()``.  An empty
    result is ``[]``.
    """
    kwargs.setdefault("default", str)
    return json.dumps(to_python(records), **kwargs)
