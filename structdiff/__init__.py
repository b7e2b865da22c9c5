"""
structdiff
==========

Structural differences between arbitrary Python values.

    compare(Person("Alice", 30), Person("Bob", 30))
        → FieldDiff(path='name', left='Alice', right='Bob', ...)
    compare([1, 2, 3], [1, 2, 4])
        → ElementDiff(path='', left=3, right=4, index=2, ...)
    compare({"a": 1, "b": 2, "c": 3}, {"a": 1, "b": 4, "d": 5})
        → UPDATED [b], REMOVED [c], ADDED [d]

Every difference comes back as a typed, immutable record with its path,
change kind and both values, in a deterministic order.  The comparison:

  • Follows dataclasses, namedtuples, sequences, sets and mappings
  • Survives cyclic and shared references
  • Can ignore sequence order, with correct handling of duplicates
  • Honours per-field ``ignore`` / ``ignoreOrder`` / ``id`` directives
  • Takes custom comparators and type handlers for special types

It does not produce patches and does not search for a minimal edit
script.
"""

import logging

from structdiff.core import (
    Kind,
    Traversal,
    compare,
    kind_of,
)
from structdiff.equality import deep_equal
from structdiff.exceptions import HandlerError, OptionsError, StructDiffError
from structdiff.formats import to_json, to_python, to_text
from structdiff.handlers import (
    CallableHandler,
    DateTimeHandler,
    NamespaceHandler,
    QueueHandler,
    TypeHandler,
    default_type_handlers,
)
from structdiff.numeric import numeric_equal
from structdiff.options import CompareOptions
from structdiff.records import (
    MISSING,
    ChangeKind,
    DiffResult,
    ElementDiff,
    EntryDiff,
    FieldDiff,
    ValueDiff,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "compare", "CompareOptions", "Traversal", "Kind", "kind_of",
    "DiffResult", "ValueDiff", "FieldDiff", "ElementDiff", "EntryDiff",
    "ChangeKind", "MISSING",
    "TypeHandler", "DateTimeHandler", "NamespaceHandler",
    "CallableHandler", "QueueHandler", "default_type_handlers",
    "deep_equal", "numeric_equal",
    "StructDiffError", "HandlerError", "OptionsError",
    "to_text", "to_python", "to_json",
]
