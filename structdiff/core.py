"""
structdiff.core — Recursive structural comparison
==================================================

OVERVIEW
════════

``compare(left, right)`` walks two values side by side and reports
every field, element and entry that differs:

    compare({"a": 1, "b": 2, "c": 3}, {"a": 1, "b": 4, "d": 5})
        → EntryDiff [b]  UPDATED  2 → 4
          EntryDiff [c]  REMOVED  3
          EntryDiff [d]  ADDED    5

All records of one call accumulate in a single append-only list, each
attributed with a path such as ``address.city``, ``items[2]`` or
``[key]``.


§1  KINDS
─────────

Every value falls into one closed kind, and each kind has exactly one
comparator:

    NIL        None
    SCALAR     bool, int, float, complex, str, bytes, Decimal, Fraction, Enum
    STRUCT     dataclass and namedtuple instances      → _compare_struct
    SEQUENCE   list, tuple, deque                      → _compare_sequence
    SET        set, frozenset                          → _compare_unordered
    MAPPING    any Mapping                             → _compare_mapping
    REFERENCE  weakref.ref                             → _compare_reference
    OPAQUE     anything else                           → == / deep_equal

Type handlers (see ``structdiff.handlers``) are the open extension
point in front of this closed set.


§2  THE DISPATCHER
──────────────────

``Traversal.compare(path, left, right)`` applies, in order:

    1. depth limit          deeper than max_depth → treated as equal
    2. ignored path         path in ignored_fields → skipped
    3. identity             the same container object → equal
    4. None                 one side None → ValueDiff, both → equal
    5. type mismatch        one ValueDiff (or numeric value equality)
    6. custom comparator    exact type match
    7. type handler         first claiming handler
    8. kind dispatch        §1

A type mismatch is always reported as one atomic difference; the two
values are never recursed into.


§3  CYCLES
──────────

Every container is a reference, so every composite kind is entered
through ``TraversalContext.visiting``.  Re-entering a pair of containers
that is already being compared means both graphs loop back the same
way; the pair is assumed equal.  Two independently built cyclic lists
with the same shape compare equal and the traversal terminates.


§4  ORDER-INSENSITIVE SEQUENCES
───────────────────────────────

Two strategies, chosen by element kind and size:

    any non-scalar or NaN      O(n·m) first-match consumption
    both sides ≤ 5 elements    O(n·m) first-match consumption
    otherwise                  per-value count reconciliation

Both strategies use the same equality as ``deep_equal``, so the size
of the input only changes the cost, never the outcome (record order
aside: counting groups duplicates together).

Count reconciliation is a multiset difference, not a set difference:

    [1, 2, 2, 3] vs [3, 2, 1, 2]  →  no differences
    [1, 2, 2, 3] vs [1, 2, 3, 3]  →  REMOVED 2, ADDED 3

Once order is ignored an index means nothing, so these records are
plain ``ValueDiff``s carrying only the value.
"""

import collections
import dataclasses
import functools
import logging
import numbers
import weakref
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum, auto
from fractions import Fraction
from typing import Any, Optional

from .context import TraversalContext
from .equality import deep_equal
from .exceptions import HandlerError, StructDiffError
from .numeric import is_numeric, numeric_equal
from .options import CompareOptions
from .records import (
    MISSING, ChangeKind, DiffRecord, DiffResult,
    ElementDiff, EntryDiff, FieldDiff, ValueDiff,
)

logger = logging.getLogger(__name__)


# Order-insensitive sequences at most this long on both sides are matched
# pairwise instead of through per-value counts.
SMALL_SEQUENCE_THRESHOLD = 5

DIRECTIVE_KEY = "diff"
IGNORE = "ignore"
IGNORE_ORDER = "ignoreOrder"
IDENTITY = "id"
KNOWN_DIRECTIVES = frozenset((IGNORE, IGNORE_ORDER, IDENTITY))


# ═══════════════════════════════════════════════════════════════════
#  KINDS
# ═══════════════════════════════════════════════════════════════════

class Kind(Enum):
    NIL = auto()
    SCALAR = auto()
    STRUCT = auto()
    SEQUENCE = auto()
    SET = auto()
    MAPPING = auto()
    REFERENCE = auto()
    OPAQUE = auto()


_BASIC_TYPES = (bool, int, float, complex, str, bytes, Decimal, Fraction, Enum)


def kind_of(value: Any) -> Kind:
    """Classify a value into one of the closed comparison kinds."""
    if value is None:
        return Kind.NIL
    if isinstance(value, _BASIC_TYPES) or isinstance(value, numbers.Number):
        return Kind.SCALAR
    if _is_struct(value):
        return Kind.STRUCT
    if isinstance(value, (list, tuple, collections.deque)):
        return Kind.SEQUENCE
    if isinstance(value, (set, frozenset)):
        return Kind.SET
    if isinstance(value, Mapping):
        return Kind.MAPPING
    if isinstance(value, weakref.ref):
        return Kind.REFERENCE
    return Kind.OPAQUE


def is_basic(value: Any) -> bool:
    """None and scalar leaves: compared directly, never recursed into."""
    return kind_of(value) in (Kind.NIL, Kind.SCALAR)


def _is_struct(value: Any) -> bool:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    return isinstance(value, tuple) and hasattr(type(value), "_fields")


def _is_reference_like(kind: Kind) -> bool:
    return kind not in (Kind.NIL, Kind.SCALAR)


def _countable(value: Any) -> bool:
    """
    Whether ``value`` can be matched by counting instead of pairwise.

    Only flat scalars that are hashable and equal to themselves qualify:
    for those, hashing by ``(type, value)`` agrees with ``deep_equal``.
    Containers compare loosely under ``==`` (``(1,) == (1.0,)``) and NaN
    is unequal to itself, so both go through pairwise matching.
    """
    if kind_of(value) is not Kind.SCALAR:
        return False
    try:
        hash(value)
        return bool(value == value)
    except (TypeError, ValueError, ArithmeticError):
        return False


# ═══════════════════════════════════════════════════════════════════
#  FIELD DIRECTIVES
# ═══════════════════════════════════════════════════════════════════

def parse_directives(tag: Optional[str]) -> frozenset[str]:
    """
    Split a directive string such as ``"ignore, id"`` into exact tokens.

    Unknown tokens are kept but have no effect; nothing here raises.
    """
    if not tag:
        return frozenset()
    return frozenset(token.strip() for token in tag.split(",") if token.strip())


@dataclasses.dataclass(frozen=True, slots=True)
class FieldPolicy:
    """How one declared field of a struct type takes part in comparison."""
    name: str
    directives: frozenset[str]

    @property
    def public(self) -> bool:
        return not self.name.startswith("_")


@functools.lru_cache(maxsize=None)
def describe_fields(cls: type) -> tuple[FieldPolicy, ...]:
    """
    Declared fields of a struct type, in declaration order.

    Directives come from dataclass field metadata
    (``field(metadata={"diff": "ignore"})``) and from an optional
    class-level side table (``__diff__ = {"tags": "ignoreOrder"}``);
    namedtuples can only use the latter.
    """
    table = getattr(cls, "__diff__", None) or {}
    if dataclasses.is_dataclass(cls):
        declared = [(f.name, f.metadata.get(DIRECTIVE_KEY)) for f in dataclasses.fields(cls)]
    else:
        declared = [(name, None) for name in cls._fields]

    policies = []
    for name, tag in declared:
        directives = parse_directives(tag) | parse_directives(table.get(name))
        unknown = directives - KNOWN_DIRECTIVES
        if unknown:
            logger.debug("ignoring unknown diff directives %s on %s.%s",
                         sorted(unknown), cls.__name__, name)
        policies.append(FieldPolicy(name, directives))
    return tuple(policies)


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, _BASIC_TYPES):
        return not value
    if isinstance(value, (list, tuple, set, frozenset, Mapping)) and not _is_struct(value):
        return len(value) == 0
    return False


_NO_ID = object()


def object_identity(value: Any, options: CompareOptions) -> Any:
    """
    The value identifying which entity a struct represents.

    A non-zero public field tagged ``id`` wins; otherwise the first
    non-zero field named in ``options.identity_fields``.  Returns a
    private sentinel when the struct has no identity.
    """
    if not _is_struct(value):
        return _NO_ID
    policies = describe_fields(type(value))

    for policy in policies:
        if policy.public and IDENTITY in policy.directives:
            candidate = getattr(value, policy.name)
            if not _is_zero(candidate):
                return candidate

    declared = {policy.name for policy in policies if policy.public}
    for name in options.identity_fields:
        if name in declared:
            candidate = getattr(value, name)
            if not _is_zero(candidate):
                return candidate

    return _NO_ID


def _field_ignored(field_path: str, name: str, cls: type, options: CompareOptions) -> bool:
    ignored = options.ignored_fields
    if not ignored:
        return False
    return (
        field_path in ignored
        or name in ignored
        or f"{cls.__name__}.{name}" in ignored
    )


# ═══════════════════════════════════════════════════════════════════
#  TRAVERSAL
# ═══════════════════════════════════════════════════════════════════

class Traversal:
    """
    One top-level comparison in progress.

    Owns the traversal context and the shared record list.  Type
    handlers receive the traversal so they can report records and
    recurse; nothing else should hold on to it.
    """

    def __init__(self, options: CompareOptions):
        self.options = options
        self.context = TraversalContext()
        self.records: list[DiffRecord] = []

    def report(self, record: DiffRecord) -> None:
        self.records.append(record)

    def compare(self, path: str, left: Any, right: Any,
                options: Optional[CompareOptions] = None) -> None:
        """Compare two values at ``path``, appending any differences."""
        options = options or self.options
        if options.max_depth and self.context.depth >= options.max_depth:
            logger.debug("max depth %d reached at %s", options.max_depth, path or "(root)")
            return
        with self.context.descend():
            self._dispatch(path, left, right, options)

    def _dispatch(self, path: str, left: Any, right: Any, options: CompareOptions) -> None:
        if options.is_ignored(path):
            return

        left_kind = kind_of(left)
        right_kind = kind_of(right)

        if left is right and _is_reference_like(left_kind):
            return

        if left_kind is Kind.NIL and right_kind is Kind.NIL:
            return
        if left_kind is Kind.NIL:
            self.report(ValueDiff(path, MISSING, right))
            return
        if right_kind is Kind.NIL:
            self.report(ValueDiff(path, left, MISSING))
            return

        typ = type(left)
        if typ is not type(right):
            self._type_mismatch(path, left, right, left_kind, right_kind, options)
            return

        comparator = options.custom_comparators.get(typ)
        if comparator is not None:
            try:
                equal = comparator(left, right, options)
            except StructDiffError:
                raise
            except Exception as error:
                logger.debug("custom comparator for %s failed at %s", typ.__name__, path)
                raise HandlerError(path, comparator, error) from error
            if not equal:
                self.report(ValueDiff(path, left, right))
            return

        for handler in options.type_handlers:
            if handler.can_handle(typ):
                try:
                    handler.compare(left, right, path, self)
                except StructDiffError:
                    raise
                except Exception as error:
                    logger.debug("type handler %r failed at %s", handler, path)
                    raise HandlerError(path, handler, error) from error
                return

        if left_kind is Kind.STRUCT:
            with self.context.visiting(left, right, path) as fresh:
                if fresh:
                    self._compare_struct(path, left, right, options)
        elif left_kind is Kind.SEQUENCE:
            with self.context.visiting(left, right, path) as fresh:
                if fresh:
                    self._compare_sequence(path, left, right, options)
        elif left_kind is Kind.SET:
            self._compare_unordered(path, left, right)
        elif left_kind is Kind.MAPPING:
            with self.context.visiting(left, right, path) as fresh:
                if fresh:
                    self._compare_mapping(path, left, right, options)
        elif left_kind is Kind.REFERENCE:
            self._compare_reference(path, left, right, options)
        else:
            self._compare_leaf(path, left, right)

    def _type_mismatch(self, path: str, left: Any, right: Any,
                       left_kind: Kind, right_kind: Kind, options: CompareOptions) -> None:
        # two dead references of different declared types are both "nil"
        if left_kind is Kind.REFERENCE and right_kind is Kind.REFERENCE:
            if left() is None and right() is None:
                return
        if options.compare_numeric_values and is_numeric(left) and is_numeric(right):
            if not numeric_equal(left, right):
                self.report(ValueDiff(path, left, right))
            return
        self.report(ValueDiff(path, left, right))

    def _compare_leaf(self, path: str, left: Any, right: Any) -> None:
        if not deep_equal(left, right):
            self.report(ValueDiff(path, left, right))

    def _scalars_equal(self, left: Any, right: Any, options: CompareOptions) -> bool:
        if deep_equal(left, right):
            return True
        return (
            options.compare_numeric_values
            and type(left) is not type(right)
            and numeric_equal(left, right)
        )

    # ───────────────────────────────────────────────────────────────
    #  Structs
    # ───────────────────────────────────────────────────────────────

    def _compare_struct(self, path: str, left: Any, right: Any, options: CompareOptions) -> None:
        left_id = object_identity(left, options)
        right_id = object_identity(right, options)
        if left_id is not _NO_ID and right_id is not _NO_ID and not deep_equal(left_id, right_id):
            self.report(FieldDiff(path, left, right, "", ChangeKind.ID_MISMATCH))
            return

        cls = type(left)
        for policy in describe_fields(cls):
            if not policy.public:
                continue
            name = policy.name
            field_path = f"{path}.{name}" if path else name
            if IGNORE in policy.directives or _field_ignored(field_path, name, cls, options):
                continue

            left_value = getattr(left, name)
            right_value = getattr(right, name)

            if (type(left_value) is type(right_value)
                    and kind_of(left_value) is Kind.SEQUENCE):
                if left_value is right_value:
                    continue
                field_options = options
                if IGNORE_ORDER in policy.directives and not options.ignore_sequence_order:
                    field_options = options.replace(ignore_sequence_order=True)
                self._compare_sequence(field_path, left_value, right_value, field_options)
                continue

            if deep_equal(left_value, right_value):
                continue
            if type(left_value) is type(right_value) and kind_of(left_value) is Kind.SCALAR:
                self.report(FieldDiff(field_path, left_value, right_value,
                                      name, ChangeKind.UPDATED))
            else:
                self.compare(field_path, left_value, right_value, options)

    # ───────────────────────────────────────────────────────────────
    #  Sequences
    # ───────────────────────────────────────────────────────────────

    def _compare_sequence(self, path: str, left: Any, right: Any, options: CompareOptions) -> None:
        if options.ignore_sequence_order:
            self._compare_unordered(path, left, right)
            return

        left_len = len(left)
        right_len = len(right)
        for index in range(max(left_len, right_len)):
            if index < left_len and index < right_len:
                left_item = left[index]
                right_item = right[index]
                if is_basic(left_item):
                    if not self._scalars_equal(left_item, right_item, options):
                        self.report(ElementDiff(path, left_item, right_item,
                                                index, ChangeKind.UPDATED))
                else:
                    self.compare(f"{path}[{index}]", left_item, right_item, options)
            elif index < left_len:
                self.report(ElementDiff(path, left[index], MISSING, index, ChangeKind.REMOVED))
            else:
                self.report(ElementDiff(path, MISSING, right[index], index, ChangeKind.ADDED))

    def _compare_unordered(self, path: str, left: Any, right: Any) -> None:
        left_items = list(left)
        right_items = list(right)
        small = (len(left_items) <= SMALL_SEQUENCE_THRESHOLD
                 and len(right_items) <= SMALL_SEQUENCE_THRESHOLD)
        if small or not all(map(_countable, left_items)) or not all(map(_countable, right_items)):
            self._match_pairwise(path, left_items, right_items)
        else:
            self._reconcile_counts(path, left_items, right_items)

    def _match_pairwise(self, path: str, left_items: list, right_items: list) -> None:
        matched = [False] * len(right_items)
        for left_item in left_items:
            for j, right_item in enumerate(right_items):
                if not matched[j] and deep_equal(left_item, right_item):
                    matched[j] = True
                    break
            else:
                self.report(ValueDiff(path, left_item, MISSING))

        for j, right_item in enumerate(right_items):
            if not matched[j]:
                self.report(ValueDiff(path, MISSING, right_item))

    def _reconcile_counts(self, path: str, left_items: list, right_items: list) -> None:
        # keyed by type too, so 1, 1.0 and True stay distinct
        left_counts = collections.Counter((type(item), item) for item in left_items)
        right_counts = collections.Counter((type(item), item) for item in right_items)

        for (_, item), count in left_counts.items():
            for _ in range(count - right_counts.get((type(item), item), 0)):
                self.report(ValueDiff(path, item, MISSING))

        for (_, item), count in right_counts.items():
            for _ in range(count - left_counts.get((type(item), item), 0)):
                self.report(ValueDiff(path, MISSING, item))

    # ───────────────────────────────────────────────────────────────
    #  Mappings
    # ───────────────────────────────────────────────────────────────

    def _compare_mapping(self, path: str, left: Mapping, right: Mapping,
                         options: CompareOptions) -> None:
        for key, left_value in left.items():
            entry_path = f"{path}[{key}]"
            if key not in right:
                self.report(EntryDiff(entry_path, left_value, MISSING, key, ChangeKind.REMOVED))
                continue

            right_value = right[key]
            if type(left_value) is not type(right_value):
                if not (options.compare_numeric_values and numeric_equal(left_value, right_value)):
                    self.report(EntryDiff(entry_path, left_value, right_value,
                                          key, ChangeKind.UPDATED))
            elif is_basic(left_value):
                if not deep_equal(left_value, right_value):
                    self.report(EntryDiff(entry_path, left_value, right_value,
                                          key, ChangeKind.UPDATED))
            else:
                self.compare(entry_path, left_value, right_value, options)

        for key, right_value in right.items():
            if key not in left:
                self.report(EntryDiff(f"{path}[{key}]", MISSING, right_value,
                                      key, ChangeKind.ADDED))

    # ───────────────────────────────────────────────────────────────
    #  References
    # ───────────────────────────────────────────────────────────────

    def _compare_reference(self, path: str, left: weakref.ref, right: weakref.ref,
                           options: CompareOptions) -> None:
        left_target = left()
        right_target = right()
        if left_target is None and right_target is None:
            return
        if left_target is None or right_target is None:
            self.compare(path, left_target, right_target, options)
            return

        with self.context.visiting(left, right, path) as fresh:
            if fresh:
                self.compare(path, left_target, right_target, options)


# ═══════════════════════════════════════════════════════════════════
#  ENTRY POINT
# ═══════════════════════════════════════════════════════════════════

def compare(left: Any, right: Any, options: Optional[CompareOptions] = None,
            **overrides) -> DiffResult:
    """
    Structural difference between ``left`` and ``right``.

    ``overrides`` are ``CompareOptions`` fields applied on top of
    ``options`` (or the defaults):

        compare(a, b, ignore_sequence_order=True, max_depth=3)

    Raises ``HandlerError`` if a custom comparator or type handler
    fails; in that case no partial result exists.
    """
    if options is None:
        options = CompareOptions(**overrides)
    elif overrides:
        options = options.replace(**overrides)

    traversal = Traversal(options)
    logger.debug("comparing %s with %s", type(left).__name__, type(right).__name__)
    traversal.compare("", left, right)
    logger.debug("comparison finished with %d differences", len(traversal.records))
    return DiffResult(tuple(traversal.records))
