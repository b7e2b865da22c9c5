"""
structdiff.handlers — Pluggable comparison for special types.

A type handler claims exclusive responsibility for one kind of value.
``CompareOptions.type_handlers`` is an ordered list; for each pair of
values of the same type, the first handler whose ``can_handle`` accepts
that type does the whole comparison for the subtree.

Handlers report differences and recurse through the ``Traversal`` they
are given:

    class CaseInsensitiveHandler(TypeHandler):
        def can_handle(self, typ):
            return typ is Label

        def compare(self, left, right, path, traversal):
            if left.casefold() != right.casefold():
                traversal.report(ValueDiff(path, left, right))

Anything a handler raises aborts the comparison as a ``HandlerError``.
"""

import asyncio
import datetime
import functools
import queue
import types
from typing import TYPE_CHECKING, Any

from .records import MISSING, ChangeKind, FieldDiff, ValueDiff

if TYPE_CHECKING:
    from .core import Traversal


class TypeHandler:
    """Base class for type handlers.  Not instantiated directly."""
    __slots__ = ()

    def can_handle(self, typ: type) -> bool:
        raise NotImplementedError

    def compare(self, left: Any, right: Any, path: str, traversal: "Traversal") -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DateTimeHandler(TypeHandler):
    """
    Timestamps compare as instants.

    Two aware datetimes in different time zones that denote the same
    moment are equal.  A naive datetime never equals an aware one.
    """
    __slots__ = ()

    def can_handle(self, typ: type) -> bool:
        return issubclass(typ, datetime.datetime)

    def compare(self, left, right, path, traversal):
        if not isinstance(left, datetime.datetime) or not isinstance(right, datetime.datetime):
            raise TypeError(
                f"DateTimeHandler received non-datetime values: "
                f"left={type(left).__name__}, right={type(right).__name__}"
            )
        if left != right:
            traversal.report(ValueDiff(path, left, right))


class NamespaceHandler(TypeHandler):
    """
    Dynamic attribute containers (``types.SimpleNamespace``).

    Attributes are compared like struct fields, except that the set of
    attributes may differ between the two sides: an attribute present on
    one side only is reported as ADDED or REMOVED.
    """
    __slots__ = ()

    def can_handle(self, typ: type) -> bool:
        return issubclass(typ, types.SimpleNamespace)

    def compare(self, left, right, path, traversal):
        with traversal.context.visiting(left, right, path) as fresh:
            if not fresh:
                return
            left_attrs = vars(left)
            right_attrs = vars(right)

            for name, left_value in left_attrs.items():
                attr_path = f"{path}.{name}" if path else name
                if name not in right_attrs:
                    traversal.report(FieldDiff(attr_path, left_value, MISSING,
                                               name, ChangeKind.REMOVED))
                    continue
                traversal.compare(attr_path, left_value, right_attrs[name])

            for name, right_value in right_attrs.items():
                if name not in left_attrs:
                    attr_path = f"{path}.{name}" if path else name
                    traversal.report(FieldDiff(attr_path, MISSING, right_value,
                                               name, ChangeKind.ADDED))


_CALLABLE_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.BuiltinMethodType,
    types.MethodWrapperType,
    functools.partial,
)


class CallableHandler(TypeHandler):
    """
    Functions, methods and partials compare with ``==``.

    For plain functions that is identity; bound methods are equal when
    they bind the same function to the same object.
    """
    __slots__ = ()

    def can_handle(self, typ: type) -> bool:
        return issubclass(typ, _CALLABLE_TYPES)

    def compare(self, left, right, path, traversal):
        if left is not right and left != right:
            traversal.report(ValueDiff(path, left, right))


_QUEUE_TYPES = (queue.Queue, queue.SimpleQueue, asyncio.Queue)


class QueueHandler(TypeHandler):
    """Queues are communication endpoints: only the same queue is equal."""
    __slots__ = ()

    def can_handle(self, typ: type) -> bool:
        return issubclass(typ, _QUEUE_TYPES)

    def compare(self, left, right, path, traversal):
        if left is not right:
            traversal.report(ValueDiff(path, left, right))


def default_type_handlers() -> list[TypeHandler]:
    """The handlers installed by a default ``CompareOptions``."""
    return [
        DateTimeHandler(),
        NamespaceHandler(),
        CallableHandler(),
        QueueHandler(),
    ]
