"""
structdiff.options — Comparison configuration.

``CompareOptions`` is an explicit value passed to ``compare()``; there
is no global configuration.  It is frozen and carries no traversal
state, so one instance can be reused freely, including from several
threads at once.

    opts = CompareOptions(ignored_fields={"User.password"}, max_depth=5)
    compare(a, b, opts)
    compare(a, b, opts, ignore_sequence_order=True)   # keyword overrides win
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from .exceptions import OptionsError
from .handlers import TypeHandler, default_type_handlers

Comparator = Callable[[Any, Any, "CompareOptions"], bool]


@dataclass(frozen=True)
class CompareOptions:
    """
    Every option toggles independently.

    ignored_fields:
        Field names (``password``), full paths (``Address.city``,
        ``items[0].price``) or type-qualified names (``User.password``)
        to skip.
    identity_fields:
        Field names tried in order to find a struct's identity when no
        field carries the ``id`` directive.
    ignore_sequence_order:
        Match sequence elements by value instead of position.
    compare_numeric_values:
        Numbers of different types compare by value (``1 == 1.0``)
        instead of being a type mismatch.
    custom_comparators:
        ``{type: fn(left, right, options) -> bool}`` for exact types;
        returning False reports a difference.
    type_handlers:
        Ordered ``TypeHandler`` list; first match wins.
    max_depth:
        Recursion limit, 0 for unlimited.  Anything deeper is silently
        treated as equal.
    """
    ignored_fields: frozenset[str] = frozenset()
    identity_fields: tuple[str, ...] = ()
    ignore_sequence_order: bool = False
    compare_numeric_values: bool = False
    custom_comparators: Mapping[type, Comparator] = field(default_factory=dict)
    type_handlers: tuple[TypeHandler, ...] = field(
        default_factory=lambda: tuple(default_type_handlers())
    )
    max_depth: int = 0

    def __post_init__(self):
        # accept any iterable for the collection options
        object.__setattr__(self, "ignored_fields", _as_frozenset(self.ignored_fields))
        object.__setattr__(self, "identity_fields", _as_tuple(self.identity_fields))
        object.__setattr__(self, "type_handlers", tuple(self.type_handlers or ()))
        object.__setattr__(self, "custom_comparators", dict(self.custom_comparators or {}))

        for key in self.custom_comparators:
            if not isinstance(key, type):
                raise OptionsError(f"custom_comparators keys must be types, got {key!r}")
        if not isinstance(self.max_depth, int) or self.max_depth < 0:
            raise OptionsError(f"max_depth must be a non-negative integer, got {self.max_depth!r}")

    def replace(self, **changes) -> "CompareOptions":
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def is_ignored(self, path: str) -> bool:
        return path in self.ignored_fields


def _as_frozenset(value: Iterable[str]) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset((value,))
    return frozenset(value or ())


def _as_tuple(value: Iterable[str]) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(value or ())
