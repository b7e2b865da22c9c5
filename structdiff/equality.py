"""
structdiff.equality — Cycle-safe deep structural equality.

``deep_equal`` answers "are these two values the same, all the way
down?" without producing any records.  The comparison engine uses it
to skip unchanged fields, to compare identity values and to match
elements of order-insensitive sequences.

Unlike ``==`` it:
    • requires identical types at every level (``1`` is not ``1.0``,
      ``[1]`` is not ``(1,)``)
    • compares dataclasses field by field, private fields included
    • terminates on cyclic structures (a pair of containers that is
      re-entered while being compared is assumed equal)
    • never raises on values whose ``==`` has no truth value (numpy
      arrays): those are compared element by element, or are unequal
      if they cannot be iterated
"""

import dataclasses
from collections import deque
from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any


def deep_equal(left: Any, right: Any) -> bool:
    """Structural equality of two arbitrary values."""
    return _deep_equal(left, right, set())


def _deep_equal(left: Any, right: Any, visited: set) -> bool:
    if type(left) is not type(right):
        return False

    if isinstance(left, (list, tuple, deque, Mapping, SimpleNamespace)) or _is_dataclass(left):
        if left is right:
            return True
        key = (id(left), id(right))
        if key in visited:
            return True
        visited.add(key)
        try:
            return _compare_composite(left, right, visited)
        finally:
            visited.discard(key)

    return _leaf_equal(left, right, visited)


def _leaf_equal(left: Any, right: Any, visited: set) -> bool:
    try:
        return bool(left == right)
    except (TypeError, ValueError, ArithmeticError):
        pass

    # array-like: == is element-wise and has no single truth value
    try:
        if len(left) != len(right):
            return False
        pairs = list(zip(left, right))
    except TypeError:
        return False
    return all(_deep_equal(a, b, visited) for a, b in pairs)


def _compare_composite(left: Any, right: Any, visited: set) -> bool:
    if _is_dataclass(left):
        return all(
            _deep_equal(getattr(left, f.name), getattr(right, f.name), visited)
            for f in dataclasses.fields(left)
        )

    if isinstance(left, SimpleNamespace):
        return _mapping_equal(vars(left), vars(right), visited)

    if isinstance(left, Mapping):
        return _mapping_equal(left, right, visited)

    if len(left) != len(right):
        return False
    return all(_deep_equal(a, b, visited) for a, b in zip(left, right))


def _mapping_equal(left: Mapping, right: Mapping, visited: set) -> bool:
    if len(left) != len(right):
        return False
    for key, value in left.items():
        if key not in right:
            return False
        if not _deep_equal(value, right[key], visited):
            return False
    return True


def _is_dataclass(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)
