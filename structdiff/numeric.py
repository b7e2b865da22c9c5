"""
structdiff.numeric — Value equality across numeric types.

Only consulted when ``CompareOptions.compare_numeric_values`` is set and
the two sides are numbers of different types, e.g. ``42`` vs ``42.0``
or ``Decimal("1.5")`` vs ``1.5``.

Numbers fall into four categories:

    SIGNED     int, numpy-like signed integers
    UNSIGNED   numpy-like unsigned integers (dtype kind "u")
    FLOAT      float, Decimal, Fraction, numpy-like floats
    COMPLEX    complex, numpy-like complex numbers

``bool`` is not a number here, even though it subclasses ``int``.

Equality is exact.  There is no epsilon: a float only equals an integer
when the integer survives a round trip through float unchanged, and NaN
equals nothing, not even itself.
"""

import math
import numbers
from decimal import Decimal
from enum import Enum, auto
from typing import Any, Optional


class NumericCategory(Enum):
    SIGNED = auto()
    UNSIGNED = auto()
    FLOAT = auto()
    COMPLEX = auto()


_DTYPE_KINDS = {
    "i": NumericCategory.SIGNED,
    "u": NumericCategory.UNSIGNED,
    "f": NumericCategory.FLOAT,
    "c": NumericCategory.COMPLEX,
}

_INTEGERS = (NumericCategory.SIGNED, NumericCategory.UNSIGNED)


def numeric_category(value: Any) -> Optional[NumericCategory]:
    """Classify ``value``, or return None if it is not a number."""
    if isinstance(value, bool):
        return None
    dtype = getattr(value, "dtype", None)
    if dtype is not None:
        # numpy-like scalar; bools have kind "b" and fall through to None
        return _DTYPE_KINDS.get(getattr(dtype, "kind", None))
    if isinstance(value, numbers.Integral):
        return NumericCategory.SIGNED
    if isinstance(value, (numbers.Real, Decimal)):
        return NumericCategory.FLOAT
    if isinstance(value, numbers.Complex):
        return NumericCategory.COMPLEX
    return None


def is_numeric(value: Any) -> bool:
    return numeric_category(value) is not None


def numeric_equal(left: Any, right: Any) -> bool:
    """
    Compare two numbers of possibly different types by value.

    Returns False if either side is not a number.
    """
    left_cat = numeric_category(left)
    right_cat = numeric_category(right)
    if left_cat is None or right_cat is None:
        return False

    if left_cat is right_cat:
        return bool(left == right)

    if left_cat is NumericCategory.COMPLEX or right_cat is NumericCategory.COMPLEX:
        return _complex_equal(left, left_cat, right, right_cat)

    if left_cat in _INTEGERS and right_cat in _INTEGERS:
        # signed vs unsigned: a negative value never matches
        if int(left) < 0 or int(right) < 0:
            return False
        return int(left) == int(right)

    if left_cat in _INTEGERS:
        return _integer_equals_real(left, right)
    if right_cat in _INTEGERS:
        return _integer_equals_real(right, left)

    return bool(left == right)


def _integer_equals_real(integer: Any, real: Any) -> bool:
    """An integer equals a real only if it is exactly representable as float."""
    as_int = int(integer)
    try:
        as_float = float(as_int)
    except OverflowError:
        return False
    if int(as_float) != as_int:
        return False
    if isinstance(real, Decimal):
        if not real.is_finite():
            return False
        return Decimal(as_int) == real
    if not math.isfinite(float(real)):
        return False
    return bool(as_float == real)


def _complex_equal(left: Any, left_cat: NumericCategory,
                   right: Any, right_cat: NumericCategory) -> bool:
    # exactly one side is complex
    if left_cat is NumericCategory.COMPLEX:
        value, other = complex(left), right
    else:
        value, other = complex(right), left
    if value.imag != 0:
        return False
    return numeric_equal(value.real, other)
