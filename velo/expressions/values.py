"""
Value semantics for template expressions.

Host values flow through templates untouched; operators classify them into
a closed set of kinds and fail explicitly on unsupported combinations.
Integer arithmetic follows signed 32-bit wraparound, division truncates
toward zero and the remainder takes the sign of the dividend.
"""

from __future__ import annotations

from collections.abc import Sized
from enum import Enum
from typing import Any

from ..errors import EvaluationError

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


class ValueKind(Enum):
    """Closed classification of runtime values."""
    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    STRING = "string"
    OBJECT = "object"


def kind_of(value: Any) -> ValueKind:
    # bool is a subclass of int and must be checked first
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, str):
        return ValueKind.STRING
    return ValueKind.OBJECT


def is_integer(value: Any) -> bool:
    return kind_of(value) is ValueKind.INTEGER


def wrap_int32(value: int) -> int:
    """Reduce an integer to the signed 32-bit range with two's complement wraparound."""
    value &= _INT32_MASK
    return value - (1 << 32) if value & _INT32_SIGN else value


def render(value: Any) -> str:
    """
    Textual form of a value as the template emits it.

    None has no textual form under the strict reference policy. A failing
    __str__ of a host object is reported as EvaluationError chained to the
    original exception.
    """
    kind = kind_of(value)
    if kind is ValueKind.NULL:
        raise EvaluationError("Cannot render null value")
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    try:
        return str(value)
    except Exception as e:
        raise EvaluationError(f"{type_name(value)}.__str__ raised {type(e).__name__}: {e}") from e


def is_truthy(value: Any) -> bool:
    """
    Truthiness in boolean context.

    Booleans are used directly; None and empty strings or collections are
    false; every other value, including the integer 0, is true.
    """
    kind = kind_of(value)
    if kind is ValueKind.BOOLEAN:
        return value
    if kind is ValueKind.NULL:
        return False
    if kind is ValueKind.INTEGER:
        return True
    if isinstance(value, Sized):
        return len(value) > 0
    return True


def values_equal(left: Any, right: Any) -> bool:
    """
    Equality used by == and !=.

    Two integers compare numerically. Otherwise the rendered strings are
    compared, so 123 == "123" holds, and so does equality of two distinct
    objects whose str() is the same.
    """
    if is_integer(left) and is_integer(right):
        return left == right
    if left is None or right is None:
        return left is None and right is None
    return render(left) == render(right)


def arithmetic(symbol: str, left: int, right: int) -> int:
    """
    Apply an arithmetic operator to two integers.

    Raises:
        ZeroDivisionError: For / and % with a zero right operand
    """
    if symbol == "+":
        result = left + right
    elif symbol == "-":
        result = left - right
    elif symbol == "*":
        result = left * right
    elif symbol == "/":
        result = _truncated_quotient(left, right)
    elif symbol == "%":
        result = left - right * _truncated_quotient(left, right)
    else:
        raise ValueError(f"Unknown arithmetic operator: {symbol}")
    return wrap_int32(result)


def negate(value: int) -> int:
    return wrap_int32(-value)


def _truncated_quotient(left: int, right: int) -> int:
    if right == 0:
        raise ZeroDivisionError(f"{left} / 0")
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def compare(symbol: str, left: int, right: int) -> bool:
    if symbol == "<":
        return left < right
    if symbol == ">":
        return left > right
    if symbol == "<=":
        return left <= right
    if symbol == ">=":
        return left >= right
    raise ValueError(f"Unknown relational operator: {symbol}")


def type_name(value: Any) -> str:
    """Short description of a value for error messages."""
    kind = kind_of(value)
    if kind is ValueKind.OBJECT:
        return type(value).__name__
    return kind.value


__all__ = [
    "ValueKind",
    "kind_of",
    "is_integer",
    "wrap_int32",
    "render",
    "is_truthy",
    "values_equal",
    "arithmetic",
    "negate",
    "compare",
    "type_name",
]
