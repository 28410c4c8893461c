from __future__ import annotations

import ctypes
from typing import Any

from . import shape
from .shape import Shape


def _is_zero(v: Any, active: frozenset[tuple[type, int]]) -> bool:
    match shape.shape_of(v):
        case Shape.INVALID:
            # We can't tell what this is; better to show it than to drop it.
            return False
        case Shape.NONE:
            return True
        case Shape.BOOL:
            return not v
        case Shape.INT | Shape.FLOAT | Shape.COMPLEX:
            return bool(v == 0)
        case Shape.STRING:
            return len(v) == 0
        case Shape.BYTES | Shape.SEQUENCE:
            # A container that exists isn't nil; only fixed size ctypes arrays
            # can be zero.
            return isinstance(v, ctypes.Array) and len(v) == 0
        case Shape.INTERFACE:
            return v() is None
        case Shape.POINTER:
            return not v
        case Shape.CSCALAR:
            key = shape.identity(v)
            if key in active:
                return False
            return _is_zero(shape.scalar_value(v), active | {key})
        case Shape.ADDRESS:
            return isinstance(v, ctypes.c_void_p) and not v.value
        case Shape.STRUCT:
            key = shape.identity(v)
            if key in active:
                return False
            active = active | {key}
            return all(
                _is_zero(shape.unpack_value(field.value), active)
                for field in shape.struct_fields(v)
            )
    return False


def is_zero(v: Any) -> bool:
    """Whether *v* is the default value of its shape.

    >>> is_zero(0), is_zero(""), is_zero(None), is_zero([])
    (True, True, True, False)

    Values we don't know how to inspect are never zero.
    """
    try:
        return _is_zero(v, frozenset())
    except Exception:
        return False


def is_elidable(field: shape.Field) -> bool:
    """Whether *field* can be left out of a constructor call.

    The value has to be zero and leaving it out has to give the same value
    back.
    """
    value = shape.unpack_value(field.value)
    if field.default is shape.ZERO:
        # ctypes reads `c_char` and `c_wchar` fields (and arrays of them) back
        # as strings
        if isinstance(value, bytes):
            return not value.strip(b"\0")
        if isinstance(value, str):
            return not value.strip("\0")
        return is_zero(value)
    if not is_zero(value):
        return False
    if field.default is shape.MISSING:
        return False
    return is_zero(field.default)
