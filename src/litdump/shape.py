"""
``litdump.shape``: Run time classification of values
=====================================================

The dumper never knows the type of what it is looking at statically. At every
step of the traversal it asks :func:`shape_of` which family a value belongs to
and dispatches on the answer.

"""
from __future__ import annotations

import array
import ctypes
import dataclasses
import enum
import inspect
import types
import weakref
from typing import Any, Final, Iterator, NamedTuple


class Shape(enum.Enum):
    "The families of values the dumper knows how to render."

    #: The "no value" sentinel :data:`INVALID`
    INVALID = enum.auto()
    NONE = enum.auto()
    BOOL = enum.auto()
    INT = enum.auto()
    FLOAT = enum.auto()
    COMPLEX = enum.auto()
    STRING = enum.auto()
    #: Any container of byte sized integers, and memory views.
    BYTES = enum.auto()
    SEQUENCE = enum.auto()
    SET = enum.auto()
    MAPPING = enum.auto()
    STRUCT = enum.auto()
    #: :mod:`ctypes` pointers
    POINTER = enum.auto()
    #: Slots whose content is only known at run time (weak references)
    INTERFACE = enum.auto()
    #: :mod:`ctypes` simple scalars
    CSCALAR = enum.auto()
    #: Values that only have an identity: functions, classes, modules, ...
    ADDRESS = enum.auto()
    OTHER = enum.auto()


class _Invalid:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<invalid>"


#: Stands in for a value that could not be read (e.g.: an unset slot).
INVALID: Final = _Invalid()

#: Marks a field without a default value
MISSING: Final[Any] = object()

#: Marks a field whose default is the zero of its shape (ctypes structures
#: are zero filled)
ZERO: Final[Any] = object()

BYTE_TYPECODES: Final = frozenset("bB")

# c_uint8 and c_int8 are aliases of c_ubyte and c_byte
BYTE_CTYPES: Final = (ctypes.c_char, ctypes.c_byte, ctypes.c_ubyte)

CTYPES_SCALAR: Final = ctypes._SimpleCData
CTYPES_POINTER: Final = ctypes._Pointer
CTYPES_FUNCTION: Final = ctypes._CFuncPtr
CTYPES_STRUCT: Final = (ctypes.Structure, ctypes.Union)
CTYPES_DATA: Final = (
    CTYPES_SCALAR,
    CTYPES_POINTER,
    CTYPES_FUNCTION,
    ctypes.Array,
    *CTYPES_STRUCT,
)

_ADDRESS_TYPES: Final = (
    type,
    types.ModuleType,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.GeneratorType,
    types.CoroutineType,
    ctypes.c_void_p,
    CTYPES_FUNCTION,
)


class Field(NamedTuple):
    "A member of a struct as it should be passed to its constructor."
    name: str
    value: Any
    default: Any = MISSING


def is_namedtuple(v: Any) -> bool:
    return isinstance(v, tuple) and hasattr(type(v), "_fields")


def shape_of(v: Any) -> Shape:
    """Classify *v*.

    >>> shape_of([1, 2]) is Shape.SEQUENCE
    True
    """
    if v is INVALID:
        return Shape.INVALID
    if v is None:
        return Shape.NONE
    # The order matters: `bool` is a subclass of `int`
    if isinstance(v, bool):
        return Shape.BOOL
    if isinstance(v, int):
        return Shape.INT
    if isinstance(v, float):
        return Shape.FLOAT
    if isinstance(v, complex):
        return Shape.COMPLEX
    if isinstance(v, str):
        return Shape.STRING
    if isinstance(v, bytes | bytearray | memoryview):
        return Shape.BYTES
    if isinstance(v, array.array):
        return Shape.BYTES if v.typecode in BYTE_TYPECODES else Shape.SEQUENCE
    if isinstance(v, weakref.ReferenceType):
        return Shape.INTERFACE
    if isinstance(v, CTYPES_POINTER):
        return Shape.POINTER
    if isinstance(v, ctypes.Array):
        if issubclass(v._type_, BYTE_CTYPES):
            return Shape.BYTES
        return Shape.SEQUENCE
    if isinstance(v, _ADDRESS_TYPES):
        return Shape.ADDRESS
    if isinstance(v, CTYPES_SCALAR):
        return Shape.CSCALAR
    if isinstance(v, CTYPES_STRUCT):
        return Shape.STRUCT
    if is_namedtuple(v):
        return Shape.STRUCT
    if isinstance(v, list | tuple):
        return Shape.SEQUENCE
    if isinstance(v, set | frozenset):
        return Shape.SET
    if isinstance(v, dict):
        return Shape.MAPPING
    if inspect.isroutine(v):
        return Shape.ADDRESS
    if isinstance(v, BaseException):
        return Shape.OTHER
    if dataclasses.is_dataclass(v):
        return Shape.STRUCT
    if hasattr(v, "__dict__") or _slot_names(type(v)):
        return Shape.STRUCT
    return Shape.OTHER


def unpack_value(v: Any) -> Any:
    """Return the value held in a weak reference.

    A dead reference unpacks to ``None``.
    """
    if isinstance(v, weakref.ReferenceType):
        return v()
    return v


def identity(v: Any) -> tuple[type, int]:
    """A key identifying the storage behind *v*.

    ctypes hands out new python wrappers every time a field or a pointer is
    accessed so we use the address of the underlying memory instead. A
    structure and its first member share their address, hence the type.
    """
    if isinstance(v, CTYPES_DATA):
        return type(v), ctypes.addressof(v)
    return type(v), id(v)


def _read(v: Any, name: str) -> Any:
    try:
        return getattr(v, name)
    except AttributeError:
        return INVALID


def scalar_value(v: Any) -> Any:
    """The value held by a ctypes scalar; an empty `py_object` is INVALID."""
    try:
        return v.value
    except ValueError:
        return INVALID


def _slot_names(ty: type) -> list[str]:
    res: list[str] = []
    for cls in reversed(ty.__mro__):
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot not in ("__dict__", "__weakref__") and slot not in res:
                res.append(slot)
    return res


def _init_defaults(ty: type) -> dict[str, Any]:
    try:
        sig = inspect.signature(ty)
    except (TypeError, ValueError):
        return {}
    return {
        name: param.default
        for name, param in sig.parameters.items()
        if param.default is not inspect.Parameter.empty
    }


def _dataclass_fields(v: Any) -> Iterator[Field]:
    for fld in dataclasses.fields(v):
        if not fld.init:
            continue
        default = fld.default
        if default is dataclasses.MISSING:
            if fld.default_factory is not dataclasses.MISSING:
                default = fld.default_factory()
            else:
                default = MISSING
        yield Field(fld.name, _read(v, fld.name), default)


def _object_fields(v: Any) -> Iterator[Field]:
    names = [*_slot_names(type(v)), *getattr(v, "__dict__", {})]
    defaults = _init_defaults(type(v))
    seen = set()
    for name in names:
        # Private attributes cannot be passed to the constructor
        if name.startswith("_") or name in seen:
            continue
        seen.add(name)
        yield Field(name, _read(v, name), defaults.get(name, MISSING))


def struct_fields(v: Any) -> list[Field]:
    """The fields of a struct, in declaration order."""
    if isinstance(v, CTYPES_STRUCT):
        return [
            Field(spec[0], _read(v, spec[0]), ZERO)
            for spec in getattr(type(v), "_fields_", ())
        ]
    if is_namedtuple(v):
        defaults = getattr(type(v), "_field_defaults", {})
        return [
            Field(name, value, defaults.get(name, MISSING))
            for name, value in zip(type(v)._fields, v)
        ]
    if dataclasses.is_dataclass(v):
        return list(_dataclass_fields(v))
    return list(_object_fields(v))
