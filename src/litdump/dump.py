"""
``litdump.dump``: Turn values into python literals
==================================================

:class:`DumpState` walks a value and writes python code that rebuilds it::

    >>> print(sdump({"b": [1, 2], "a": None}, config=Config(sort_keys=True)))
    {
      'a': None,
      'b': [
        1,
        2,
      ],
    }
    <BLANKLINE>

The session driver (:func:`fdump`, :func:`sdump`, :func:`dump`) runs one
:class:`DumpState` per value and puts the ``import`` statements the literals
need in front of them.

"""
from __future__ import annotations

import array
import collections
import ctypes
import io
import math
import sys
import warnings
from typing import Any, Callable, Final, Iterable, Protocol, TypeVar

from . import naming, shape, utils, zero
from .config import DEFAULT_CONFIG, Config
from .shape import Shape

T = TypeVar("T")

__all__ = (
    "DumpState",
    "DumpWarning",
    "dump",
    "dump_with_dependencies",
    "fdump",
    "sdump",
)

#: Written instead of a value we are already in the middle of dumping.
CIRCULAR: Final = "..."

#: Written instead of the content of a block nested too deeply.
MAX_DEPTH: Final = "# <max depth reached>"

NIL: Final = "None"

# Shapes that have an identity we track to detect cycles.
_REFERENCES: Final = frozenset(
    (Shape.SEQUENCE, Shape.SET, Shape.MAPPING, Shape.STRUCT, Shape.CSCALAR)
)

# Native formats `memoryview.cast` accepts
_CAST_FORMATS: Final = frozenset("bBchHiIlLqQnNfd?ePp")


class DumpWarning(UserWarning):
    """Part of a value could not be rendered faithfully."""


class Sink(Protocol):  # pragma: no cover
    def write(self, s: str, /) -> object:
        ...


def _float(f: float) -> str:
    if math.isnan(f):
        return 'float("nan")'
    if math.isinf(f):
        return 'float("inf")' if f > 0 else '-float("inf")'
    return float.__repr__(f)


def _renders_itself(v: Any) -> bool:
    """Does the class of *v* define how it is turned into a string?"""
    if isinstance(v, BaseException):
        return True
    for cls in type(v).__mro__:
        if "__str__" in cls.__dict__:
            return cls.__module__ != "builtins"
    return False


def _fallback_key(v: Any) -> tuple[str, int, Any, str]:
    name = type(v).__qualname__
    if isinstance(v, int | float):
        return name, 0, v, ""
    return name, 1, 0, repr(v)


def _sorted(
    values: Iterable[T], key: Callable[[T], Any] = lambda x: x
) -> list[T]:
    values = list(values)
    try:
        return sorted(values, key=key)
    except TypeError:
        # Mixed types: group them by type
        return sorted(values, key=lambda v: _fallback_key(key(v)))


def _to_byte(x: Any) -> int:
    if isinstance(x, bytes):
        [res] = x
        return res
    return int(x) & 0xFF


def _byte_block(v: Any) -> bytes:
    try:
        return memoryview(v).tobytes()
    except TypeError:
        return bytes(_to_byte(x) for x in v)


class DumpState:
    """The state of the dump of one value.

    Attributes:
      depth: How deeply nested the value currently being written is.
      pointers: Identity of the values we are in the middle of dumping
        mapped to the depth at which we entered them.
      namer: Names types and collects the modules to import.
    """

    depth: int
    pointers: dict[tuple[type, int], int]
    namer: naming.TypeNamer
    config: Config

    def __init__(self, sink: Sink, config: Config = DEFAULT_CONFIG) -> None:
        self.sink = sink
        self.config = config
        self.depth = 0
        self.pointers = {}
        self.namer = naming.TypeNamer(config.rules)
        # Since we rely on `id` to detect cycles we have to hold on to all the
        # values we visited to make sure addresses do not get reused
        self._transient: list[Any] = []

    @property
    def dependencies(self) -> naming.Dependencies:
        return self.namer.dependencies

    def write(self, s: str) -> None:
        self.sink.write(s)

    def indent(self, skip: bool = False) -> None:
        if not skip:
            self.write(self.config.indent * self.depth)

    def warn(self, message: str) -> None:
        warnings.warn(message, DumpWarning, stacklevel=3)

    def _truncated(self) -> bool:
        return 0 < self.config.max_depth < self.depth

    def _truncates_next(self) -> bool:
        "Would a block opened now be cut by `max_depth`?"
        return 0 < self.config.max_depth <= self.depth

    def _purge(self) -> None:
        # Values entered at this depth or deeper belong to branches we
        # already left.
        for key, depth in list(self.pointers.items()):
            if depth >= self.depth:
                del self.pointers[key]

    def _enter(self, v: Any) -> bool:
        """Record that we are dumping *v*; ``False`` if it's a cycle."""
        self._purge()
        key = shape.identity(v)
        seen = self.pointers.get(key)
        if seen is not None and seen < self.depth:
            return False
        self.pointers[key] = self.depth
        self._transient.append(v)
        return True

    def _ctype_name(self, ty: type) -> str:
        if issubclass(ty, ctypes.Array):
            return f"({self._ctype_name(ty._type_)} * {ty._length_})"
        if issubclass(ty, shape.CTYPES_POINTER):
            self.dependencies.add("ctypes")
            return f"ctypes.POINTER({self._ctype_name(ty._type_)})"
        return self.namer.name(ty)

    def _constructor(self, v: Any, builtin: type) -> tuple[str, str]:
        "Wrap the literal of a subclass of a builtin in a conversion."
        if type(v) is builtin:
            return "", ""
        if isinstance(v, collections.defaultdict):
            factory = v.default_factory
            factory_name = (
                NIL if factory is None else self.namer.reference(factory)
            )
            if factory_name is None:
                self.warn(
                    "Cannot name the default factory of "
                    + utils.cram(repr(v), 60)
                )
                factory_name = NIL
            return f"{self.namer.name(type(v))}({factory_name}, ", ")"
        return f"{self.namer.name(type(v))}(", ")"

    def _typed_array(self, v: array.array[Any]) -> tuple[str, str]:
        return f"{self.namer.name(array.array)}({v.typecode!r}, ", ")"

    def _memoryview(self, v: memoryview) -> tuple[str, str]:
        "Views of anything but unsigned bytes are rebuilt with `cast`."
        prefix = f"{self.namer.name(memoryview)}("
        fmt = v.format.removeprefix("@")
        if fmt == "B" and v.ndim == 1:
            return prefix, ")"
        if fmt not in _CAST_FORMATS:
            self.warn(f"Cannot rebuild a memoryview of format {v.format!r}")
            return prefix, ")"
        dims = f", {list(v.shape)!r}" if v.ndim > 1 else ""
        return prefix, f").cast({fmt!r}{dims})"

    def _affixes(self, v: Any, kind: Shape) -> tuple[str, str]:
        """What to write before and after the body of *v*."""
        match kind:
            case Shape.BOOL | Shape.NONE:
                return "", ""
            case Shape.INT:
                return self._constructor(v, int)
            case Shape.FLOAT:
                return self._constructor(v, float)
            case Shape.COMPLEX:
                return self._constructor(v, complex)
            case Shape.STRING:
                return self._constructor(v, str)
            case Shape.BYTES:
                if isinstance(v, ctypes.Array):
                    name = self._ctype_name(type(v))
                    return f"{name}.from_buffer_copy(", ")"
                if isinstance(v, array.array):
                    return self._typed_array(v)
                if isinstance(v, memoryview):
                    return self._memoryview(v)
                return self._constructor(v, bytes)
            case Shape.SEQUENCE:
                if isinstance(v, ctypes.Array):
                    return self._ctype_name(type(v)), ""
                if isinstance(v, array.array):
                    return self._typed_array(v)
                builtin = list if isinstance(v, list) else tuple
                return self._constructor(v, builtin)
            case Shape.SET:
                if not v:
                    return self.namer.name(type(v)), ""
                return self._constructor(v, set)
            case Shape.MAPPING:
                return self._constructor(v, dict)
            case Shape.STRUCT | Shape.CSCALAR:
                # The name of the constructor, the body provides the call.
                return self.namer.name(type(v)), ""
        return "", ""

    def dump(
        self, v: Any, *, skip_type: bool = False, skip_indent: bool = False
    ) -> None:
        """Write the literal of *v*.

        Args:
          skip_type: The constructor of *v* was already written by the
            caller.
          skip_indent: *v* follows something on the current line.
        """
        kind = shape.shape_of(v)
        if kind is Shape.INTERFACE:
            v = shape.unpack_value(v)
            kind = shape.shape_of(v)

        if kind is Shape.INVALID:
            self.warn("Found a value that cannot be read")
            self.indent(skip_indent)
            self.write(NIL)
            return

        if kind is Shape.POINTER:
            self.indent(skip_indent)
            self._dump_pointer(v)
            return

        suffix = ""
        if not skip_type:
            self.indent(skip_indent)
            special = self.namer.render(v)
            if special is not None:
                self.write(special)
                return
            if self.config.invoke_stringers and self._handle_methods(v, kind):
                return
            if kind in _REFERENCES and not self._enter(v):
                self.write(CIRCULAR)
                return
            prefix, suffix = self._affixes(v, kind)
            self.write(prefix)

        self._dump_body(v, kind)
        self.write(suffix)

    def _handle_methods(self, v: Any, kind: Shape) -> bool:
        if kind is Shape.NONE or not _renders_itself(v):
            return False
        try:
            text = str(v)
        except Exception as e:
            self.warn(
                f"str() failed on a {type(v).__name__}: "
                f"{type(e).__name__} {e}"
            )
            return False
        self.write(repr(text))
        return True

    def _dump_pointer(self, v: Any) -> None:
        self._purge()
        nil_found = cycle_found = False
        indirects = 0
        ve = v
        while shape.shape_of(ve) is Shape.POINTER:
            if not ve:
                nil_found = True
                break
            indirects += 1
            ve = ve.contents
            key = shape.identity(ve)
            if key in self.pointers and self.pointers[key] < self.depth:
                cycle_found = True
                indirects -= 1
                break
            self.pointers[key] = self.depth
            self._transient.append(ve)

        if nil_found:
            self.write(NIL)
            return

        if indirects:
            self.dependencies.add("ctypes")
            self.write("ctypes.pointer(" * indirects)
        if cycle_found:
            self.write(CIRCULAR)
        else:
            kind = shape.shape_of(ve)
            prefix, suffix = self._affixes(ve, kind)
            self.write(prefix)
            self.dump(ve, skip_type=True)
            self.write(suffix)
        self.write(")" * indirects)

    def _open(self, opening: str) -> bool:
        """Start a block; ``False`` if it is too deep to show its content."""
        self.write(opening + "\n")
        self.depth += 1
        if self._truncated():
            self.indent()
            self.write(MAX_DEPTH + "\n")
            return False
        return True

    def _close(self, closing: str) -> None:
        self.depth -= 1
        self.indent()
        self.write(closing)

    def _elements(self, opening: str, closing: str, values: list[Any]) -> None:
        if not values:
            self.write(opening + closing)
            return
        if self._open(opening):
            for x in values:
                self.dump(shape.unpack_value(x))
                self.write(",\n")
        self._close(closing)

    def _dump_string(self, s: str) -> None:
        if "\n" not in s:
            self.write(repr(s))
            return
        # One literal per line; python concatenates adjacent literals.
        self.write("(\n")
        self.depth += 1
        for line in s.splitlines(keepends=True):
            self.indent()
            self.write(repr(line) + "\n")
        self.depth -= 1
        self.indent()
        self.write(")")

    def _dump_body(self, v: Any, kind: Shape) -> None:
        match kind:
            case Shape.NONE:
                self.write(NIL)
            case Shape.BOOL:
                self.write("True" if v else "False")
            case Shape.INT:
                self.write(int.__repr__(v))
            case Shape.FLOAT:
                self.write(_float(v))
            case Shape.COMPLEX:
                self.write(f"complex({_float(v.real)}, {_float(v.imag)})")
            case Shape.STRING:
                self._dump_string(str.__str__(v))
            case Shape.BYTES:
                self._dump_bytes(v)
            case Shape.SEQUENCE:
                opening, closing = "[", "]"
                if isinstance(v, tuple | ctypes.Array):
                    opening, closing = "(", ")"
                self._elements(opening, closing, list(v))
            case Shape.SET:
                values = list(v)
                if self.config.sort_keys:
                    values = _sorted(values)
                if not values:
                    self.write("()")
                elif type(v) is set and self._truncates_next():
                    # An empty `{}` is a dict
                    self._open("set(")
                    self._close(")")
                else:
                    self._elements("{", "}", values)
            case Shape.MAPPING:
                self._dump_mapping(v)
            case Shape.STRUCT:
                self._dump_struct(v)
            case Shape.CSCALAR:
                # `py_object` can hold anything, itself included
                self.write("(")
                self.depth += 1
                self.dump(shape.scalar_value(v), skip_indent=True)
                self.depth -= 1
                self.write(")")
            case Shape.ADDRESS:
                self._dump_address(v)
            case Shape.POINTER:
                # Handled in `dump`
                pass
            case _:
                self._dump_other(v)

    def _dump_bytes(self, v: Any) -> None:
        try:
            buf = _byte_block(v)
        except (TypeError, ValueError) as e:
            self.warn(f"Cannot read the bytes of a {type(v).__name__}: {e}")
            buf = b""
        self.write(repr(buf))

    def _dump_mapping(self, v: dict[Any, Any]) -> None:
        items = list(dict.items(v))
        if self.config.sort_keys:
            items = _sorted(items, key=lambda kv: kv[0])
        if not items:
            self.write("{}")
            return
        if self._open("{"):
            for key, value in items:
                self.dump(shape.unpack_value(key))
                self.write(": ")
                self.dump(shape.unpack_value(value), skip_indent=True)
                self.write(",\n")
        self._close("}")

    def _dump_struct(self, v: Any) -> None:
        fields = [f for f in shape.struct_fields(v) if not zero.is_elidable(f)]
        if not fields:
            self.write("()")
            return
        if self._open("("):
            for field in fields:
                self.indent()
                self.write(f"{field.name}=")
                self.dump(shape.unpack_value(field.value), skip_indent=True)
                self.write(",\n")
        self._close(")")

    def _dump_address(self, v: Any) -> None:
        if isinstance(v, ctypes.c_void_p):
            self.write(NIL if v.value is None else utils.hex_address(v.value))
            return
        if isinstance(v, shape.CTYPES_FUNCTION):
            addr = ctypes.cast(v, ctypes.c_void_p).value
            self.write(NIL if addr is None else utils.hex_address(addr))
            return
        name = self.namer.reference(v)
        if name is None:
            name = utils.hex_address(id(v))
        self.write(name)

    def _dump_other(self, v: Any) -> None:
        try:
            text = repr(v)
        except Exception as e:
            self.warn(
                f"repr() failed on a {type(v).__name__}: {type(e).__name__} {e}"
            )
            text = utils.hex_address(id(v))
        module = type(v).__module__
        if text.startswith(f"{module}."):
            self.dependencies.add(module)
        self.write(text)


def dump_with_dependencies(
    *values: Any, config: Config = DEFAULT_CONFIG
) -> tuple[str, naming.Dependencies]:
    """Dump *values* and return the code along with the modules it imports.

    ``None`` values are skipped.
    """
    dependencies = naming.Dependencies()
    literals = []
    for value in values:
        if value is None:
            continue
        buf = io.StringIO()
        state = DumpState(buf, config)
        state.dump(value)
        buf.write("\n")
        dependencies.update(state.dependencies)
        literals.append(buf.getvalue())

    out = io.StringIO()
    if config.package:
        out.write(f'"""Literals generated for ``{config.package}``."""\n\n')
    imports = dependencies.import_lines()
    if imports:
        out.write("\n".join(imports))
        out.write("\n\n")
    for literal in literals:
        out.write(literal)
    return out.getvalue(), dependencies


def fdump(sink: Sink, *values: Any, config: Config = DEFAULT_CONFIG) -> None:
    """Write the code of *values* to *sink*."""
    text, _ = dump_with_dependencies(*values, config=config)
    sink.write(text)


def sdump(*values: Any, config: Config = DEFAULT_CONFIG) -> str:
    """Return the code of *values* as a string."""
    text, _ = dump_with_dependencies(*values, config=config)
    return text


def dump(*values: Any, config: Config = DEFAULT_CONFIG) -> None:
    """Print the code of *values* to :data:`sys.stdout`."""
    fdump(sys.stdout, *values, config=config)
