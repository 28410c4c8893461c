from __future__ import annotations

import inspect
import pydoc
import typing
from typing import Any, Protocol

locate = pydoc.locate
cram = pydoc.cram


@typing.runtime_checkable
class QualnameAddressable(Protocol):

    __name__: str
    __qualname__: str
    __module__: str


def dotted_name(v: Any) -> str:
    """The name *v* is defined under, builtins are not prefixed.

    >>> dotted_name(len), dotted_name(pydoc.locate)
    ('len', 'pydoc.locate')

    Raises:
      TypeError: *v* is neither a module nor a named class or function.
      ValueError: *v* was defined inside of a function.
    """
    if inspect.ismodule(v):
        return str(v.__name__)
    if not isinstance(v, QualnameAddressable):
        raise TypeError(f"Type {type(v).__name__!r} not supported")
    if v.__name__ == "<lambda>":
        raise TypeError("lambdas are not supported")
    if ".<locals>." in v.__qualname__:
        raise ValueError(
            "values defined inside of functions are not supported."
        )
    if v.__module__ == "builtins":
        return v.__qualname__
    return f"{v.__module__}.{v.__qualname__}"


def get_locate_name(v: Any) -> str:
    """Get a name that can be used with `locate` to reload the given argument"""
    name = dotted_name(v)
    found = locate(name)
    if found is None:
        raise ValueError(
            f"Argument {v} cannot be reloaded via its name: {name!r}"
        )
    if found != v:
        raise ValueError(
            f"Can't use {v}, it's overridden by {found} as {name!r}"
        )
    return name


def hex_address(addr: int) -> str:
    """The literal of a memory address (an `int` when evaluated)."""
    return f"0x{addr:x}"
