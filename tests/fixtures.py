"""Types used as values to dump in the tests"""
from __future__ import annotations

import ctypes
import dataclasses
import enum
from typing import Any, NamedTuple


@dataclasses.dataclass
class Item:
    name: str = ""
    count: int = 0
    tags: list[str] | None = None


@dataclasses.dataclass
class Node:
    name: str
    next: Node | None = None


@dataclasses.dataclass
class Flags:
    enabled: bool = True
    extra: dict[str, Any] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class Wrapper:
    inner: Item = dataclasses.field(default_factory=Item)


class Point(NamedTuple):
    x: int
    y: int = 0


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class MyInt(int):
    pass


class Plain:
    def __init__(self, a: int, b: int = 0) -> None:
        self.a = a
        self.b = b
        self._hidden = "not shown"


class Slotted:
    __slots__ = ("x", "y")

    def __init__(self, x: int = 0, y: int = 0) -> None:
        self.x = x
        self.y = y


class Shouty:
    def __init__(self, word: str = "") -> None:
        self.word = word

    def __str__(self) -> str:
        return self.word.upper()


class BrokenStr:
    def __init__(self, word: str = "") -> None:
        self.word = word

    def __str__(self) -> str:
        raise RuntimeError("no")


class BadRepr:
    __slots__ = ()

    def __repr__(self) -> str:
        raise RuntimeError("no repr for you")


class Quantity:
    """A value that is best written down as its text form"""

    def __init__(self, text: str = "0") -> None:
        self.text = text

    def __str__(self) -> str:
        return self.text

    def __bool__(self) -> bool:
        return self.text != "0"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Quantity) and other.text == self.text


@dataclasses.dataclass
class Resources:
    cpu: Quantity = dataclasses.field(default_factory=Quantity)
    memory: Quantity = dataclasses.field(default_factory=Quantity)


class CPoint(ctypes.Structure):
    _fields_ = [("x", ctypes.c_int), ("y", ctypes.c_int)]


class CNode(ctypes.Structure):
    pass


CNode._fields_ = [("value", ctypes.c_int), ("next", ctypes.POINTER(CNode))]


def item_from_dict(doc: dict[str, Any]) -> Item:
    return Item(**doc)


class CRecord(ctypes.Structure):
    _fields_ = [
        ("tag", ctypes.c_char),
        ("code", ctypes.c_char * 4),
        ("letter", ctypes.c_wchar),
        ("count", ctypes.c_int),
    ]


class Opaque:
    """Only known through its repr"""

    __slots__ = ()

    def __repr__(self) -> str:
        return "tests.fixtures.Opaque()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Opaque)
