"""Dump python values as the python code that rebuilds them"""
from __future__ import annotations

from importlib import metadata

from .config import DEFAULT_CONFIG, Config
from .dump import (
    DumpState,
    DumpWarning,
    dump,
    dump_with_dependencies,
    fdump,
    sdump,
)
from .naming import (
    DEFAULT_RULES,
    Dependencies,
    Rule,
    TextConstructorRule,
    TypeNamer,
)
from .zero import is_zero

# https://packaging.python.org/en/latest/guides/single-sourcing-package-version/
__version__ = metadata.version(__name__)

__all__ = (
    "Config",
    "DEFAULT_CONFIG",
    "DEFAULT_RULES",
    "Dependencies",
    "DumpState",
    "DumpWarning",
    "Rule",
    "TextConstructorRule",
    "TypeNamer",
    "dump",
    "dump_with_dependencies",
    "fdump",
    "is_zero",
    "sdump",
)
