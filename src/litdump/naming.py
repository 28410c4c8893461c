"""
``litdump.naming``: Names of the constructors we emit
=====================================================

Every constructor that shows up in a dump has to be reachable from the
generated code. :class:`TypeNamer` computes the name to emit for a type and
records the module that has to be imported in :class:`Dependencies`.

Domain specific tweaks live in :class:`Rule` objects; a rule can rename a type
(:func:`versioned_module_rule`) or take over the whole rendering of a value
(:class:`TextConstructorRule`, :data:`enum_rule`). The first rule that
returns something wins.

"""
from __future__ import annotations

import datetime
import decimal
import enum
import fractions
import inspect
import ipaddress
import logging
import pathlib
import re
import uuid
from typing import Any, Callable, Final, ItemsView, Iterator, Sequence

from . import utils

logger = logging.getLogger(__name__)

__all__ = (
    "Dependencies",
    "TypeNamer",
    "Rule",
    "VersionedModuleRule",
    "TextConstructorRule",
    "EnumRule",
    "TimedeltaRule",
    "versioned_module_rule",
    "enum_rule",
    "timedelta_rule",
    "DEFAULT_RULES",
)

# Modules whose names are always in scope
_IMPLICIT_MODULES: Final = frozenset(("", "builtins", "__main__"))


class Dependencies:
    """Modules a dump needs, mapped to the alias they are imported as.

    Adding a module that is already there does nothing: the first alias wins.
    """

    _imports: dict[str, str | None]

    def __init__(self) -> None:
        self._imports = {}

    def add(self, module: str, alias: str | None = None) -> None:
        if module in _IMPLICIT_MODULES or module in self._imports:
            return
        logger.debug("new dependency: %s (alias: %s)", module, alias)
        self._imports[module] = alias

    def update(self, other: Dependencies) -> None:
        for module, alias in other.items():
            self.add(module, alias)

    def items(self) -> ItemsView[str, str | None]:
        return self._imports.items()

    def __contains__(self, module: object) -> bool:
        return module in self._imports

    def __getitem__(self, module: str) -> str | None:
        return self._imports[module]

    def __iter__(self) -> Iterator[str]:
        return iter(self._imports)

    def __len__(self) -> int:
        return len(self._imports)

    def __repr__(self) -> str:
        return f"Dependencies({self._imports!r})"

    def import_lines(self) -> list[str]:
        """
        >>> deps = Dependencies()
        >>> deps.add("k8s.apps.v1", "appsv1")
        >>> deps.add("decimal")
        >>> deps.import_lines()
        ['import decimal', 'import k8s.apps.v1 as appsv1']
        """
        res = []
        for module, alias in sorted(self._imports.items()):
            if alias is None:
                res.append(f"import {module}")
            else:
                res.append(f"import {module} as {alias}")
        return res


class Rule:
    """A special case consulted before the generic naming and rendering.

    Both hooks return ``None`` when the rule doesn't apply.
    """

    def name(self, ty: type, namer: TypeNamer) -> str | None:
        return None

    def render(self, value: Any, namer: TypeNamer) -> str | None:
        return None


class TypeNamer:
    "Name types for one dump, recording the modules they come from."

    rules: Sequence[Rule]
    dependencies: Dependencies

    def __init__(
        self,
        rules: Sequence[Rule] = (),
        dependencies: Dependencies | None = None,
    ) -> None:
        self.rules = rules
        self.dependencies = (
            Dependencies() if dependencies is None else dependencies
        )

    def name(self, ty: type) -> str:
        """The expression that evaluates to *ty* in the generated code."""
        for rule in self.rules:
            res = rule.name(ty, self)
            if res is not None:
                logger.debug("%s named %s", ty, res)
                return res
        module = ty.__module__
        qualname = ty.__qualname__
        if ".<locals>." in qualname:
            # Can't be imported; hope the reader has it in scope.
            return ty.__name__
        if module in _IMPLICIT_MODULES:
            return qualname
        self.dependencies.add(module)
        res = f"{module}.{qualname}"
        logger.debug("%s named %s", ty, res)
        return res

    def render(self, value: Any) -> str | None:
        "The literal of *value* if a rule takes care of it."
        for rule in self.rules:
            res = rule.render(value, self)
            if res is not None:
                return res
        return None

    def reference(self, value: Any) -> str | None:
        """The name of a function, class or module if it can be reloaded."""
        try:
            name = utils.get_locate_name(value)
        except (TypeError, ValueError):
            return None
        if inspect.ismodule(value):
            self.dependencies.add(value.__name__)
            return name
        if isinstance(value, type):
            # Go through the rules
            return self.name(value)
        self.dependencies.add(value.__module__)
        return name


_VERSION_RE: Final = re.compile(r"^v\d+((alpha|beta)\d+)?$")


class VersionedModuleRule(Rule):
    """Disambiguate types that live in versioned api modules.

    ``Deployment`` from ``k8s.api.apps.v1`` is emitted as
    ``appsv1.Deployment`` and the module is imported as ``appsv1``.
    """

    def name(self, ty: type, namer: TypeNamer) -> str | None:
        parts = ty.__module__.split(".")
        if len(parts) < 2 or not _VERSION_RE.match(parts[-1]):
            return None
        if ".<locals>." in ty.__qualname__:
            return None
        alias = parts[-2].lstrip("_") + parts[-1]
        namer.dependencies.add(ty.__module__, alias)
        return f"{alias}.{ty.__qualname__}"


def _is_blank(value: Any) -> bool:
    try:
        return not value
    except Exception:
        return False


class TextConstructorRule(Rule):
    """Render values through their text form: ``decimal.Decimal('1.5')``.

    Values that are falsy are rendered with an empty constructor call
    (``decimal.Decimal()``).

    Args:
      types: The types this rule applies to (subclasses included).
      method: Name of the alternate constructor to call, if any.
      to_text: How to get the text form of a value.
    """

    types: tuple[type, ...]
    method: str | None
    to_text: Callable[[Any], str]

    def __init__(
        self,
        *types: type,
        method: str | None = None,
        to_text: Callable[[Any], str] = str,
    ) -> None:
        self.types = types
        self.method = method
        self.to_text = to_text

    def render(self, value: Any, namer: TypeNamer) -> str | None:
        if not isinstance(value, self.types):
            return None
        constructor = namer.name(type(value))
        if _is_blank(value):
            return f"{constructor}()"
        if self.method is not None:
            constructor = f"{constructor}.{self.method}"
        return f"{constructor}({self.to_text(value)!r})"


class EnumRule(Rule):
    "Render enum members by name: ``http.HTTPStatus.OK``."

    def render(self, value: Any, namer: TypeNamer) -> str | None:
        if not isinstance(value, enum.Enum):
            return None
        ty = type(value)
        name = namer.name(ty)
        member = value.name
        if member is None or ty.__members__.get(member) is not value:
            # Combined flags
            return f"{name}({value.value!r})"
        return f"{name}.{member}"


class TimedeltaRule(Rule):
    "Render durations by their non zero components."

    def render(self, value: Any, namer: TypeNamer) -> str | None:
        if not isinstance(value, datetime.timedelta):
            return None
        parts = (
            f"{unit}={amount}"
            for unit, amount in (
                ("days", value.days),
                ("seconds", value.seconds),
                ("microseconds", value.microseconds),
            )
            if amount
        )
        return f"{namer.name(type(value))}({', '.join(parts)})"


versioned_module_rule: Final = VersionedModuleRule()
enum_rule: Final = EnumRule()
timedelta_rule: Final = TimedeltaRule()

DEFAULT_RULES: Final[tuple[Rule, ...]] = (
    versioned_module_rule,
    enum_rule,
    timedelta_rule,
    TextConstructorRule(decimal.Decimal, fractions.Fraction),
    TextConstructorRule(uuid.UUID),
    TextConstructorRule(
        ipaddress.IPv4Address,
        ipaddress.IPv6Address,
        ipaddress.IPv4Network,
        ipaddress.IPv6Network,
        ipaddress.IPv4Interface,
        ipaddress.IPv6Interface,
    ),
    TextConstructorRule(pathlib.PurePath),
    TextConstructorRule(
        datetime.datetime,
        datetime.date,
        datetime.time,
        method="fromisoformat",
        to_text=lambda v: v.isoformat(),
    ),
)
