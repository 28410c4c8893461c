from __future__ import annotations

import dataclasses
from typing import Final

from . import naming


@dataclasses.dataclass(frozen=True, slots=True)
class Config:
    """Options controlling how values are dumped.

    Attributes:
      indent: The string repeated once per nesting level.
      sort_keys: Sort the keys of mappings so dumps are deterministic.
      max_depth: Stop descending after this many levels (``0`` means no
        limit). Negative values are treated as ``0``.
      invoke_stringers: Render values whose class defines ``__str__`` (and
        exceptions) as the string they produce.
      package: When set, the dump starts with a module docstring naming the
        package the literals were generated for.
      rules: Special cases consulted, in order, before the generic naming and
        rendering.
    """

    indent: str = "  "
    sort_keys: bool = False
    max_depth: int = 0
    invoke_stringers: bool = False
    package: str | None = None
    rules: tuple[naming.Rule, ...] = naming.DEFAULT_RULES

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            object.__setattr__(self, "max_depth", 0)

    def replace(self, **changes: object) -> Config:
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]


#: The configuration used when none is given.
DEFAULT_CONFIG: Final = Config()
