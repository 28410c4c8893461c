from __future__ import annotations

import functools

import pygments
import pygments.formatters
import pygments.lexers


@functools.lru_cache()
def _lexer() -> pygments.lexers.PythonLexer:
    return pygments.lexers.PythonLexer()


def highlight(code: str) -> str:
    """Colorize a dump for a terminal."""
    formatter = pygments.formatters.TerminalFormatter()
    res: str = pygments.highlight(code, _lexer(), formatter)
    return res
