"""SQL parameter handling.

Generated statements always bind values as ``:name``. This module rewrites
them for adapters using the ``pyformat`` style and expands value lists into
the named placeholders of an ``IN (...)`` predicate.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache
from typing import Any

# :name, but not ::typecast and not a colon inside a word
_PARAM_PATTERN = re.compile(r"(?<![:\w]):([a-zA-Z_]\w*)")

# Single-quoted literals, backslash escapes included
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'")


def normalize_params(sql: str, paramstyle: str) -> str:
    """Rewrite ``:name`` parameters for *paramstyle*.

    ``named`` statements are returned untouched; ``pyformat`` gets
    ``%(name)s`` placeholders. Parameters inside string literals are kept.
    """
    if paramstyle == "named":
        return sql
    return _to_pyformat(sql)


@lru_cache(maxsize=256)
def _to_pyformat(sql: str) -> str:
    pieces: list[str] = []
    position = 0
    for literal in _STRING_LITERAL_PATTERN.finditer(sql):
        pieces.append(_PARAM_PATTERN.sub(r"%(\1)s", sql[position : literal.start()]))
        pieces.append(literal.group())
        position = literal.end()
    pieces.append(_PARAM_PATTERN.sub(r"%(\1)s", sql[position:]))
    return "".join(pieces)


def expand_in_params(prefix: str, values: Iterable[Any]) -> tuple[str, dict[str, Any]]:
    """Build the placeholder list and bindings for an ``IN (...)`` predicate.

    >>> expand_in_params("k", [3, 5])
    (':k0, :k1', {'k0': 3, 'k1': 5})
    """
    params = {f"{prefix}{index}": value for index, value in enumerate(values)}
    if not params:
        raise ValueError("IN predicate needs at least one value")
    return ", ".join(f":{name}" for name in params), params
