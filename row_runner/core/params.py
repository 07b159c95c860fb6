"""SQL parameter helpers.

Counts positional placeholders so statements can report their declared
parameter count, and normalizes caller-supplied parameter values.
String literals, quoted identifiers and comments are excluded from
placeholder counting.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from functools import lru_cache
from typing import Any

from row_runner.core.exceptions import BindError

# Matches :name but not ::typecast and not inside words
_NAMED_PATTERN = re.compile(r"(?<![:\w]):([a-zA-Z_]\w*)")

# Matches :1, :2 ... (numeric paramstyle)
_NUMERIC_PATTERN = re.compile(r"(?<![:\w]):(\d+)")

_QMARK_PATTERN = re.compile(r"\?")

# %s but not the escaped %%s
_FORMAT_PATTERN = re.compile(r"(?<!%)%s")

# Single-quoted literals (backslash escapes handled), double-quoted
# identifiers, -- line comments and /* block comments */
_IGNORED_PATTERN = re.compile(
    r"'(?:[^'\\]|\\.)*'"
    r'|"(?:[^"]|"")*"'
    r"|--[^\n]*"
    r"|/\*.*?\*/",
    re.DOTALL,
)


def _strip_ignored(sql: str) -> str:
    """Return *sql* with literals, quoted identifiers and comments blanked out."""
    return _IGNORED_PATTERN.sub(" ", sql)


@lru_cache(maxsize=256)
def count_placeholders(sql: str, paramstyle: str = "qmark") -> int:
    """Count the parameters declared by *sql* for the given DB-API paramstyle.

    ``qmark`` and ``format`` placeholders are counted one per occurrence.
    ``numeric`` and ``named`` placeholders are counted once per distinct
    name, because a repeated name binds the same value.
    """
    text = _strip_ignored(sql)
    if paramstyle == "qmark":
        return len(_QMARK_PATTERN.findall(text))
    if paramstyle == "format":
        return len(_FORMAT_PATTERN.findall(text))
    if paramstyle == "numeric":
        return len(set(_NUMERIC_PATTERN.findall(text)))
    if paramstyle == "named":
        return len(set(_NAMED_PATTERN.findall(text)))
    raise ValueError(f"Unsupported paramstyle: {paramstyle}")


def coerce_params(params: Sequence[Any] | Any) -> tuple[Any, ...]:
    """Normalize *params* to a tuple of positional values.

    * ``None`` → empty tuple.
    * ``tuple`` / ``list`` → ``tuple``.
    * Any other scalar → wrapped in a single-element tuple.
    """
    if params is None:
        return ()
    if isinstance(params, (tuple, list)):
        return tuple(params)
    return (params,)


def check_arity(sql: str, expected: int | None, params: Sequence[Any]) -> None:
    """Raise :class:`BindError` when *params* does not match *expected*.

    ``expected`` of ``None`` means the driver could not report a count and
    the check is skipped.
    """
    if expected is not None and expected != len(params):
        raise BindError.arity(sql, expected, len(params))


def check_batch_arity(
    sql: str,
    expected: int | None,
    params_table: Iterable[Sequence[Any]],
) -> list[tuple[Any, ...]]:
    """Normalize a batch parameter table, checking every row's arity.

    Every row must match the declared count (when known) and the arity of
    the first row.
    """
    rows = [coerce_params(row) for row in params_table]
    if not rows:
        return rows
    width = len(rows[0]) if expected is None else expected
    for row in rows:
        check_arity(sql, width, row)
    return rows
