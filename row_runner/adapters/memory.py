"""In-memory cursor over a table of rows."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from row_runner.adapters.protocol import Column
from row_runner.core.exceptions import ExecutionError


def build_columns(names: Iterable[str | Column]) -> list[Column]:
    """Build 1-based Column metadata from names (label equals name)."""
    columns: list[Column] = []
    for position, item in enumerate(names, start=1):
        if isinstance(item, Column):
            columns.append(item)
        else:
            columns.append(Column(index=position, name=item, label=item))
    return columns


class MemoryCursor:
    """Cursor implementation over rows held in memory.

    Column lookups by name are case-insensitive and match the label first,
    then the name.
    """

    def __init__(
        self,
        columns: Iterable[str | Column],
        rows: Iterable[Sequence[Any]] = (),
    ) -> None:
        self._columns = build_columns(columns)
        self._rows = [tuple(row) for row in rows]
        self._position = -1
        self.closed = False
        self.close_count = 0

    def advance(self) -> bool:
        if self.closed:
            raise ExecutionError("Cursor is closed")
        if self._position + 1 >= len(self._rows):
            self._position = len(self._rows)
            return False
        self._position += 1
        return True

    def get(self, column: int | str) -> Any:
        if not 0 <= self._position < len(self._rows):
            raise ExecutionError("No current row")
        index = self._resolve(column)
        return self._rows[self._position][index - 1]

    def columns(self) -> list[Column]:
        return list(self._columns)

    def close(self) -> None:
        self.closed = True
        self.close_count += 1

    def _resolve(self, column: int | str) -> int:
        if isinstance(column, int):
            if not 1 <= column <= len(self._columns):
                raise ExecutionError(f"Column index out of range: {column}")
            return column
        wanted = column.casefold()
        for col in self._columns:
            if col.label is not None and col.label.casefold() == wanted:
                return col.index
        for col in self._columns:
            if col.name.casefold() == wanted:
                return col.index
        raise ExecutionError(f"{column} is not a valid column name")
