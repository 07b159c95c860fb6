"""Connection, Statement and Cursor over any DB-API 2.0 driver.

Drivers with a ``qmark`` (``?``) or ``format`` (``%s``) paramstyle are
supported. Parameters are bound by 1-based position.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from row_runner.adapters.memory import MemoryCursor
from row_runner.adapters.protocol import Column
from row_runner.core.exceptions import BindError, ExecutionError
from row_runner.core.params import count_placeholders

logger = logging.getLogger(__name__)

GENERATED_KEY_COLUMN = "generated_key"


class DbapiCursor:
    """Cursor over a DB-API cursor.

    Handles both tuple-like rows and dict-like rows from different drivers.
    """

    def __init__(self, raw_cursor: Any) -> None:
        self._raw = raw_cursor
        description = raw_cursor.description or ()
        self._columns = [
            Column(index=position, name=desc[0], label=desc[0])
            for position, desc in enumerate(description, start=1)
        ]
        self._lookup: dict[str, int] = {}
        for col in self._columns:
            self._lookup.setdefault(col.name.casefold(), col.index)
        self._row: tuple[Any, ...] | None = None
        self._closed = False

    def advance(self) -> bool:
        if not self._columns:
            return False
        row = self._raw.fetchone()
        if row is None:
            self._row = None
            return False
        if isinstance(row, dict):
            self._row = tuple(row.values())
        else:
            self._row = tuple(row)
        return True

    def get(self, column: int | str) -> Any:
        if self._row is None:
            raise ExecutionError("No current row")
        if isinstance(column, str):
            try:
                index = self._lookup[column.casefold()]
            except KeyError:
                raise ExecutionError(f"{column} is not a valid column name") from None
        else:
            index = column
        if not 1 <= index <= len(self._row):
            raise ExecutionError(f"Column index out of range: {index}")
        return self._row[index - 1]

    def columns(self) -> list[Column]:
        return list(self._columns)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._raw.close()


class DbapiStatement:
    """Statement over a DB-API connection.

    A statement created with SQL is prepared: parameters are bound by index
    and the SQL is fixed. A statement created without SQL is plain: the SQL
    is passed to each ``execute_*`` call and cannot take parameters.
    """

    def __init__(self, connection: Any, paramstyle: str, sql: str | None = None) -> None:
        self._connection = connection
        self._paramstyle = paramstyle
        self._sql = sql
        self._bound: dict[int, Any] = {}
        self._batch: list[tuple[Any, ...]] = []
        self._cursors: list[Any] = []
        self._closed = False

    def parameter_count(self) -> int:
        if self._sql is None:
            return 0
        return count_placeholders(self._sql, self._paramstyle)

    def bind(self, index: int, value: Any) -> None:
        count = self.parameter_count()
        if not 1 <= index <= count:
            raise BindError(
                f"Parameter index {index} out of range (1..{count}).",
                self._sql,
                expected=count,
            )
        self._bound[index] = value

    def add_batch(self) -> None:
        self._batch.append(self._values())
        self._bound = {}

    def execute_query(self, sql: str | None = None) -> DbapiCursor:
        raw = self._execute(sql)
        return DbapiCursor(raw)

    def execute_update(self, sql: str | None = None) -> int:
        raw = self._execute(sql)
        return int(raw.rowcount)

    def execute_insert(self, sql: str | None = None) -> Any:
        raw = self._execute(sql)
        if raw.description:
            # INSERT ... RETURNING
            return DbapiCursor(raw)
        key = getattr(raw, "lastrowid", None)
        rows = [] if key is None else [[key]]
        return MemoryCursor([GENERATED_KEY_COLUMN], rows)

    def execute_batch(self) -> list[int]:
        sql = self._resolve_sql(None)
        raw = self._open_cursor()
        counts: list[int] = []
        for entry in self._batch:
            raw.execute(sql, entry)
            counts.append(int(raw.rowcount))
        logger.debug("Executed batch of %d entries", len(counts))
        self._batch = []
        return counts

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for raw in self._cursors:
            raw.close()
        self._cursors = []

    def _values(self) -> tuple[Any, ...]:
        count = self.parameter_count()
        missing = [i for i in range(1, count + 1) if i not in self._bound]
        if missing:
            raise BindError(
                f"No value specified for parameter {missing[0]}.",
                self._sql,
                expected=count,
                given=len(self._bound),
            )
        return tuple(self._bound[i] for i in range(1, count + 1))

    def _resolve_sql(self, sql: str | None) -> str:
        if self._sql is not None:
            return self._sql
        if sql is None:
            raise ExecutionError("Plain statement executed without SQL")
        declared = count_placeholders(sql, self._paramstyle)
        if declared:
            raise BindError.arity(sql, declared, 0)
        return sql

    def _open_cursor(self) -> Any:
        if self._closed:
            raise ExecutionError("Statement is closed", self._sql)
        raw = self._connection.cursor()
        self._cursors.append(raw)
        return raw

    def _execute(self, sql: str | None) -> Any:
        text = self._resolve_sql(sql)
        prepared = self._sql is not None
        values = self._values() if prepared else None
        raw = self._open_cursor()
        if values is None:
            raw.execute(text)
        else:
            raw.execute(text, values)
        return raw


class DbapiConnection:
    """Connection over a raw DB-API connection.

    ``on_close`` replaces closing the raw connection, e.g. to return it to
    a pool.
    """

    def __init__(
        self,
        raw: Any,
        paramstyle: str,
        on_close: Callable[[Any], None] | None = None,
    ) -> None:
        self._raw = raw
        self._paramstyle = paramstyle
        self._on_close = on_close
        self.closed = False

    @property
    def raw(self) -> Any:
        return self._raw

    def prepare(self, sql: str) -> DbapiStatement:
        self._check_open()
        return DbapiStatement(self._raw, self._paramstyle, sql)

    def create_statement(self) -> DbapiStatement:
        self._check_open()
        return DbapiStatement(self._raw, self._paramstyle)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._on_close is not None:
            self._on_close(self._raw)
        else:
            self._raw.close()

    def _check_open(self) -> None:
        if self.closed:
            raise ExecutionError("Connection is closed")
