"""Recording fakes for the boundary protocols.

The fakes implement the protocols directly over in-memory rows and record
every call so tests can assert on the resource lifecycle.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from row_runner.adapters.memory import MemoryCursor

COLUMNS = ["one", "two", "three"]
ROWS = [["1", "2", "THREE"], ["4", "5", "SIX"]]


class CountingCursor(MemoryCursor):
    """MemoryCursor that counts advance() calls."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.advance_count = 0

    def advance(self) -> bool:
        self.advance_count += 1
        return super().advance()


class FakeStatement:
    def __init__(
        self,
        sql: str | None,
        parameter_count: int,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        fail_on: frozenset[str],
    ) -> None:
        self.sql = sql
        self._parameter_count = parameter_count
        self._columns = columns
        self._rows = rows
        self._fail_on = fail_on
        self.bound: dict[int, Any] = {}
        self.batch_entries: list[dict[int, Any]] = []
        self.executed: list[tuple[str, str | None]] = []
        self.cursor: CountingCursor | None = None
        self.close_count = 0

    def _maybe_fail(self, step: str) -> None:
        if step in self._fail_on:
            raise RuntimeError(f"{step} failed")

    def parameter_count(self) -> int:
        self._maybe_fail("parameter_count")
        return self._parameter_count

    def bind(self, index: int, value: Any) -> None:
        self._maybe_fail("bind")
        self.bound[index] = value

    def add_batch(self) -> None:
        self._maybe_fail("add_batch")
        self.batch_entries.append(dict(self.bound))
        self.bound = {}

    def execute_query(self, sql: str | None = None) -> CountingCursor:
        self.executed.append(("query", sql))
        self._maybe_fail("execute")
        self.cursor = CountingCursor(self._columns, self._rows)
        return self.cursor

    def execute_update(self, sql: str | None = None) -> int:
        self.executed.append(("update", sql))
        self._maybe_fail("execute")
        return 1

    def execute_insert(self, sql: str | None = None) -> CountingCursor:
        self.executed.append(("insert", sql))
        self._maybe_fail("execute")
        self.cursor = CountingCursor(["id"], [[42]])
        return self.cursor

    def execute_batch(self) -> list[int]:
        self.executed.append(("batch", None))
        self._maybe_fail("execute_batch")
        return [1] * len(self.batch_entries)

    def close(self) -> None:
        self.close_count += 1
        self._maybe_fail("statement_close")


class FakeConnection:
    def __init__(
        self,
        parameter_count: int = 0,
        columns: Sequence[str] = COLUMNS,
        rows: Sequence[Sequence[Any]] = ROWS,
        fail_on: Sequence[str] = (),
    ) -> None:
        self.parameter_count = parameter_count
        self.columns = columns
        self.rows = rows
        self.fail_on = frozenset(fail_on)
        self.statements: list[FakeStatement] = []
        self.close_count = 0

    def _statement(self, sql: str | None) -> FakeStatement:
        stmt = FakeStatement(
            sql,
            self.parameter_count if sql is not None else 0,
            self.columns,
            self.rows,
            self.fail_on,
        )
        self.statements.append(stmt)
        return stmt

    def prepare(self, sql: str) -> FakeStatement:
        if "prepare" in self.fail_on:
            raise RuntimeError("prepare failed")
        return self._statement(sql)

    def create_statement(self) -> FakeStatement:
        return self._statement(None)

    def close(self) -> None:
        self.close_count += 1

    @property
    def statement(self) -> FakeStatement:
        assert len(self.statements) == 1
        return self.statements[0]


class FakeDataSource:
    def __init__(self, connection: FakeConnection | None) -> None:
        self.connection = connection
        self.calls = 0

    def get_connection(self) -> FakeConnection | None:
        self.calls += 1
        return self.connection

