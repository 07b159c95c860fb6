"""Query execution.

The QueryRunner acquires a connection, prepares and binds the statement,
executes it, hands the cursor to a result handler (or returns the update
counts) and releases the cursor, the statement and - when it owns it - the
connection on every exit path.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from row_runner.adapters.protocol import Connection, Cursor, DataSource, Statement
from row_runner.core.connection import ConnectionConfig, ConnectionManager
from row_runner.core.enums import ConnectionOwnership, ExecutionState
from row_runner.core.exceptions import (
    AcquisitionError,
    BindError,
    ExecutionError,
    RowRunnerError,
)
from row_runner.core.params import check_arity, check_batch_arity
from row_runner.mapping.protocol import ResultHandler

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _guard(sql: str, func: Callable[..., T], *args: Any) -> T:
    """Call a driver-facing function, wrapping foreign errors in ExecutionError."""
    try:
        return func(*args)
    except RowRunnerError:
        raise
    except Exception as e:
        raise ExecutionError(str(e) or type(e).__name__, sql) from e


class _Execution:
    """Resources and state of one runner call."""

    def __init__(self, sql: str, connection: Connection, ownership: ConnectionOwnership) -> None:
        self.sql = sql
        self.connection = connection
        self.ownership = ownership
        self.statement: Statement | None = None
        self.cursor: Cursor | None = None
        self.state = ExecutionState.IDLE
        self.transition(ExecutionState.CONNECTION_ACQUIRED)

    def transition(self, state: ExecutionState) -> None:
        self.state = state
        logger.debug("%s (%s connection): %s", state.value, self.ownership.value, self.sql)

    def release(self) -> list[Exception]:
        """Close the cursor, then the statement, then an owned connection."""
        errors: list[Exception] = []
        closers: list[Callable[[], None]] = []
        if self.cursor is not None:
            closers.append(self.cursor.close)
        if self.statement is not None:
            closers.append(self.statement.close)
        if self.ownership is ConnectionOwnership.OWNED:
            closers.append(self.connection.close)
        for close in closers:
            try:
                close()
            except Exception as e:
                errors.append(e)
        self.cursor = None
        self.statement = None
        self.transition(ExecutionState.RELEASED)
        return errors

    def __enter__(self) -> _Execution:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        errors = self.release()
        if not errors:
            return
        if exc_type is None:
            raise ExecutionError(f"Cannot release resources: {errors[0]}", self.sql) from errors[0]
        for error in errors:
            logger.warning("Error releasing resources after failed call %r: %s", self.sql, error)


class QueryRunner:
    """Synchronous query runner.

    Args:
        data_source: Source of owned connections. Calls that pass a
            ``connection`` borrow it instead and never close it.
        pmd_known_broken: Skip asking statements for their parameter count
            before binding.
    """

    def __init__(
        self,
        data_source: DataSource | None = None,
        *,
        pmd_known_broken: bool = False,
    ) -> None:
        self._data_source = data_source
        self._pmd_known_broken = pmd_known_broken
        self._owns_source = False

    @classmethod
    def from_config(
        cls,
        config: ConnectionConfig,
        *,
        pmd_known_broken: bool = False,
    ) -> QueryRunner:
        """Create a QueryRunner owning a ConnectionManager built from *config*."""
        runner = cls(ConnectionManager(config), pmd_known_broken=pmd_known_broken)
        runner._owns_source = True
        return runner

    @property
    def data_source(self) -> DataSource | None:
        return self._data_source

    @property
    def pmd_known_broken(self) -> bool:
        return self._pmd_known_broken

    def close(self) -> None:
        """Close the connection pool if this runner created it."""
        if self._owns_source and isinstance(self._data_source, ConnectionManager):
            self._data_source.close_pool()

    def __enter__(self) -> QueryRunner:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()

    # --- operations ---

    def query(
        self,
        sql: str,
        handler: ResultHandler[T],
        *params: Any,
        connection: Connection | None = None,
    ) -> T:
        """Execute a query and return what *handler* builds from its rows."""
        self._check_sql(sql)
        self._check_handler(sql, handler)

        with self._begin(sql, connection) as ex:
            statement, prepared = self._statement(ex, params)
            if prepared:
                ex.cursor = _guard(sql, statement.execute_query)
            else:
                ex.cursor = _guard(sql, statement.execute_query, sql)
            ex.transition(ExecutionState.EXECUTED)
            result = _guard(sql, handler.handle, ex.cursor)
            ex.transition(ExecutionState.RESULTS_CONSUMED)
            return result

    def update(
        self,
        sql: str,
        *params: Any,
        connection: Connection | None = None,
    ) -> int:
        """Execute an INSERT, UPDATE or DELETE and return the affected row count."""
        self._check_sql(sql)

        with self._begin(sql, connection) as ex:
            statement, prepared = self._statement(ex, params)
            if prepared:
                count = _guard(sql, statement.execute_update)
            else:
                count = _guard(sql, statement.execute_update, sql)
            ex.transition(ExecutionState.EXECUTED)
            return count

    def insert(
        self,
        sql: str,
        handler: ResultHandler[T],
        *params: Any,
        connection: Connection | None = None,
    ) -> T:
        """Execute an INSERT and return what *handler* builds from the generated keys."""
        self._check_sql(sql)
        self._check_handler(sql, handler)

        with self._begin(sql, connection) as ex:
            statement, prepared = self._statement(ex, params)
            if prepared:
                ex.cursor = _guard(sql, statement.execute_insert)
            else:
                ex.cursor = _guard(sql, statement.execute_insert, sql)
            ex.transition(ExecutionState.EXECUTED)
            result = _guard(sql, handler.handle, ex.cursor)
            ex.transition(ExecutionState.RESULTS_CONSUMED)
            return result

    def batch(
        self,
        sql: str,
        params_table: Sequence[Sequence[Any]],
        *,
        connection: Connection | None = None,
    ) -> list[int]:
        """Execute *sql* once per parameter row and return the update counts."""
        self._check_sql(sql)
        if params_table is None:
            raise ExecutionError(
                "Null parameters. If parameters aren't needed, pass an empty list.", sql
            )

        with self._begin(sql, connection) as ex:
            statement = _guard(sql, ex.connection.prepare, sql)
            ex.statement = statement
            rows = check_batch_arity(sql, self._parameter_count(sql, statement), params_table)
            for row in rows:
                self._bind(sql, statement, row)
                _guard(sql, statement.add_batch)
            ex.transition(ExecutionState.STATEMENT_BOUND)
            counts = _guard(sql, statement.execute_batch)
            ex.transition(ExecutionState.EXECUTED)
            logger.debug("Batch of %d rows executed", len(rows))
            return list(counts)

    # --- lifecycle helpers ---

    @staticmethod
    def _check_sql(sql: str | None) -> None:
        if sql is None or not sql.strip():
            raise ExecutionError("Null or empty SQL statement.")

    @staticmethod
    def _check_handler(sql: str, handler: Any) -> None:
        if handler is None:
            raise ExecutionError("Null ResultHandler.", sql)

    def _begin(self, sql: str, connection: Connection | None) -> _Execution:
        if connection is not None:
            return _Execution(sql, connection, ConnectionOwnership.BORROWED)
        if self._data_source is None:
            raise AcquisitionError(
                "QueryRunner requires a DataSource to be invoked without a Connection"
            )
        try:
            acquired = self._data_source.get_connection()
        except AcquisitionError:
            raise
        except Exception as e:
            raise AcquisitionError(f"Cannot get a connection: {e}") from e
        if acquired is None:
            raise AcquisitionError("DataSource returned no connection")
        return _Execution(sql, acquired, ConnectionOwnership.OWNED)

    def _statement(self, ex: _Execution, params: Sequence[Any]) -> tuple[Statement, bool]:
        """Create the statement: prepared and bound when there are parameters."""
        if params:
            statement = _guard(ex.sql, ex.connection.prepare, ex.sql)
            ex.statement = statement
            check_arity(ex.sql, self._parameter_count(ex.sql, statement), params)
            self._bind(ex.sql, statement, params)
            prepared = True
        else:
            statement = _guard(ex.sql, ex.connection.create_statement)
            ex.statement = statement
            prepared = False
        ex.transition(ExecutionState.STATEMENT_BOUND)
        return statement, prepared

    def _parameter_count(self, sql: str, statement: Statement) -> int | None:
        if self._pmd_known_broken:
            return None
        return _guard(sql, statement.parameter_count)

    @staticmethod
    def _bind(sql: str, statement: Statement, params: Sequence[Any]) -> None:
        for index, value in enumerate(params, start=1):
            try:
                statement.bind(index, value)
            except RowRunnerError:
                raise
            except Exception as e:
                raise BindError(f"Cannot bind parameter {index}: {e}", sql) from e
