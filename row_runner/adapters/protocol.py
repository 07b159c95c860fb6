"""Boundary protocols.

The runner and the mapping layer only talk to these capabilities. Every
adapter module MUST provide objects that satisfy them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from row_runner.core.connection import ConnectionConfig


@dataclass(frozen=True)
class Column:
    """One result column. ``index`` is 1-based."""

    index: int
    name: str
    label: str | None


@runtime_checkable
class Cursor(Protocol):
    """Forward-only iterator over the rows of one result."""

    def advance(self) -> bool:
        """Move to the next row. Returns False once the rows are exhausted."""
        ...

    def get(self, column: int | str) -> Any:
        """Value of a column of the current row, by 1-based index or name."""
        ...

    def columns(self) -> list[Column]:
        """Column metadata, in column order."""
        ...

    def close(self) -> None:
        """Release the cursor."""
        ...


@runtime_checkable
class Statement(Protocol):
    """A prepared statement (bound to its SQL) or a plain one (SQL given at execution)."""

    def parameter_count(self) -> int:
        """Number of parameters the SQL declares."""
        ...

    def bind(self, index: int, value: Any) -> None:
        """Bind *value* to the 1-based parameter *index*."""
        ...

    def add_batch(self) -> None:
        """Record the currently bound parameters as one batch entry."""
        ...

    def execute_query(self, sql: str | None = None) -> Cursor:
        """Execute and return a cursor over the result rows."""
        ...

    def execute_update(self, sql: str | None = None) -> int:
        """Execute and return the affected row count."""
        ...

    def execute_insert(self, sql: str | None = None) -> Cursor:
        """Execute and return a cursor over the generated keys."""
        ...

    def execute_batch(self) -> list[int]:
        """Execute every batch entry and return one update count per entry."""
        ...

    def close(self) -> None:
        """Release the statement."""
        ...


@runtime_checkable
class Connection(Protocol):
    """A database connection."""

    def prepare(self, sql: str) -> Statement:
        """Create a statement bound to *sql*."""
        ...

    def create_statement(self) -> Statement:
        """Create a plain statement for direct execution."""
        ...

    def close(self) -> None:
        """Close the connection (or return it to its pool)."""
        ...


@runtime_checkable
class DataSource(Protocol):
    """Source of connections."""

    def get_connection(self) -> Connection:
        """Acquire a connection."""
        ...


@runtime_checkable
class SyncAdapter(Protocol):
    """Driver adapter protocol used by the ConnectionManager."""

    @property
    def paramstyle(self) -> str:
        """DB-API placeholder style: 'qmark' (?) or 'format' (%s)."""
        ...

    def create_pool(self, config: ConnectionConfig) -> Any:
        """Create a connection pool."""
        ...

    def acquire_connection(self, pool: Any) -> Any:
        """Acquire a raw driver connection from the pool."""
        ...

    def release_connection(self, connection: Any, pool: Any) -> None:
        """Release a raw driver connection back to the pool."""
        ...

    def close_pool(self, pool: Any) -> None:
        """Close the pool and release all connections."""
        ...
