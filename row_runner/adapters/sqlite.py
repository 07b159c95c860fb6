"""SQLite adapter (sqlite3 stdlib)."""

from __future__ import annotations

import sqlite3

from row_runner.core.connection import ConnectionConfig
from row_runner.core.exceptions import AcquisitionError


class SqliteSyncAdapter:
    """SQLite adapter using stdlib sqlite3.

    Connections run in autocommit mode and may be used from worker threads.
    """

    @property
    def paramstyle(self) -> str:
        return "qmark"

    def create_pool(self, config: ConnectionConfig) -> list[sqlite3.Connection]:
        """Create a 'pool' (list of connections) for SQLite."""
        pool: list[sqlite3.Connection] = []
        for _ in range(config.pool_size):
            conn = sqlite3.connect(
                config.database,
                isolation_level=None,
                check_same_thread=False,
                **config.extra,
            )
            pool.append(conn)
        return pool

    def acquire_connection(self, pool: list[sqlite3.Connection]) -> sqlite3.Connection:
        """Acquire a connection from the pool."""
        if not pool:
            raise AcquisitionError("No connections available in pool")
        return pool.pop()

    def release_connection(
        self, connection: sqlite3.Connection, pool: list[sqlite3.Connection]
    ) -> None:
        """Release a connection back to the pool."""
        pool.append(connection)

    def close_pool(self, pool: list[sqlite3.Connection]) -> None:
        """Close all connections in the pool."""
        for conn in pool:
            conn.close()
        pool.clear()
