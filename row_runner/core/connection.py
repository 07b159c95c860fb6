"""Connection configuration and the owned data source.

ConnectionConfig is a Pydantic model for type-safe connection config.
ConnectionManager is the DataSource a QueryRunner owns: it pools raw
driver connections through an adapter and hands them out wrapped as
DbapiConnection objects whose close() returns them to the pool.
"""

from __future__ import annotations

import importlib
import logging
import threading
import time
from typing import Any

from pydantic import BaseModel, Field

from row_runner.adapters.dbapi import DbapiConnection
from row_runner.core.enums import DatabaseBackend
from row_runner.core.exceptions import AcquisitionError

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for database connections.

    Each pooled connection opens its own session: with SQLite ``":memory:"``
    and ``pool_size > 1`` every pooled connection gets a private, empty
    database. Use a file database to share data across the pool.

    ``pool_timeout`` is how long, in seconds, an owned-connection call
    waits for a connection when the whole pool is in use.
    """

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    pool_size: int = Field(default=5, ge=1)
    pool_timeout: float = Field(default=30, gt=0)
    extra: dict[str, Any] = {}


# Adapter module mapping: backend → (module_path, adapter_class)
_ADAPTER_MAP: dict[DatabaseBackend, tuple[str, str]] = {
    DatabaseBackend.SQLITE: ("row_runner.adapters.sqlite", "SqliteSyncAdapter"),
    DatabaseBackend.POSTGRESQL: ("row_runner.adapters.postgresql", "PostgresqlSyncAdapter"),
}


def _load_adapter(driver: str) -> Any:
    """Load a driver adapter by name."""
    try:
        backend = DatabaseBackend(driver.lower())
    except ValueError:
        raise AcquisitionError(f"Unsupported database driver: {driver}") from None

    module_path, cls_name = _ADAPTER_MAP[backend]
    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AcquisitionError(f"Failed to load adapter for '{driver}': {e}") from e


class ConnectionManager:
    """Pool-backed DataSource using the SyncAdapter protocol.

    ``get_connection`` waits up to ``config.pool_timeout`` seconds for a
    pooled connection to be returned when every connection is in use.
    """

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self._adapter = _load_adapter(config.driver)
        self._pool: Any = None
        self._lock = threading.Lock()
        self._available = threading.Condition(self._lock)

    @property
    def adapter(self) -> Any:
        return self._adapter

    def initialize_pool(self) -> Any:
        """Initialize the connection pool."""
        with self._lock:
            return self._ensure_pool()

    def _ensure_pool(self) -> Any:
        if self._pool is None:
            try:
                self._pool = self._adapter.create_pool(self.config)
            except Exception as e:
                raise AcquisitionError(f"Cannot create connection pool: {e}") from e
            logger.debug(
                "Created %s pool with %d connections",
                self.config.driver,
                self.config.pool_size,
            )
        return self._pool

    def get_connection(self) -> DbapiConnection:
        """Acquire a pooled connection. Closing it returns it to the pool."""
        deadline = time.monotonic() + self.config.pool_timeout
        with self._available:
            pool = self._ensure_pool()
            while True:
                try:
                    raw = self._adapter.acquire_connection(pool)
                    break
                except AcquisitionError:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise AcquisitionError(
                            f"No pooled connection available after {self.config.pool_timeout}s"
                        ) from None
                    logger.debug("Pool exhausted, waiting up to %.2fs", remaining)
                    self._available.wait(remaining)
                    if self._pool is not pool:
                        raise AcquisitionError("Connection pool was closed") from None
                except Exception as e:
                    raise AcquisitionError(f"Cannot acquire connection: {e}") from e
        return DbapiConnection(raw, self._adapter.paramstyle, on_close=self._release)

    def close_pool(self) -> None:
        """Close the connection pool."""
        with self._available:
            if self._pool is not None:
                self._adapter.close_pool(self._pool)
                self._pool = None
            self._available.notify_all()

    def _release(self, raw: Any) -> None:
        with self._available:
            if self._pool is None:
                # Pool already closed; drop the connection.
                raw.close()
                return
            self._adapter.release_connection(raw, self._pool)
            self._available.notify()
