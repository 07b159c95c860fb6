"""Enumerations shared across the runner and the adapters."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


class ConnectionOwnership(Enum):
    """Whether an execution closes its connection when it is released."""

    OWNED = "owned"
    BORROWED = "borrowed"


class ExecutionState(Enum):
    """Lifecycle of a single runner call."""

    IDLE = "idle"
    CONNECTION_ACQUIRED = "connection_acquired"
    STATEMENT_BOUND = "statement_bound"
    EXECUTED = "executed"
    RESULTS_CONSUMED = "results_consumed"
    RELEASED = "released"
