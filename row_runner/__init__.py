"""RowRunner - query execution and row mapping over DB-API connections."""

from __future__ import annotations

from row_runner.adapters.memory import MemoryCursor
from row_runner.adapters.protocol import Column, Connection, Cursor, DataSource, Statement
from row_runner.core.async_runner import AsyncQueryRunner
from row_runner.core.connection import ConnectionConfig, ConnectionManager
from row_runner.core.enums import ConnectionOwnership, DatabaseBackend, ExecutionState
from row_runner.core.exceptions import (
    AcquisitionError,
    AdapterError,
    BindError,
    ConversionError,
    ExecutionError,
    MappingError,
    RowRunnerError,
)
from row_runner.core.runner import QueryRunner
from row_runner.mapping import (
    ArrayHandler,
    ArrayListHandler,
    ColumnListHandler,
    DictHandler,
    DictListHandler,
    FieldMatcher,
    KeyedDictHandler,
    KeyedHandler,
    PropertyCoercion,
    RecordGroupHandler,
    RecordHandler,
    RecordListHandler,
    RecordMapHandler,
    ResultHandler,
    RowDict,
    RowProcessor,
    ScalarHandler,
    TypeHandler,
    substitute_nulls,
    trim_strings,
)

__all__ = [
    # Runners
    "QueryRunner",
    "AsyncQueryRunner",
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Boundary protocols
    "DataSource",
    "Connection",
    "Statement",
    "Cursor",
    "Column",
    "MemoryCursor",
    # Mapping
    "RowProcessor",
    "RowDict",
    "FieldMatcher",
    "PropertyCoercion",
    "TypeHandler",
    "trim_strings",
    "substitute_nulls",
    # Handlers
    "ResultHandler",
    "ArrayHandler",
    "ArrayListHandler",
    "DictHandler",
    "DictListHandler",
    "RecordHandler",
    "RecordListHandler",
    "ColumnListHandler",
    "ScalarHandler",
    "KeyedHandler",
    "KeyedDictHandler",
    "RecordMapHandler",
    "RecordGroupHandler",
    # Enums
    "DatabaseBackend",
    "ConnectionOwnership",
    "ExecutionState",
    # Exceptions
    "RowRunnerError",
    "AdapterError",
    "AcquisitionError",
    "ExecutionError",
    "BindError",
    "MappingError",
    "ConversionError",
]
