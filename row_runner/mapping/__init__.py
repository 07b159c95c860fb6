"""Mapping layer - turn cursor rows into lists, dicts, values and records."""

from __future__ import annotations

from row_runner.mapping.coercion import (
    DecimalHandler,
    EnumHandler,
    PropertyCoercion,
    TemporalHandler,
    TypeHandler,
)
from row_runner.mapping.descriptor import FieldDescriptor, RecordShape, describe
from row_runner.mapping.handlers import (
    ArrayHandler,
    ArrayListHandler,
    ColumnListHandler,
    DictHandler,
    DictListHandler,
    KeyedDictHandler,
    KeyedHandler,
    RecordGroupHandler,
    RecordHandler,
    RecordListHandler,
    RecordMapHandler,
    ScalarHandler,
)
from row_runner.mapping.matcher import FieldMatcher, MatchTable, normalize
from row_runner.mapping.processor import RowDict, RowProcessor, substitute_nulls, trim_strings
from row_runner.mapping.protocol import ResultHandler

__all__ = [
    "FieldDescriptor",
    "RecordShape",
    "describe",
    "FieldMatcher",
    "MatchTable",
    "normalize",
    "PropertyCoercion",
    "TypeHandler",
    "EnumHandler",
    "TemporalHandler",
    "DecimalHandler",
    "RowProcessor",
    "RowDict",
    "trim_strings",
    "substitute_nulls",
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
]
