"""Result handlers.

Each handler drives the cursor (``while cursor.advance()``), converts rows
through a RowProcessor and folds them into one aggregate. Record handlers
build their MatchTable once per ``handle`` call. Handlers that need only
the first row advance the cursor exactly once.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from row_runner.adapters.protocol import Cursor
from row_runner.mapping.processor import RowDict, RowProcessor, records_from

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")


class ArrayHandler:
    """First row as a list of column values, or None."""

    def __init__(self, processor: RowProcessor | None = None) -> None:
        self.processor = processor or RowProcessor()

    def handle(self, cursor: Cursor) -> list[Any] | None:
        return self.processor.to_array(cursor) if cursor.advance() else None


class ArrayListHandler:
    """Every row as a list of column values, in cursor order."""

    def __init__(self, processor: RowProcessor | None = None) -> None:
        self.processor = processor or RowProcessor()

    def handle(self, cursor: Cursor) -> list[list[Any]]:
        rows = []
        while cursor.advance():
            rows.append(self.processor.to_array(cursor))
        return rows


class DictHandler:
    """First row as a RowDict, or None."""

    def __init__(self, processor: RowProcessor | None = None) -> None:
        self.processor = processor or RowProcessor()

    def handle(self, cursor: Cursor) -> RowDict | None:
        return self.processor.to_dict(cursor) if cursor.advance() else None


class DictListHandler:
    """Every row as a RowDict, in cursor order."""

    def __init__(self, processor: RowProcessor | None = None) -> None:
        self.processor = processor or RowProcessor()

    def handle(self, cursor: Cursor) -> list[RowDict]:
        rows = []
        while cursor.advance():
            rows.append(self.processor.to_dict(cursor))
        return rows


class RecordHandler(Generic[T]):
    """First row as a record of *record_type*, or None."""

    def __init__(self, record_type: type[T], processor: RowProcessor | None = None) -> None:
        self.record_type = record_type
        self.processor = processor or RowProcessor()

    def handle(self, cursor: Cursor) -> T | None:
        if not cursor.advance():
            return None
        return self.processor.to_record(cursor, self.record_type)


class RecordListHandler(Generic[T]):
    """Every row as a record of *record_type*, in cursor order."""

    def __init__(self, record_type: type[T], processor: RowProcessor | None = None) -> None:
        self.record_type = record_type
        self.processor = processor or RowProcessor()

    def handle(self, cursor: Cursor) -> list[T]:
        convert = records_from(self.processor, cursor, self.record_type)
        records = []
        while cursor.advance():
            records.append(convert())
        return records


class ColumnListHandler:
    """One column of every row, by 1-based index (default 1) or name."""

    def __init__(self, column: int | str = 1, processor: RowProcessor | None = None) -> None:
        self.column = column
        self.processor = processor or RowProcessor()

    def handle(self, cursor: Cursor) -> list[Any]:
        values = []
        while cursor.advance():
            values.append(self.processor.to_scalar(cursor, self.column))
        return values


class ScalarHandler:
    """One column of the first row, or None."""

    def __init__(self, column: int | str = 1, processor: RowProcessor | None = None) -> None:
        self.column = column
        self.processor = processor or RowProcessor()

    def handle(self, cursor: Cursor) -> Any:
        if not cursor.advance():
            return None
        return self.processor.to_scalar(cursor, self.column)


class KeyedHandler(ABC, Generic[K, V]):
    """Base for handlers returning a dict of rows keyed by one value per row.

    ``handle`` builds one row converter with :meth:`row_factory`, then for
    every row converts it, derives its key with :meth:`create_key` and
    puts both into the map from :meth:`create_map` through :meth:`store`.
    By default later rows overwrite earlier rows with an equal key.
    """

    def create_map(self) -> dict[K, Any]:
        return {}

    @abstractmethod
    def create_key(self, cursor: Cursor, row: V) -> K:
        """Key of the current row, from the cursor or the converted row."""

    @abstractmethod
    def create_row(self, cursor: Cursor) -> V:
        """Value stored for the current row."""

    def row_factory(self, cursor: Cursor) -> Callable[[], V]:
        return lambda: self.create_row(cursor)

    def store(self, result: dict[K, Any], key: K, row: V) -> None:
        result[key] = row

    def handle(self, cursor: Cursor) -> dict[K, Any]:
        result = self.create_map()
        build = self.row_factory(cursor)
        while cursor.advance():
            row = build()
            self.store(result, self.create_key(cursor, row), row)
        return result


class KeyedDictHandler(KeyedHandler[Any, RowDict]):
    """Rows as RowDicts keyed by one column (default: the first)."""

    def __init__(self, key: int | str = 1, processor: RowProcessor | None = None) -> None:
        self.key = key
        self.processor = processor or RowProcessor()

    def create_key(self, cursor: Cursor, row: RowDict) -> Any:
        return cursor.get(self.key)

    def create_row(self, cursor: Cursor) -> RowDict:
        return self.processor.to_dict(cursor)


class RecordMapHandler(KeyedHandler[Any, T]):
    """Records keyed by a column or attribute; duplicate keys overwrite.

    The key comes from the ``key`` column read off the cursor, or from the
    ``key_attr`` attribute of the converted record when that is set.
    """

    def __init__(
        self,
        record_type: type[T],
        key: int | str = 1,
        key_attr: str | None = None,
        processor: RowProcessor | None = None,
    ) -> None:
        self.record_type = record_type
        self.key = key
        self.key_attr = key_attr
        self.processor = processor or RowProcessor()

    def create_key(self, cursor: Cursor, row: T) -> Any:
        if self.key_attr is None:
            return cursor.get(self.key)
        return getattr(row, self.key_attr)

    def create_row(self, cursor: Cursor) -> T:
        return self.processor.to_record(cursor, self.record_type)

    def row_factory(self, cursor: Cursor) -> Callable[[], T]:
        return records_from(self.processor, cursor, self.record_type)


class RecordGroupHandler(RecordMapHandler[T]):
    """Lists of records grouped by a column or attribute, in row order."""

    def store(self, result: dict[Any, Any], key: Any, row: T) -> None:
        result.setdefault(key, []).append(row)
