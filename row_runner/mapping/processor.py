"""Row conversion.

RowProcessor turns the cursor's current row into a list, a dict, a single
value, or a record. It never advances the cursor.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

from row_runner.adapters.protocol import Column, Cursor
from row_runner.mapping.coercion import PropertyCoercion
from row_runner.mapping.descriptor import describe
from row_runner.mapping.matcher import FieldMatcher, MatchTable

T = TypeVar("T")

ValueProcessor = Callable[[Any], Any]


def trim_strings(value: Any) -> Any:
    """Strip surrounding whitespace from string values."""
    if isinstance(value, str):
        return value.strip()
    return value


def substitute_nulls(replacement: Any) -> ValueProcessor:
    """Build a processor replacing ``None`` with *replacement*."""

    def _substitute(value: Any) -> Any:
        return replacement if value is None else value

    return _substitute


class RowDict(dict):  # type: ignore[type-arg]
    """Dict of column label → value with case-insensitive key lookup.

    Keys keep the spelling reported by the cursor.
    """

    def __init__(self, items: Iterable[tuple[str, Any]] = ()) -> None:
        super().__init__()
        self._folded: dict[str, str] = {}
        for key, value in items:
            self[key] = value

    def _key(self, key: Any) -> Any:
        if isinstance(key, str):
            return self._folded.get(key.casefold(), key)
        return key

    def __setitem__(self, key: Any, value: Any) -> None:
        if isinstance(key, str):
            existing = self._folded.get(key.casefold())
            if existing is not None and existing != key:
                super().__delitem__(existing)
            self._folded[key.casefold()] = key
        super().__setitem__(key, value)

    def __getitem__(self, key: Any) -> Any:
        return super().__getitem__(self._key(key))

    def __delitem__(self, key: Any) -> None:
        real = self._key(key)
        super().__delitem__(real)
        if isinstance(real, str):
            self._folded.pop(real.casefold(), None)

    def __contains__(self, key: object) -> bool:
        return super().__contains__(self._key(key))

    def get(self, key: Any, default: Any = None) -> Any:
        return super().get(self._key(key), default)

    def pop(self, key: Any, *default: Any) -> Any:
        real = self._key(key)
        if isinstance(real, str) and super().__contains__(real):
            self._folded.pop(real.casefold(), None)
        return super().pop(real, *default)

    def popitem(self) -> tuple[Any, Any]:
        key, value = super().popitem()
        if isinstance(key, str):
            self._folded.pop(key.casefold(), None)
        return key, value

    def setdefault(self, key: Any, default: Any = None) -> Any:
        if key not in self:
            self[key] = default
        return self[key]

    def update(self, *args: Any, **kwargs: Any) -> None:
        for key, value in dict(*args, **kwargs).items():
            self[key] = value

    def __ior__(self, other: Any) -> RowDict:
        self.update(other)
        return self

    def clear(self) -> None:
        super().clear()
        self._folded.clear()

    def copy(self) -> RowDict:
        return type(self)(self.items())

    def __reduce__(self):  # type: ignore[no-untyped-def]
        return (type(self), (list(self.items()),))


def _column_key(column: Column) -> str:
    return column.label or column.name


class RowProcessor:
    """Converts the current row of a cursor.

    Args:
        matcher: Column-to-field matcher for record conversion.
        coercion: Value coercion for record conversion.
        post_processors: Functions applied, in order, to every value in
            list and dict conversion.
    """

    def __init__(
        self,
        matcher: FieldMatcher | None = None,
        coercion: PropertyCoercion | None = None,
        post_processors: Sequence[ValueProcessor] = (),
    ) -> None:
        self.matcher = matcher or FieldMatcher()
        self.coercion = coercion or PropertyCoercion()
        self.post_processors = tuple(post_processors)

    def _post_process(self, value: Any) -> Any:
        for processor in self.post_processors:
            value = processor(value)
        return value

    def to_array(self, cursor: Cursor) -> list[Any]:
        """One value per column, in column order."""
        return [
            self._post_process(cursor.get(column.index))
            for column in cursor.columns()
        ]

    def to_dict(self, cursor: Cursor) -> RowDict:
        """Column label → value, with case-insensitive lookup."""
        return RowDict(
            (_column_key(column), self._post_process(cursor.get(column.index)))
            for column in cursor.columns()
        )

    def to_scalar(self, cursor: Cursor, column: int | str = 1) -> Any:
        """The value of one column, by 1-based index or name."""
        return cursor.get(column)

    def match(self, cursor: Cursor, record_type: type) -> MatchTable:
        """Build the MatchTable for *record_type* against the cursor's columns."""
        return self.matcher.match(cursor.columns(), describe(record_type).fields)

    def to_record(
        self,
        cursor: Cursor,
        record_type: type[T],
        table: MatchTable | None = None,
    ) -> T:
        """Build one record from the current row.

        Pass the *table* from :meth:`match` to reuse it across rows.
        """
        if table is None:
            table = self.match(cursor, record_type)
        values: dict[str, Any] = {}
        for index, field in table.assignments():
            value = self.coercion.convert(field.declared_type, cursor.get(index), field.name)
            # NULL leaves the field at its default
            if value is not None:
                values[field.name] = value
        return describe(record_type).build(values)  # type: ignore[no-any-return]


def records_from(
    processor: RowProcessor,
    cursor: Cursor,
    record_type: type[T],
) -> Callable[[], T]:
    """Return a per-row converter that builds the MatchTable once."""
    table: MatchTable | None = None

    def _convert() -> T:
        nonlocal table
        if table is None:
            table = processor.match(cursor, record_type)
        return processor.to_record(cursor, record_type, table)

    return _convert
