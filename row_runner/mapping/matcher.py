"""Column-to-field matching.

Columns are matched to record fields by normalized name: surrounding and
interior whitespace and underscores are removed and case is folded, so
``t_h_r_e_e``, ``tHree`` and ``th ree`` all match a field named ``three``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence

from row_runner.adapters.protocol import Column
from row_runner.mapping.descriptor import FieldDescriptor

_IGNORED = re.compile(r"[\s_]+")


def normalize(name: str) -> str:
    """Normalize a column label or field name for matching."""
    return _IGNORED.sub("", name.strip()).casefold()


class MatchTable(Sequence["FieldDescriptor | None"]):
    """Per-execution column → field assignment.

    Slot 0 is an unused sentinel so that slot *i* belongs to the 1-based
    column *i*. Unmatched columns hold ``None``.
    """

    __slots__ = ("_slots",)

    def __init__(self, slots: Sequence[FieldDescriptor | None]) -> None:
        self._slots = tuple(slots)

    def __getitem__(self, index):  # type: ignore[no-untyped-def, override]
        return self._slots[index]

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        names = [f.name if f is not None else None for f in self._slots[1:]]
        return f"MatchTable({names})"

    def assignments(self) -> Iterator[tuple[int, FieldDescriptor]]:
        """Yield ``(column_index, field)`` for every matched column."""
        for index in range(1, len(self._slots)):
            field = self._slots[index]
            if field is not None:
                yield index, field


class FieldMatcher:
    """Builds a MatchTable from result columns and record fields.

    Args:
        overrides: Optional column → field name mapping, checked before
            normalized matching. Keys are looked up by the column label
            first, then by the column name.
    """

    def __init__(self, overrides: dict[str, str] | None = None) -> None:
        self._overrides = dict(overrides or {})

    def match(
        self,
        columns: Sequence[Column],
        fields: Sequence[FieldDescriptor],
    ) -> MatchTable:
        # First-declared field wins when two fields normalize to the same key
        by_key: dict[str, FieldDescriptor] = {}
        by_name: dict[str, FieldDescriptor] = {}
        for field in fields:
            by_key.setdefault(normalize(field.name), field)
            by_name.setdefault(field.name, field)

        slots: list[FieldDescriptor | None] = [None] * (len(columns) + 1)
        for position, column in enumerate(columns, start=1):
            slots[position] = self._match_column(column, by_key, by_name)
        return MatchTable(slots)

    def _match_column(
        self,
        column: Column,
        by_key: dict[str, FieldDescriptor],
        by_name: dict[str, FieldDescriptor],
    ) -> FieldDescriptor | None:
        if column.label is None:
            return None
        label = column.label or column.name
        for source in (label, column.name):
            override = self._overrides.get(source)
            if override is not None and override in by_name:
                return by_name[override]
        return by_key.get(normalize(label))
