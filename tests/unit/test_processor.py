"""Unit tests for row conversion."""

from __future__ import annotations

import pickle
from dataclasses import dataclass
from typing import Optional

import pytest

from row_runner.adapters.memory import MemoryCursor
from row_runner.adapters.protocol import Column
from row_runner.mapping.coercion import PropertyCoercion
from row_runner.mapping.matcher import FieldMatcher
from row_runner.mapping.processor import RowDict, RowProcessor, substitute_nulls, trim_strings

from fakes import CountingCursor


@dataclass
class Triple:
    one: str = ""
    two: int = 0
    three: str = "default"


@dataclass
class Measured:
    id: int
    width: Optional[float] = None
    label: str = "none"


@pytest.fixture
def processor() -> RowProcessor:
    return RowProcessor()


class TestRowDict:
    def test_case_insensitive_lookup(self) -> None:
        row = RowDict([("Name", "a")])
        assert row["name"] == "a"
        assert row["NAME"] == "a"
        assert "nAmE" in row
        assert row.get("NAME") == "a"
        assert list(row) == ["Name"]

    def test_reassign_with_other_case_replaces_key(self) -> None:
        row = RowDict([("Name", "a")])
        row["NAME"] = "b"
        assert dict(row) == {"NAME": "b"}

    def test_delete(self) -> None:
        row = RowDict([("Name", "a")])
        del row["name"]
        assert "Name" not in row
        assert row.get("name", "missing") == "missing"

    def test_missing_key(self) -> None:
        with pytest.raises(KeyError):
            RowDict()["x"]

    def test_pop(self) -> None:
        row = RowDict([("ID", 1)])
        assert row.pop("id") == 1
        assert row.pop("id", None) is None
        assert "ID" not in row
        row["id"] = 2
        assert dict(row) == {"id": 2}
        with pytest.raises(KeyError):
            RowDict().pop("id")

    def test_popitem(self) -> None:
        row = RowDict([("ID", 1)])
        assert row.popitem() == ("ID", 1)
        row["id"] = 2
        assert list(row) == ["id"]

    def test_update_folds_keys(self) -> None:
        row = RowDict([("ID", 1)])
        row.update({"id": 2}, NAME="a")
        assert dict(row) == {"id": 2, "NAME": "a"}
        row |= {"name": "b"}
        assert dict(row) == {"id": 2, "name": "b"}

    def test_setdefault(self) -> None:
        row = RowDict([("ID", 1)])
        assert row.setdefault("id", 5) == 1
        assert row.setdefault("Name", "a") == "a"
        assert list(row) == ["ID", "Name"]

    def test_copy_keeps_folding(self) -> None:
        copied = RowDict([("ID", 1)]).copy()
        assert isinstance(copied, RowDict)
        assert copied["id"] == 1

    def test_clear(self) -> None:
        row = RowDict([("ID", 1)])
        row.clear()
        row["id"] = 2
        assert list(row) == ["id"]

    def test_pickle(self) -> None:
        restored = pickle.loads(pickle.dumps(RowDict([("Name", "a")])))
        assert isinstance(restored, RowDict)
        assert restored["NAME"] == "a"


class TestRowProcessor:
    def test_to_array(self, processor: RowProcessor, cursor: CountingCursor) -> None:
        cursor.advance()
        assert processor.to_array(cursor) == ["1", "2", "THREE"]
        assert cursor.advance_count == 1

    def test_to_dict(self, processor: RowProcessor, cursor: CountingCursor) -> None:
        cursor.advance()
        row = processor.to_dict(cursor)
        assert row == {"one": "1", "two": "2", "three": "THREE"}
        assert row["THREE"] == "THREE"

    def test_to_dict_prefers_label(self, processor: RowProcessor) -> None:
        cursor = MemoryCursor([Column(index=1, name="c1", label="alias"), Column(index=2, name="c2", label="")], [[1, 2]])
        cursor.advance()
        assert processor.to_dict(cursor) == {"alias": 1, "c2": 2}

    def test_to_scalar(self, processor: RowProcessor, cursor: CountingCursor) -> None:
        cursor.advance()
        assert processor.to_scalar(cursor) == "1"
        assert processor.to_scalar(cursor, 3) == "THREE"
        assert processor.to_scalar(cursor, "Two") == "2"

    def test_post_processors_in_order(self) -> None:
        processor = RowProcessor(post_processors=[substitute_nulls(" n/a "), trim_strings])
        cursor = MemoryCursor(["a", "b", "c"], [["  x ", None, 5]])
        cursor.advance()
        assert processor.to_array(cursor) == ["x", "n/a", 5]
        assert processor.to_dict(cursor) == {"a": "x", "b": "n/a", "c": 5}

    def test_to_record(self, processor: RowProcessor, cursor: CountingCursor) -> None:
        cursor.advance()
        record = processor.to_record(cursor, Triple)
        assert record == Triple(one="1", two=2, three="THREE")

    def test_to_record_skips_unmatched_columns(self, processor: RowProcessor) -> None:
        cursor = MemoryCursor(["ID", "not_in_record", "WIDTH"], [[7, "x", "2.5"]])
        cursor.advance()
        assert processor.to_record(cursor, Measured) == Measured(id=7, width=2.5)

    def test_null_leaves_default(self, processor: RowProcessor) -> None:
        cursor = MemoryCursor(["id", "label"], [[7, None]])
        cursor.advance()
        assert processor.to_record(cursor, Measured).label == "none"

    def test_missing_required_field_gets_zero(self, processor: RowProcessor) -> None:
        cursor = MemoryCursor(["label"], [["x"]])
        cursor.advance()
        assert processor.to_record(cursor, Measured) == Measured(id=0, label="x")

    def test_no_columns_gives_defaults(self, processor: RowProcessor) -> None:
        cursor = MemoryCursor([], [[]])
        cursor.advance()
        assert processor.to_record(cursor, Triple) == Triple()

    def test_reuses_given_table(self, processor: RowProcessor, cursor: CountingCursor) -> None:
        table = processor.match(cursor, Triple)
        cursor.advance()
        first = processor.to_record(cursor, Triple, table)
        cursor.advance()
        second = processor.to_record(cursor, Triple, table)
        assert [first.two, second.two] == [2, 5]

    def test_custom_matcher_and_coercion(self) -> None:
        processor = RowProcessor(
            matcher=FieldMatcher(overrides={"w": "width"}),
            coercion=PropertyCoercion(builtin_handlers=False),
        )
        cursor = MemoryCursor(["id", "w"], [["3", 4]])
        cursor.advance()
        assert processor.to_record(cursor, Measured) == Measured(id=3, width=4.0)

    def test_does_not_advance(self, processor: RowProcessor, cursor: CountingCursor) -> None:
        cursor.advance()
        processor.to_array(cursor)
        processor.to_dict(cursor)
        processor.to_record(cursor, Triple)
        assert cursor.advance_count == 1
        assert processor.to_scalar(cursor) == "1"
