"""Unit tests for record shapes."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, ClassVar, Optional

import pytest
from pydantic import BaseModel, Field

from row_runner.core.exceptions import ConversionError, MappingError
from row_runner.mapping.descriptor import FieldDescriptor, describe


@dataclass
class Item:
    id: int
    name: str
    price: Optional[Decimal] = None
    tags: list[str] = field(default_factory=list)


class User(BaseModel):
    id: int
    email: str = Field(alias="emailAddress")
    active: bool = True


class Point:
    def __init__(self, x: int, y: int = 0) -> None:
        self.x = x
        self.y = y


class Settings:
    kind: ClassVar[str] = "settings"
    theme: str
    size: int

    def __init__(self) -> None:
        self.theme = "light"
        self.size = 10


class TestFieldDescriptor:
    @pytest.mark.parametrize(
        ("declared", "zero"),
        [(int, 0), (float, 0.0), (bool, False), (str, ""), (bytes, b""), (Decimal, Decimal(0))],
    )
    def test_zero_values(self, declared: Any, zero: Any) -> None:
        assert FieldDescriptor(name="f", declared_type=declared).zero_value == zero

    def test_nullable_zero_value_is_none(self) -> None:
        assert FieldDescriptor(name="f", declared_type=int, nullable=True).zero_value is None

    def test_unknown_type_zero_value_is_none(self) -> None:
        assert FieldDescriptor(name="f", declared_type=list).zero_value is None

    def test_shape(self) -> None:
        names = [f.name for f in dataclasses.fields(FieldDescriptor)]
        assert names == ["name", "declared_type", "nullable", "required", "alias"]
        with pytest.raises(dataclasses.FrozenInstanceError):
            FieldDescriptor(name="f").required = True  # type: ignore[misc]


class TestDescribeDataclass:
    def test_fields(self) -> None:
        shape = describe(Item)
        assert [f.name for f in shape.fields] == ["id", "name", "price", "tags"]
        price = shape.fields[2]
        assert price.declared_type is Decimal
        assert price.nullable
        assert not price.required
        assert shape.fields[0].required

    def test_cached(self) -> None:
        assert describe(Item) is describe(Item)

    def test_build_fills_required_with_zero(self) -> None:
        item = describe(Item).build({"name": "widget"})
        assert item == Item(id=0, name="widget")

    def test_build_keeps_defaults(self) -> None:
        item = describe(Item).build({"id": 1, "name": "a"})
        assert item.price is None
        assert item.tags == []


class TestDescribePydantic:
    def test_fields(self) -> None:
        shape = describe(User)
        assert shape.is_pydantic
        email = next(f for f in shape.fields if f.name == "email")
        assert email.alias == "emailAddress"
        assert email.required

    def test_build_uses_alias(self) -> None:
        user = describe(User).build({"id": 3, "email": "a@example.com"})
        assert user == User(id=3, emailAddress="a@example.com")
        assert user.active is True

    def test_build_validation_error(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            describe(User).build({"id": "abc", "email": "a@example.com"})
        assert exc_info.value.field == "id"
        assert exc_info.value.target_type is int


class TestDescribePlain:
    def test_init_parameters(self) -> None:
        shape = describe(Point)
        assert not shape.uses_setattr
        assert [(f.name, f.required) for f in shape.fields] == [("x", True), ("y", False)]

    def test_build(self) -> None:
        point = describe(Point).build({"y": 4})
        assert (point.x, point.y) == (0, 4)

    def test_annotations_with_setattr(self) -> None:
        shape = describe(Settings)
        assert shape.uses_setattr
        assert [f.name for f in shape.fields] == ["theme", "size"]
        settings = shape.build({"size": 12})
        assert settings.theme == "light"
        assert settings.size == 12

    def test_build_failure_raises_mapping_error(self) -> None:
        class Strict:
            def __init__(self, a: int) -> None:
                if a < 0:
                    raise TypeError("negative")
                self.a = a

        with pytest.raises(MappingError, match="Strict"):
            describe(Strict).build({"a": -1})
