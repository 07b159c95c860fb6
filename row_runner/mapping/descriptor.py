"""Record shapes: field descriptors derived once per record class.

Supports dataclasses, Pydantic models, and plain classes. Plain classes
expose their fields through ``__init__`` parameters, or through class
annotations when ``__init__`` takes no arguments (attributes are then set
on a default-constructed instance).
"""

from __future__ import annotations

import dataclasses
import inspect
import types
import typing
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Any, Union

from pydantic import BaseModel, ValidationError

from row_runner.core.exceptions import ConversionError, MappingError

_ZERO_VALUES: dict[Any, Any] = {
    int: 0,
    float: 0.0,
    bool: False,
    str: "",
    bytes: b"",
    Decimal: Decimal(0),
}


@dataclass(frozen=True)
class FieldDescriptor:
    """One settable field of a record class."""

    name: str
    declared_type: Any = Any
    nullable: bool = False
    required: bool = False
    alias: str | None = None

    @property
    def zero_value(self) -> Any:
        """Value used for a required field that no column fills."""
        if self.nullable:
            return None
        return _ZERO_VALUES.get(self.declared_type)


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Split ``X | None`` into ``(X, True)``."""
    if isinstance(annotation, str):
        return Any, False
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        nullable = len(args) < len(typing.get_args(annotation))
        if len(args) == 1:
            return args[0], nullable
        return annotation, nullable
    if annotation is None or annotation is type(None):
        return Any, True
    return annotation, False


def _type_hints(obj: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(obj)
    except (NameError, TypeError):
        # Unresolvable forward references
        return dict(getattr(obj, "__annotations__", {}))


def _describe_pydantic(cls: type[BaseModel]) -> list[FieldDescriptor]:
    fields: list[FieldDescriptor] = []
    for name, info in cls.model_fields.items():
        declared, nullable = _unwrap_optional(info.annotation)
        fields.append(
            FieldDescriptor(
                name=name,
                declared_type=declared,
                nullable=nullable,
                required=info.is_required(),
                alias=info.alias,
            )
        )
    return fields


def _describe_dataclass(cls: type) -> list[FieldDescriptor]:
    hints = _type_hints(cls)
    fields: list[FieldDescriptor] = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        declared, nullable = _unwrap_optional(hints.get(f.name, f.type))
        required = f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
        fields.append(
            FieldDescriptor(name=f.name, declared_type=declared, nullable=nullable, required=required)
        )
    return fields


def _init_parameters(cls: type) -> list[inspect.Parameter]:
    try:
        sig = inspect.signature(cls.__init__)  # type: ignore[misc]
    except (ValueError, TypeError):
        return []
    return [
        param
        for name, param in sig.parameters.items()
        if name != "self"
        and param.kind in (param.POSITIONAL_OR_KEYWORD, param.KEYWORD_ONLY)
    ]


def _describe_plain(cls: type) -> tuple[list[FieldDescriptor], bool]:
    """Return the fields and whether they are set as attributes."""
    params = _init_parameters(cls)
    if params:
        hints = _type_hints(cls.__init__)
        fields = []
        for param in params:
            declared, nullable = _unwrap_optional(hints.get(param.name, Any))
            fields.append(
                FieldDescriptor(
                    name=param.name,
                    declared_type=declared,
                    nullable=nullable,
                    required=param.default is inspect.Parameter.empty,
                )
            )
        return fields, False

    hints = _type_hints(cls)
    fields = []
    for name, annotation in hints.items():
        if name.startswith("_") or typing.get_origin(annotation) is typing.ClassVar:
            continue
        declared, nullable = _unwrap_optional(annotation)
        fields.append(FieldDescriptor(name=name, declared_type=declared, nullable=nullable))
    return fields, True


@dataclass(frozen=True)
class RecordShape:
    """Field descriptors of a record class plus the way to build instances."""

    record_type: type
    fields: tuple[FieldDescriptor, ...]
    is_pydantic: bool = False
    uses_setattr: bool = False

    def build(self, values: dict[str, Any]) -> Any:
        """Create a record from field-name → value pairs.

        Fields missing from *values* keep their declared default; required
        fields without a default get the zero value of their type.
        """
        if self.uses_setattr:
            instance = self.record_type()
            for name, value in values.items():
                setattr(instance, name, value)
            return instance

        kwargs = dict(values)
        for f in self.fields:
            if f.required and f.name not in kwargs:
                kwargs[f.name] = f.zero_value

        if self.is_pydantic:
            payload = {(f.alias or f.name): kwargs[f.name] for f in self.fields if f.name in kwargs}
            try:
                return self.record_type.model_validate(payload)  # type: ignore[attr-defined]
            except ValidationError as e:
                error = e.errors()[0]
                name = str((error.get("loc") or ("?",))[0])
                target = next(
                    (f.declared_type for f in self.fields if name in (f.name, f.alias)),
                    Any,
                )
                raise ConversionError(name, target, error.get("input")) from e

        try:
            return self.record_type(**kwargs)
        except TypeError as e:
            raise MappingError(f"Cannot build {self.record_type.__name__}: {e}") from e


@lru_cache(maxsize=None)
def describe(record_type: type) -> RecordShape:
    """Derive (and cache) the shape of *record_type*."""
    if isinstance(record_type, type) and issubclass(record_type, BaseModel):
        return RecordShape(record_type, tuple(_describe_pydantic(record_type)), is_pydantic=True)
    if dataclasses.is_dataclass(record_type):
        return RecordShape(record_type, tuple(_describe_dataclass(record_type)))
    fields, uses_setattr = _describe_plain(record_type)
    return RecordShape(record_type, tuple(fields), uses_setattr=uses_setattr)
