"""Property coercion: converting raw column values into declared field types.

Handlers are tried in order and the first whose ``match`` returns True
converts the value. Precedence is fixed:

1. custom handlers, in registration order;
2. built-in handlers (``EnumHandler``, ``TemporalHandler``, ``DecimalHandler``);
3. the default numeric/text coercion.

Conversion is best effort: a handler that raises, or a default coercion
that fails, leaves the original value in place unless ``strict`` is set.
"""

from __future__ import annotations

import logging
import typing
from collections.abc import Sequence
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from row_runner.core.exceptions import ConversionError

logger = logging.getLogger(__name__)

_TRUE_STRINGS = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "f", "no", "n", "off", ""})

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


@runtime_checkable
class TypeHandler(Protocol):
    """Converts values for the target types it claims."""

    def match(self, target_type: Any, value: Any) -> bool:
        """Whether this handler wants to convert *value* into *target_type*."""
        ...

    def apply(self, target_type: Any, value: Any) -> Any:
        """The converted value, or *value* unchanged if it cannot convert."""
        ...


def _is_class(target_type: Any) -> bool:
    return isinstance(target_type, type) and typing.get_origin(target_type) is None


class EnumHandler:
    """Enum members from their value or their name."""

    def match(self, target_type: Any, value: Any) -> bool:
        return (
            _is_class(target_type)
            and issubclass(target_type, Enum)
            and not isinstance(value, target_type)
        )

    def apply(self, target_type: Any, value: Any) -> Any:
        try:
            return target_type(value)
        except ValueError:
            if isinstance(value, str):
                return target_type[value.strip()]
            raise


class TemporalHandler:
    """``date`` / ``datetime`` / ``time`` from ISO strings and from each other."""

    def match(self, target_type: Any, value: Any) -> bool:
        if target_type not in (date, datetime, time):
            return False
        if type(value) is target_type:
            return False
        return isinstance(value, (str, date))

    def apply(self, target_type: Any, value: Any) -> Any:
        if isinstance(value, str):
            return target_type.fromisoformat(value.strip())
        if target_type is date:
            return value.date() if isinstance(value, datetime) else value
        if target_type is datetime:
            return datetime.combine(value, time())
        if target_type is time and isinstance(value, datetime):
            return value.time()
        return value


class DecimalHandler:
    """``Decimal`` from numbers and numeric strings (floats via ``str``)."""

    def match(self, target_type: Any, value: Any) -> bool:
        return target_type is Decimal and isinstance(value, (int, float, str))

    def apply(self, target_type: Any, value: Any) -> Any:
        if isinstance(value, float):
            return Decimal(str(value))
        if isinstance(value, str):
            return Decimal(value.strip())
        return Decimal(value)


def default_handlers() -> list[TypeHandler]:
    """Fresh instances of the built-in handlers, in precedence order."""
    return [EnumHandler(), TemporalHandler(), DecimalHandler()]


class _Unconvertible(Exception):
    pass


def _to_bool(value: Any) -> bool:
    if isinstance(value, (int, float, Decimal)):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise _Unconvertible


def _default_convert(target_type: Any, value: Any) -> Any:
    """Numeric widening/narrowing and text conversion."""
    if target_type is bool:
        return value if isinstance(value, bool) else _to_bool(value)
    if target_type is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, (bool, float, Decimal)):
            return int(value)
        if isinstance(value, str):
            return int(value.strip())
        raise _Unconvertible
    if target_type is float:
        if isinstance(value, float):
            return value
        if isinstance(value, (int, Decimal, str)):
            return float(value)
        raise _Unconvertible
    if target_type is Decimal:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))
    if target_type is str:
        if isinstance(value, str):
            return value
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value).decode("utf-8")
        return str(value)
    if target_type is bytes:
        if isinstance(value, bytes):
            return value
        if isinstance(value, str):
            return value.encode("utf-8")
        if isinstance(value, (bytearray, memoryview)):
            return bytes(value)
        raise _Unconvertible
    if _is_class(target_type) and not isinstance(value, target_type):
        raise _Unconvertible
    return value


def _is_scalar_target(target_type: Any) -> bool:
    if target_type is Any or target_type is object:
        return False
    origin = typing.get_origin(target_type) or target_type
    if _is_class(origin) and issubclass(origin, (Sequence, set, frozenset)):
        # str and bytes are sequences but scalar column values
        return issubclass(origin, (str, bytes))
    return True


class PropertyCoercion:
    """Converts raw column values into declared field types.

    Args:
        handlers: Custom handlers, tried before the built-in ones.
        builtin_handlers: Whether to append the built-in handlers.
        collapse_sequences: Collapse a list/tuple raw value headed for a
            scalar field to its first element.
        strict: Raise ConversionError instead of passing unconvertible
            values through.
    """

    def __init__(
        self,
        handlers: Sequence[TypeHandler] = (),
        *,
        builtin_handlers: bool = True,
        collapse_sequences: bool = True,
        strict: bool = False,
    ) -> None:
        self._custom: list[TypeHandler] = list(handlers)
        self._builtin: list[TypeHandler] = default_handlers() if builtin_handlers else []
        self._fallback: list[TypeHandler] = []
        self.collapse_sequences = collapse_sequences
        self.strict = strict

    @property
    def handlers(self) -> tuple[TypeHandler, ...]:
        """The handler chain in precedence order."""
        return (*self._custom, *self._builtin, *self._fallback)

    def register(self, handler: TypeHandler, *, prepend: bool = True) -> None:
        """Add *handler* to the chain.

        With *prepend* the handler goes to the head of the chain, ahead of
        every handler registered before it and of the built-ins. Otherwise
        it runs after the built-ins, just before default coercion.
        """
        if prepend:
            self._custom.insert(0, handler)
        else:
            self._fallback.append(handler)

    def convert(self, target_type: Any, value: Any, field: str | None = None) -> Any:
        """Convert *value* for a field declared as *target_type*.

        ``None`` is returned unchanged; callers leave such fields at their
        default.
        """
        if value is None:
            return None

        if (
            self.collapse_sequences
            and isinstance(value, _SEQUENCE_TYPES)
            and _is_scalar_target(target_type)
        ):
            value = next(iter(value), None)
            if value is None:
                return None

        for handler in self.handlers:
            if handler.match(target_type, value):
                try:
                    return handler.apply(target_type, value)
                except Exception as e:
                    if self.strict:
                        raise ConversionError(field or "?", target_type, value) from e
                    logger.debug(
                        "%s could not convert %r to %r: %s",
                        type(handler).__name__,
                        value,
                        target_type,
                        e,
                    )
                    return value

        try:
            return _default_convert(target_type, value)
        except (_Unconvertible, ValueError, TypeError, InvalidOperation, UnicodeDecodeError) as e:
            if self.strict:
                raise ConversionError(field or "?", target_type, value) from e
            logger.debug("Leaving %r unconverted for %r", value, target_type)
            return value
