"""Result handler protocol.

All handlers implement this interface. The QueryRunner passes the cursor
of an executed statement to ``handle`` and returns whatever it produces.
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from row_runner.adapters.protocol import Cursor

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class ResultHandler(Protocol[T_co]):
    """Base result handler protocol."""

    def handle(self, cursor: Cursor) -> T_co:
        """Consume the cursor and build the aggregate result."""
        ...
