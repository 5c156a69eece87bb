"""Errors raised while aggregating query rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class AggregationError(ValueError):
    """Base class for failures of an aggregation call."""


class MalformedRowError(AggregationError):
    """Raised when a row lacks a required field or carries an unparseable value."""

    def __init__(self, *, index: int | None, fields: Sequence[str], reason: str) -> None:
        self.index = index
        self.fields = tuple(fields)
        self.reason = reason
        location = f"row {index}" if index is not None else "row"
        field_list = ", ".join(self.fields) or "<row>"
        super().__init__(f"Malformed {location}: {field_list}: {reason}")


class ShapeMismatchError(AggregationError):
    """Raised when a row or batch matches none of the accepted shapes."""

    def __init__(self, *, index: int | None, expected: str, received: str) -> None:
        self.index = index
        self.expected = expected
        self.received = received
        location = f"row {index}" if index is not None else "batch"
        super().__init__(f"Unexpected shape for {location}: expected {expected}, got {received}")
