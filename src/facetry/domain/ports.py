"""Ports for the graph-query layer that feeds the aggregation engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .rows import FacetRowInput, PropertyRowInput
    from .types import ExternalizedSelection


@runtime_checkable
class FacetQuery(Protocol):
    """Callable port returning facet rows, one per (property, value) with its count."""

    async def __call__(self) -> Sequence[FacetRowInput]: ...


@runtime_checkable
class DetailsQuery(Protocol):
    """Callable port returning entity property rows, optionally narrowed by filters."""

    async def __call__(
        self, filters: ExternalizedSelection | None = None
    ) -> Sequence[PropertyRowInput]: ...


__all__ = ["DetailsQuery", "FacetQuery"]
