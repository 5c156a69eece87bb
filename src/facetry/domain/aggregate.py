"""Dispatch a typed row batch to its aggregation function."""

from __future__ import annotations

from functools import singledispatch
from typing import TYPE_CHECKING

from .errors import ShapeMismatchError
from .facets import derive_facets
from .properties import normalize_properties
from .rows import FacetRowBatch, PropertyRowBatch

if TYPE_CHECKING:
    from facetry.config import AggregationConfig

    from .types import FilterGroup, NormalizedEntity


@singledispatch
def aggregate_batch(
    batch: object, *, config: AggregationConfig | None = None
) -> list[FilterGroup] | dict[str, NormalizedEntity]:
    raise ShapeMismatchError(
        index=None,
        expected="FacetRowBatch or PropertyRowBatch",
        received=type(batch).__name__,
    )


@aggregate_batch.register(FacetRowBatch)
def _(batch: FacetRowBatch, *, config: AggregationConfig | None = None) -> list[FilterGroup]:
    return derive_facets(batch.rows)


@aggregate_batch.register(PropertyRowBatch)
def _(
    batch: PropertyRowBatch, *, config: AggregationConfig | None = None
) -> dict[str, NormalizedEntity]:
    return normalize_properties(batch.rows, config=config)
