"""Aggregation engine: facet derivation, property normalization, selection state."""

from __future__ import annotations

from .aggregate import aggregate_batch
from .errors import AggregationError, MalformedRowError, ShapeMismatchError
from .facets import derive_facets
from .ports import DetailsQuery, FacetQuery
from .properties import canonical_schema, normalize_properties
from .rows import (
    FacetRowBatch,
    PropertyRowBatch,
    RawFacetRow,
    RawPropertyRow,
    extract_facet_rows,
    extract_property_rows,
    parse_row_batch,
)
from .selection import ControllerEvent, SelectionController, SelectionView
from .types import (
    ExternalizedSelection,
    FilterGroup,
    FilterItem,
    NormalizedEntity,
    PropertyColumn,
    PropertyValue,
)

__all__ = [
    "AggregationError",
    "ControllerEvent",
    "DetailsQuery",
    "ExternalizedSelection",
    "FacetQuery",
    "FacetRowBatch",
    "FilterGroup",
    "FilterItem",
    "MalformedRowError",
    "NormalizedEntity",
    "PropertyColumn",
    "PropertyRowBatch",
    "PropertyValue",
    "RawFacetRow",
    "RawPropertyRow",
    "SelectionController",
    "SelectionView",
    "ShapeMismatchError",
    "aggregate_batch",
    "canonical_schema",
    "derive_facets",
    "extract_facet_rows",
    "extract_property_rows",
    "normalize_properties",
    "parse_row_batch",
]
