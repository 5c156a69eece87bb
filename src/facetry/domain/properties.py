"""Group entity property rows into uniformly shaped entity tables.

Every entity of a batch exposes the same columns in the same order: the distinct
properties of the whole batch, sorted by label. Properties an entity has no rows for
are filled with a single placeholder value.
"""

from __future__ import annotations

import unicodedata
from logging import getLogger
from typing import TYPE_CHECKING, TypeAlias

from facetry.config import AggregationConfig

from .rows import extract_property_rows
from .types import NormalizedEntity, PropertyColumn, PropertyValue

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .rows import PropertyRowInput


log = getLogger(__name__)

ColumnSchema: TypeAlias = list[tuple[str, str]]


def normalize_properties(
    rows: Iterable[PropertyRowInput],
    *,
    config: AggregationConfig | None = None,
) -> dict[str, NormalizedEntity]:
    """Return entities keyed by id, in order of first appearance."""

    settings = config or AggregationConfig()
    property_rows = extract_property_rows(rows)
    schema = canonical_schema(property_rows)

    entities: dict[str, NormalizedEntity] = {}
    columns_by_entity: dict[str, dict[str, PropertyColumn]] = {}

    for row in property_rows:
        entity = entities.get(row.entity_id)
        if entity is None:
            entity = NormalizedEntity(entity_id=row.entity_id)
            entities[row.entity_id] = entity
            columns_by_entity[row.entity_id] = {}

        if row.property_label in settings.title_labels:
            if entity.title is None:
                entity.title = row.value_label
        elif row.property_label in settings.description_labels and entity.description is None:
            entity.description = row.value_label

        columns = columns_by_entity[row.entity_id]
        column = columns.get(row.property_uri)
        if column is None:
            column = PropertyColumn(
                property_uri=row.property_uri, property_label=row.property_label
            )
            columns[row.property_uri] = column
        column.values.append(PropertyValue(value=row.value, value_label=row.value_label))

    for entity_id, entity in entities.items():
        existing = columns_by_entity[entity_id]
        entity.columns = [
            _canonical_column(existing.get(property_uri), property_uri, property_label, settings)
            for property_uri, property_label in schema
        ]

    log.debug("Normalized %s entities across %s properties", len(entities), len(schema))
    return entities


def canonical_schema(rows: Iterable[PropertyRowInput]) -> ColumnSchema:
    """Distinct ``(property_uri, property_label)`` pairs sorted by label.

    The first label seen for a property wins.
    """

    labels: dict[str, str] = {}
    for row in extract_property_rows(rows):
        labels.setdefault(row.property_uri, row.property_label)
    return sorted(labels.items(), key=lambda item: collation_key(item[1]))


def collation_key(label: str) -> tuple[str, str]:
    """Sort key approximating locale-aware comparison of display labels.

    Accents and case are ignored first; labels equal on that basis fall back to code
    point order, so ``"A"`` sorts before ``"a"`` (ICU collation puts lowercase first).
    """

    decomposed = unicodedata.normalize("NFKD", label)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), label


def _canonical_column(
    column: PropertyColumn | None,
    property_uri: str,
    property_label: str,
    config: AggregationConfig,
) -> PropertyColumn:
    if column is None:
        return _placeholder_column(property_uri, property_label, config)
    column.property_label = property_label
    return column


def _placeholder_column(
    property_uri: str, property_label: str, config: AggregationConfig
) -> PropertyColumn:
    return PropertyColumn(
        property_uri=property_uri,
        property_label=property_label,
        values=[PropertyValue(value="", value_label=config.missing_value_label)],
    )
