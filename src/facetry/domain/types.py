"""View models produced by the aggregation functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

ExternalizedSelection: TypeAlias = dict[str, list[str]]


@dataclass(slots=True)
class FilterItem:
    """One selectable facet value."""

    value: str
    label: str
    checked: bool = False
    count: int | None = None


@dataclass(slots=True)
class FilterGroup:
    """One property's facet.

    ``id``, ``title`` and ``name`` all carry the property label; different widget
    slots read different fields.
    """

    id: str
    title: str
    name: str
    items: list[FilterItem] = field(default_factory=list["FilterItem"])
    property_uri: str | None = None


@dataclass(frozen=True, slots=True)
class PropertyValue:
    value: str
    value_label: str


@dataclass(slots=True)
class PropertyColumn:
    """All values of one property for one entity. Never empty."""

    property_uri: str
    property_label: str
    values: list[PropertyValue] = field(default_factory=list["PropertyValue"])


@dataclass(slots=True)
class NormalizedEntity:
    """An entity exposing the batch-wide column schema."""

    entity_id: str
    title: str | None = None
    description: str | None = None
    columns: list[PropertyColumn] = field(default_factory=list["PropertyColumn"])

    def column(self, property_uri: str) -> PropertyColumn | None:
        for column in self.columns:
            if column.property_uri == property_uri:
                return column
        return None
