"""Derive filter groups from facet query rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .rows import extract_facet_rows
from .types import FilterGroup, FilterItem

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .rows import FacetRowInput


log = getLogger(__name__)


@dataclass(slots=True)
class _PendingGroup:
    property_label: str
    items_by_value: dict[str, FilterItem] = field(default_factory=dict[str, FilterItem])


def derive_facets(rows: Iterable[FacetRowInput]) -> list[FilterGroup]:
    """Group facet rows by property into count-ordered filter groups.

    Groups appear in the order their property is first seen. Within a group the first
    row for a value wins; later duplicates are dropped without re-summing counts.
    Items are sorted by descending count, ties keeping input order.
    """

    pending: dict[str, _PendingGroup] = {}
    duplicates = 0

    for row in extract_facet_rows(rows):
        group = pending.get(row.property_uri)
        if group is None:
            group = _PendingGroup(property_label=row.property_label)
            pending[row.property_uri] = group

        if row.value in group.items_by_value:
            duplicates += 1
            continue

        group.items_by_value[row.value] = FilterItem(
            value=row.value,
            label=f"{row.value_label} ({row.count})",
            checked=False,
            count=row.count,
        )

    if duplicates:
        log.debug("Dropped %s duplicate facet rows", duplicates)

    return [
        FilterGroup(
            id=group.property_label,
            title=group.property_label,
            name=group.property_label,
            items=sorted(group.items_by_value.values(), key=_descending_count),
            property_uri=property_uri,
        )
        for property_uri, group in pending.items()
    ]


def _descending_count(item: FilterItem) -> int:
    return -(item.count or 0)
