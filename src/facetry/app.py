"""Application orchestration: initial catalog load and filtered refreshes."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from facetry.config import get_aggregation_config
from facetry.domain import SelectionController, derive_facets, normalize_properties

if TYPE_CHECKING:
    from facetry.config import AggregationConfig
    from facetry.domain import (
        DetailsQuery,
        ExternalizedSelection,
        FacetQuery,
        NormalizedEntity,
    )


log = getLogger(__name__)


class CatalogSession:
    """Loads facets and entity details once, then refreshes both on filter changes.

    The session owns its ``SelectionController`` and registers ``refresh`` as the
    controller's filter-change callback, so toggling a value re-queries the details
    with the current selection and replaces facets and entities wholesale.
    """

    def __init__(
        self,
        *,
        facet_query: FacetQuery,
        details_query: DetailsQuery,
        config: AggregationConfig | None = None,
    ) -> None:
        self._facet_query = facet_query
        self._details_query = details_query
        self._config = config or get_aggregation_config()
        self._entities: dict[str, NormalizedEntity] = {}
        self._controller: SelectionController | None = None

    @property
    def controller(self) -> SelectionController:
        if self._controller is None:
            raise RuntimeError("CatalogSession.load() must be awaited first")
        return self._controller

    @property
    def entities(self) -> list[NormalizedEntity]:
        return list(self._entities.values())

    def entity(self, entity_id: str) -> NormalizedEntity | None:
        return self._entities.get(entity_id)

    async def load(self) -> SelectionController:
        facet_rows = await self._facet_query()
        detail_rows = await self._details_query(None)

        self._entities = normalize_properties(detail_rows, config=self._config)
        self._controller = SelectionController.from_rows(
            facet_rows, on_filter_change=self.refresh
        )
        log.info(
            "Loaded catalog: facets=%s, entities=%s",
            len(self._controller.filter_groups),
            len(self._entities),
        )
        return self._controller

    async def refresh(self, filters: ExternalizedSelection) -> None:
        detail_rows = await self._details_query(filters)
        facet_rows = await self._facet_query()

        entities = normalize_properties(detail_rows, config=self._config)
        filter_groups = derive_facets(facet_rows)

        self._entities = entities
        self.controller.replace_filter_groups(filter_groups)
        log.info(
            "Refreshed catalog: filters=%s, facets=%s, entities=%s",
            sorted(filters),
            len(filter_groups),
            len(entities),
        )
