"""Pydantic models describing the rows returned by the graph-query layer.

Rows arrive either as the typed models below or as loose string-keyed bindings using
the query's variable names (``prop``, ``propLabel``, ``val``, ``valLabel``, ``count``
for facets, plus ``service`` for entity properties). Both are funnelled through the
``extract_*`` helpers, which translate validation failures into ``MalformedRowError``.

Which of the two row kinds a batch holds is decided by the loader and stated
explicitly through ``FacetRowBatch`` / ``PropertyRowBatch``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Annotated, ClassVar, Literal, TypeAlias, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from .errors import MalformedRowError, ShapeMismatchError

log = logging.getLogger(__name__)

_COUNT_PATTERN = re.compile(r"[+-]?[0-9]+")


class QueryRowModel(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "%s: ignoring unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class RawFacetRow(QueryRowModel):
    """One candidate filter value with its pre-aggregated frequency."""

    property_uri: str = Field(alias="prop")
    property_label: str = Field(alias="propLabel")
    value: str = Field(alias="val")
    value_label: str = Field(alias="valLabel")
    count: int

    @field_validator("count", mode="before")
    @classmethod
    def _parse_count(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            if not _COUNT_PATTERN.fullmatch(stripped):
                raise ValueError(f"count is not a base-10 integer: {value!r}")
            return int(stripped, 10)
        return value


class RawPropertyRow(QueryRowModel):
    """One fact about one entity."""

    entity_id: str = Field(alias="service")
    property_uri: str = Field(alias="prop")
    property_label: str = Field(alias="propLabel")
    value: str = Field(alias="val")
    value_label: str = Field(alias="valLabel")


FacetRowInput: TypeAlias = RawFacetRow | Mapping[str, object]
PropertyRowInput: TypeAlias = RawPropertyRow | Mapping[str, object]


def _error_fields(exc: ValidationError) -> tuple[str, ...]:
    fields: list[str] = []
    for error in exc.errors():
        names = [part for part in error["loc"] if isinstance(part, str)]
        if names and names[-1] not in fields:
            fields.append(names[-1])
    return tuple(fields)


def _error_index(exc: ValidationError) -> int | None:
    for error in exc.errors():
        for part in error["loc"]:
            if isinstance(part, int):
                return part
    return None


RowT = TypeVar("RowT", bound="QueryRowModel")


def _extract(
    rows: Iterable[RowT | Mapping[str, object]], model: type[RowT]
) -> list[RowT]:
    extracted: list[RowT] = []
    for index, row in enumerate(rows):
        if isinstance(row, model):
            extracted.append(row)
            continue
        if not isinstance(row, Mapping):
            raise ShapeMismatchError(
                index=index, expected=model.__name__, received=type(row).__name__
            )
        try:
            extracted.append(model.model_validate(row))
        except ValidationError as exc:
            raise MalformedRowError(
                index=index,
                fields=_error_fields(exc),
                reason="; ".join(error["msg"] for error in exc.errors()),
            ) from exc
    return extracted


def extract_facet_rows(rows: Iterable[FacetRowInput]) -> list[RawFacetRow]:
    """Return typed facet rows, validating loose bindings by field name."""

    return _extract(rows, RawFacetRow)


def extract_property_rows(rows: Iterable[PropertyRowInput]) -> list[RawPropertyRow]:
    """Return typed property rows, validating loose bindings by field name."""

    return _extract(rows, RawPropertyRow)


class FacetRowBatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["facets"] = "facets"
    rows: tuple[RawFacetRow, ...] = ()


class PropertyRowBatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["properties"] = "properties"
    rows: tuple[RawPropertyRow, ...] = ()


RowBatch = Annotated[FacetRowBatch | PropertyRowBatch, Field(discriminator="kind")]

_ROW_BATCH_ADAPTER: TypeAdapter[FacetRowBatch | PropertyRowBatch] = TypeAdapter(RowBatch)

_UNION_TAG_ERRORS = frozenset({"union_tag_invalid", "union_tag_not_found"})


def parse_row_batch(payload: object) -> FacetRowBatch | PropertyRowBatch:
    """Validate a ``{"kind": ..., "rows": [...]}`` payload into a typed batch."""

    expected = "a batch of kind 'facets' or 'properties'"
    if not isinstance(payload, Mapping):
        raise ShapeMismatchError(index=None, expected=expected, received=type(payload).__name__)
    try:
        return _ROW_BATCH_ADAPTER.validate_python(dict(payload))
    except ValidationError as exc:
        if any(error["type"] in _UNION_TAG_ERRORS and not error["loc"] for error in exc.errors()):
            raise ShapeMismatchError(
                index=None, expected=expected, received=repr(payload.get("kind"))
            ) from exc
        raise MalformedRowError(
            index=_error_index(exc),
            fields=_error_fields(exc),
            reason="; ".join(error["msg"] for error in exc.errors()),
        ) from exc
