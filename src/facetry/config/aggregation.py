"""Aggregation defaults and environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from .errors import ConfigurationError

DEFAULT_TITLE_LABELS: Final[tuple[str, ...]] = ("Label", "Title")
DEFAULT_DESCRIPTION_LABELS: Final[tuple[str, ...]] = ("Description",)
DEFAULT_MISSING_VALUE_LABEL: Final[str] = "—"


@dataclass(frozen=True, slots=True)
class AggregationConfig:
    """Reserved property labels and the display marker for missing values."""

    title_labels: tuple[str, ...] = DEFAULT_TITLE_LABELS
    description_labels: tuple[str, ...] = DEFAULT_DESCRIPTION_LABELS
    missing_value_label: str = DEFAULT_MISSING_VALUE_LABEL


def _labels_from_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    labels = tuple(label.strip() for label in raw.split(",") if label.strip())
    if not labels:
        raise ConfigurationError(f"{name} must list at least one label")
    return labels


def get_aggregation_config() -> AggregationConfig:
    missing_value_label = os.getenv("FACETRY_MISSING_VALUE_LABEL")
    if missing_value_label is not None and not missing_value_label.strip():
        raise ConfigurationError("FACETRY_MISSING_VALUE_LABEL must not be blank")
    return AggregationConfig(
        title_labels=_labels_from_env("FACETRY_TITLE_LABELS", DEFAULT_TITLE_LABELS),
        description_labels=_labels_from_env(
            "FACETRY_DESCRIPTION_LABELS", DEFAULT_DESCRIPTION_LABELS
        ),
        missing_value_label=missing_value_label or DEFAULT_MISSING_VALUE_LABEL,
    )
