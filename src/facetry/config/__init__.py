"""Application configuration helpers."""

from __future__ import annotations

from .aggregation import AggregationConfig, get_aggregation_config
from .errors import ConfigurationError
from .logging import configure_logging

__all__ = [
    "AggregationConfig",
    "ConfigurationError",
    "configure_logging",
    "get_aggregation_config",
]
