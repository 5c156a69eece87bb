from __future__ import annotations

import logging

import pytest

from facetry.config import configure_logging


@pytest.fixture(scope="session", autouse=True)
def _configure_logging() -> None:
    configure_logging(level=logging.DEBUG, force=True)
