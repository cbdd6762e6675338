from __future__ import annotations

import pytest

from tests.helpers import (
    make_exclusion_catalog,
    make_layered_catalog,
    make_platformer_catalog,
    make_row_catalog,
)
from tilegen import SearchEvent, TileCatalog


@pytest.fixture
def layered_catalog() -> TileCatalog:
    return make_layered_catalog()


@pytest.fixture
def exclusion_catalog() -> TileCatalog:
    return make_exclusion_catalog()


@pytest.fixture
def row_catalog() -> TileCatalog:
    return make_row_catalog()


@pytest.fixture
def platformer_catalog() -> TileCatalog:
    return make_platformer_catalog()


@pytest.fixture
def recorded_events() -> list[SearchEvent]:
    """An event list to pass as `recorded_events.append` hook."""
    return []
