"""Procedural tilemap generation from adjacency rules.

This package fills rectangular grids with tile types so that every placed
tile satisfies its "must" and "must-not" neighbor rules:

- TileCatalog: Registry of tile types, keyed by unique name
- TileType: A named tile plus its requirement lists and rule builders
- TileMapGenerator: Bounded-retry backtracking generator
- TileGrid: A generated map; row 0 is the bottom row
"""

from .catalog import (
    CatalogRules,
    DuplicateTileNameError,
    TileCatalog,
    UnknownTileReferenceError,
)
from .events import SearchEvent, SearchEventKind
from .generator import CandidateOrdering, GenerationFailed, TileMapGenerator, generate
from .grid import EMPTY, TileGrid, Violation
from .tile_types import CatalogFrozenError, Requirement, TileType
from .types import RelativeDirection

__all__ = [
    "EMPTY",
    "CandidateOrdering",
    "CatalogFrozenError",
    "CatalogRules",
    "DuplicateTileNameError",
    "GenerationFailed",
    "RelativeDirection",
    "Requirement",
    "SearchEvent",
    "SearchEventKind",
    "TileCatalog",
    "TileGrid",
    "TileMapGenerator",
    "TileType",
    "UnknownTileReferenceError",
    "Violation",
    "generate",
]
