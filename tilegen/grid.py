"""
Generated tile grids.

A `TileGrid` stores catalog indices in a NumPy array shaped (width, height)
and indexed `[x, y]`, so a grid never holds references into the catalog's
internals. Row 0 is the BOTTOM row: UP is y + 1. A renderer that prints
top-down should walk `rows()` in reverse.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from tilegen.types import RelativeDirection

if TYPE_CHECKING:
    from tilegen.catalog import TileCatalog
    from tilegen.tile_types import TileType
    from tilegen.types import TileCoord

# Marks a cell with no tile assigned.
EMPTY = -1


@dataclass(frozen=True)
class Violation:
    """A rule broken by a placed tile.

    Attributes:
        x: Column of the tile owning the rule.
        y: Row of the tile owning the rule.
        tile: Name of that tile.
        kind: "must", "must_not", or "off_grid" (a must pointing off the map).
        direction: Direction of the rule.
        expected: The tile named by the rule.
        actual: The neighbor actually present (None if empty or off the grid).
    """

    x: TileCoord
    y: TileCoord
    tile: str
    kind: str
    direction: RelativeDirection
    expected: str
    actual: str | None


class TileGrid:
    """A width x height map of placed tile types."""

    def __init__(self, catalog: TileCatalog, tiles: np.ndarray) -> None:
        """Wrap an index array produced by generation.

        Args:
            catalog: The finalized catalog the indices refer to.
            tiles: Catalog indices shaped (width, height); EMPTY for no tile.
        """
        self.catalog = catalog
        self.tiles = tiles
        self.width, self.height = tiles.shape

    def in_bounds(self, x: TileCoord, y: TileCoord) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def __getitem__(self, pos: tuple[TileCoord, TileCoord]) -> TileType | None:
        """The tile at (x, y), or None for an empty cell.

        Raises:
            IndexError: If (x, y) is outside the grid.
        """
        x, y = pos
        if not self.in_bounds(x, y):
            raise IndexError(
                f"({x}, {y}) is outside the {self.width}x{self.height} grid"
            )
        index = int(self.tiles[x, y])
        return None if index == EMPTY else self.catalog.tile_at(index)

    def name_at(self, x: TileCoord, y: TileCoord) -> str | None:
        tile = self[x, y]
        return None if tile is None else tile.name

    def is_complete(self) -> bool:
        return bool(np.all(self.tiles != EMPTY))

    def rows(self) -> Iterator[list[TileType | None]]:
        """Yield rows bottom-up, each left to right."""
        for y in range(self.height):
            yield [self[x, y] for x in range(self.width)]

    def cells(self) -> Iterator[tuple[TileCoord, TileCoord, TileType]]:
        """Yield (x, y, tile) for every occupied cell, row by row."""
        for y in range(self.height):
            for x in range(self.width):
                tile = self[x, y]
                if tile is not None:
                    yield x, y, tile

    def to_names(self) -> list[list[str | None]]:
        """Tile names as nested lists; the outer index is y."""
        return [
            [None if tile is None else tile.name for tile in row]
            for row in self.rows()
        ]

    def _neighbor_name(
        self, x: TileCoord, y: TileCoord, direction: RelativeDirection
    ) -> tuple[bool, str | None]:
        """(on_grid, name) of the neighbor of (x, y) in `direction`."""
        dx, dy = direction.offset
        nx, ny = x + dx, y + dy
        if not self.in_bounds(nx, ny):
            return False, None
        return True, self.name_at(nx, ny)

    def find_violations(self) -> list[Violation]:
        """Check every placed tile's rules against its actual neighbors."""
        violations: list[Violation] = []
        for x, y, tile in self.cells():
            for req in tile.must:
                on_grid, actual = self._neighbor_name(x, y, req.direction)
                if not on_grid or actual != req.tile:
                    kind = "must" if on_grid else "off_grid"
                    violations.append(
                        Violation(
                            x, y, tile.name, kind, req.direction, req.tile, actual
                        )
                    )
            for req in tile.must_not:
                on_grid, actual = self._neighbor_name(x, y, req.direction)
                if on_grid and actual == req.tile:
                    violations.append(
                        Violation(
                            x, y, tile.name, "must_not", req.direction, req.tile, actual
                        )
                    )
        return violations

    def __repr__(self) -> str:
        return f"TileGrid(width={self.width}, height={self.height})"
