from __future__ import annotations

from enum import IntEnum

# =============================================================================
# GRID COORDINATES (Always integers)
# =============================================================================

# y = 0 is the BOTTOM row of the map. UP increases y, DOWN decreases it.
TileCoord = int  # Always integer grid position
TilePos = tuple[TileCoord, TileCoord]  # Example: (3, 0) = column 3, bottom row

# Index of a tile type inside a finalized catalog (registration order).
TileIndex = int

# Master seed accepted by the random stream provider.
RandomSeed = int | str | None


# =============================================================================
# DIRECTIONS
# =============================================================================


class RelativeDirection(IntEnum):
    """A direction relative to a grid cell.

    Values are stable small integers so directions can index per-direction
    rule tables.
    """

    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3

    @property
    def flip(self) -> RelativeDirection:
        """The opposite direction (UP <-> DOWN, LEFT <-> RIGHT)."""
        return _FLIPPED[self]

    @property
    def offset(self) -> TilePos:
        """(dx, dy) step for this direction with y = 0 at the bottom."""
        return _OFFSETS[self]


_FLIPPED = {
    RelativeDirection.UP: RelativeDirection.DOWN,
    RelativeDirection.DOWN: RelativeDirection.UP,
    RelativeDirection.LEFT: RelativeDirection.RIGHT,
    RelativeDirection.RIGHT: RelativeDirection.LEFT,
}

_OFFSETS = {
    RelativeDirection.UP: (0, 1),
    RelativeDirection.DOWN: (0, -1),
    RelativeDirection.LEFT: (-1, 0),
    RelativeDirection.RIGHT: (1, 0),
}

# Order in which the placer descends into neighbors of a freshly placed cell.
FORWARD_ORDER: tuple[RelativeDirection, ...] = (
    RelativeDirection.RIGHT,
    RelativeDirection.DOWN,
    RelativeDirection.LEFT,
    RelativeDirection.UP,
)
