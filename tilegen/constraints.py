"""Per-cell constraint evaluation.

Given the tiles already assigned around a cell, the evaluator decides which
catalog tiles may legally occupy it:

1. Forced assignment: an assigned neighbor with a "must" rule pointing at this
   cell demands one specific tile. All such demands have to agree, otherwise
   the cell has no candidates.
2. Filtering: every tile is checked against the neighborhood. A candidate is
   dropped when
     a. one of its "must" rules points off the grid,
     b. one of its "must" rules disagrees with an assigned neighbor,
     c. one of its "must-not" rules matches an assigned neighbor, or
     d. an assigned neighbor's "must-not" rule toward this cell names it.

A forced tile still has to pass the filters, so any tile the evaluator offers
is consistent with every assigned neighbor in both directions.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from typing import TYPE_CHECKING

from tilegen.catalog import UNKNOWN_TILE
from tilegen.types import RelativeDirection

if TYPE_CHECKING:
    from tilegen.catalog import CatalogRules
    from tilegen.types import TileIndex


class ConstraintEvaluator:
    """Computes the ordered candidate list for a single cell."""

    def __init__(
        self, rules: CatalogRules, order: Sequence[TileIndex] | None = None
    ) -> None:
        """Initialize the evaluator.

        Args:
            rules: Compiled rules of a finalized catalog.
            order: Order in which candidates are offered, as a permutation of
                tile indices. Defaults to registration order.
        """
        self.rules = rules
        if order is None:
            order = range(len(rules))
        elif sorted(order) != list(range(len(rules))):
            raise ValueError(
                f"Candidate order must be a permutation of 0..{len(rules) - 1}."
            )
        # Unselectable tiles are dropped up front; they never become candidates.
        self.order: tuple[TileIndex, ...] = tuple(
            index for index in order if rules.selectable[index]
        )

    def forced_tile(
        self, neighbors: Mapping[RelativeDirection, TileIndex]
    ) -> TileIndex | None:
        """Return the tile demanded by the neighbors, if any.

        Returns UNKNOWN_TILE when demands disagree or name an unregistered tile.
        """
        forced: TileIndex | None = None
        for direction, neighbor in neighbors.items():
            # The neighbor sees this cell in the opposite direction.
            demanded = self.rules.must[neighbor][direction.flip]
            for tile in demanded:
                if forced is None:
                    forced = tile
                elif tile != forced:
                    return UNKNOWN_TILE
        return forced

    def allows(
        self,
        tile: TileIndex,
        neighbors: Mapping[RelativeDirection, TileIndex],
        in_bounds: Collection[RelativeDirection],
    ) -> bool:
        """Check one tile against the neighborhood (filters a-d)."""
        if tile == UNKNOWN_TILE or not self.rules.selectable[tile]:
            return False

        must = self.rules.must[tile]
        must_not = self.rules.must_not[tile]
        for direction in RelativeDirection:
            required = must[direction]
            if not required:
                continue
            if direction not in in_bounds:
                return False
            neighbor = neighbors.get(direction)
            if neighbor is not None and neighbor not in required:
                return False

        for direction, neighbor in neighbors.items():
            if neighbor in must_not[direction]:
                return False
            if tile in self.rules.must_not[neighbor][direction.flip]:
                return False
        return True

    def candidates(
        self,
        neighbors: Mapping[RelativeDirection, TileIndex],
        in_bounds: Collection[RelativeDirection],
    ) -> list[TileIndex]:
        """Return the tiles that may occupy the cell, in candidate order.

        Args:
            neighbors: Tile index of each assigned neighbor, keyed by the
                direction from this cell to the neighbor.
            in_bounds: Directions in which a neighbor cell exists on the grid.
        """
        forced = self.forced_tile(neighbors)
        if forced is not None:
            return [forced] if self.allows(forced, neighbors, in_bounds) else []
        return [
            tile for tile in self.order if self.allows(tile, neighbors, in_bounds)
        ]
