"""
Tile types and their adjacency requirements.

This module defines:
- `Requirement`: a (direction, tile name) pair. Used both for rules a tile
  *must* satisfy and rules it *must not* violate.
- `TileType`: a named kind of grid cell plus its ordered "must" and "must-not"
  requirement lists. Requirements reference other tiles by name; the names are
  resolved to catalog indices when the owning catalog is finalized.

Rule builders return the tile itself so definitions read as a chain:

    catalog.register("floor").above("ground").not_below("floor").below("roof")

The convenience builders describe where *this* tile sits relative to another:

    above(T)  -> must    {DOWN, T}   (T is directly below this tile)
    below(T)  -> must    {UP, T}
    left(T)   -> must    {RIGHT, T}
    right(T)  -> must    {LEFT, T}

and the `not_*` variants map the same directions into must-not.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tilegen.types import RelativeDirection


class CatalogFrozenError(RuntimeError):
    """Raised when a finalized catalog or one of its tiles is modified."""


@dataclass(frozen=True)
class Requirement:
    """A rule naming the tile expected (or forbidden) in a direction."""

    direction: RelativeDirection
    tile: str


@dataclass
class TileType:
    """A named category of grid cell content with adjacency rules.

    Requirements are only added through the rule builders; `must` and
    `must_not` are read-only views.

    Attributes:
        name: Unique name within the owning catalog.
    """

    name: str
    _must: list[Requirement] = field(default_factory=list, init=False, repr=False)
    _must_not: list[Requirement] = field(
        default_factory=list, init=False, repr=False
    )
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    @property
    def must(self) -> tuple[Requirement, ...]:
        """Requirements every placement of this tile has to satisfy."""
        return tuple(self._must)

    @property
    def must_not(self) -> tuple[Requirement, ...]:
        """Requirements no placement of this tile may match."""
        return tuple(self._must_not)

    def _freeze(self) -> None:
        self._frozen = True

    def _check_mutable(self) -> None:
        if self._frozen:
            raise CatalogFrozenError(
                f"Tile type '{self.name}' belongs to a finalized catalog "
                "and can no longer be changed."
            )

    def add_must(self, direction: RelativeDirection, tile: str) -> TileType:
        """Require `tile` to be the neighbor in `direction`."""
        self._check_mutable()
        self._must.append(Requirement(RelativeDirection(direction), tile))
        return self

    def add_must_not(self, direction: RelativeDirection, tile: str) -> TileType:
        """Forbid `tile` as the neighbor in `direction`."""
        self._check_mutable()
        self._must_not.append(Requirement(RelativeDirection(direction), tile))
        return self

    def above(self, tile: str) -> TileType:
        return self.add_must(RelativeDirection.DOWN, tile)

    def below(self, tile: str) -> TileType:
        return self.add_must(RelativeDirection.UP, tile)

    def left(self, tile: str) -> TileType:
        return self.add_must(RelativeDirection.RIGHT, tile)

    def right(self, tile: str) -> TileType:
        return self.add_must(RelativeDirection.LEFT, tile)

    def not_above(self, tile: str) -> TileType:
        return self.add_must_not(RelativeDirection.DOWN, tile)

    def not_below(self, tile: str) -> TileType:
        return self.add_must_not(RelativeDirection.UP, tile)

    def not_left(self, tile: str) -> TileType:
        return self.add_must_not(RelativeDirection.RIGHT, tile)

    def not_right(self, tile: str) -> TileType:
        return self.add_must_not(RelativeDirection.LEFT, tile)

