"""
The tile catalog: registry of every tile type a map can be built from.

Tiles are registered by unique name and receive an index in registration
order. Before generation the catalog is *finalized*: it is frozen, all
name-based requirements are validated and compiled into index-based rule
tables (`CatalogRules`), and tiles whose own rules can never hold are marked
unselectable. Generated grids store these indices, never references.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from tilegen import config
from tilegen.tile_types import CatalogFrozenError, TileType
from tilegen.types import RelativeDirection, TileIndex

logger = logging.getLogger(__name__)

# Compiled stand-in for a requirement naming an unregistered tile. No cell
# ever holds it, so such a requirement is never satisfied.
UNKNOWN_TILE: TileIndex = -1

# (tile name, direction, referenced name)
TileReference = tuple[str, RelativeDirection, str]


class DuplicateTileNameError(ValueError):
    """Raised when registering a name that is already in the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tile type name '{name}' is already registered.")
        self.name = name


class UnknownTileReferenceError(KeyError):
    """Raised at finalization when requirements name unregistered tiles."""

    def __init__(self, references: list[TileReference]) -> None:
        super().__init__(references)
        self.references = references

    def __str__(self) -> str:
        details = ", ".join(
            f"'{tile}' -> {direction.name} -> '{target}'"
            for tile, direction, target in self.references
        )
        return f"Requirements reference unregistered tiles: {details}"


@dataclass(frozen=True)
class CatalogRules:
    """Index-based adjacency rules compiled from a finalized catalog.

    Attributes:
        names: Tile names by index.
        must: `must[tile][direction]` is the set of tile indices the neighbor in
            that direction is required to be. More than one entry can never be
            satisfied.
        must_not: `must_not[tile][direction]` is the set of forbidden indices.
        selectable: False for tiles whose own rules contradict each other.
    """

    names: tuple[str, ...]
    must: tuple[tuple[frozenset[TileIndex], ...], ...]
    must_not: tuple[tuple[frozenset[TileIndex], ...], ...]
    selectable: tuple[bool, ...]

    def __len__(self) -> int:
        return len(self.names)


class TileCatalog:
    """Registry of tile types keyed by unique name."""

    def __init__(self) -> None:
        self._tiles: list[TileType] = []
        self._index_by_name: dict[str, TileIndex] = {}
        self._rules: CatalogRules | None = None
        # Set at finalization: the strictness used and any dangling references.
        self._strict: bool | None = None
        self._unknown: list[TileReference] = []

    def register(self, name: str) -> TileType:
        """Create and add a tile type, returning it for rule building.

        Raises:
            DuplicateTileNameError: If the name is taken. The existing tile type
                is left exactly as it was.
            CatalogFrozenError: If the catalog has been finalized.
        """
        if self._rules is not None:
            raise CatalogFrozenError(
                f"Cannot register '{name}': the catalog has been finalized."
            )
        if name in self._index_by_name:
            raise DuplicateTileNameError(name)

        tile = TileType(name)
        self._index_by_name[name] = len(self._tiles)
        self._tiles.append(tile)
        return tile

    def lookup(self, name: str) -> TileType | None:
        index = self._index_by_name.get(name)
        return None if index is None else self._tiles[index]

    def index_of(self, name: str) -> TileIndex:
        """Return the index of a registered tile.

        Raises:
            KeyError: If no tile has this name.
        """
        return self._index_by_name[name]

    def tile_at(self, index: TileIndex) -> TileType:
        if index < 0:
            raise IndexError(f"Tile index {index} is out of range.")
        return self._tiles[index]

    def __contains__(self, name: object) -> bool:
        return name in self._index_by_name

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[TileType]:
        return iter(self._tiles)

    @property
    def is_finalized(self) -> bool:
        return self._rules is not None

    @property
    def rules(self) -> CatalogRules:
        """Compiled rules, finalizing the catalog with defaults if needed."""
        if self._rules is None:
            return self.finalize()
        return self._rules

    def finalize(self, strict: bool | None = None) -> CatalogRules:
        """Freeze the catalog and compile its rules.

        Calling this again returns the rules compiled the first time. Asking
        for strict mode then still rejects a catalog that was finalized
        permissively with dangling references.

        Args:
            strict: Reject requirements naming unregistered tiles. Defaults to
                `config.STRICT_TILE_REFERENCES`.

        Raises:
            ValueError: If the catalog is empty.
            UnknownTileReferenceError: In strict mode, if any requirement names
                an unregistered tile. The catalog stays unfinalized unless it
                was already finalized permissively.
        """
        if self._rules is not None:
            return self._check_strictness(strict)
        if not self._tiles:
            raise ValueError("Cannot finalize an empty tile catalog.")
        if strict is None:
            strict = config.STRICT_TILE_REFERENCES

        unknown: list[TileReference] = [
            (tile.name, req.direction, req.tile)
            for tile in self._tiles
            for req in (*tile.must, *tile.must_not)
            if req.tile not in self._index_by_name
        ]
        if unknown and strict:
            raise UnknownTileReferenceError(unknown)
        for tile_name, direction, target in unknown:
            logger.warning(
                f"Tile '{tile_name}' references unknown tile '{target}' "
                f"({direction.name}); the requirement can never match."
            )

        must = tuple(self._compile(tile, must=True) for tile in self._tiles)
        must_not = tuple(self._compile(tile, must=False) for tile in self._tiles)
        selectable = tuple(
            self._is_selectable(tile, must[i], must_not[i])
            for i, tile in enumerate(self._tiles)
        )

        self._strict = strict
        self._unknown = unknown
        for tile in self._tiles:
            tile._freeze()
        self._rules = CatalogRules(
            names=tuple(tile.name for tile in self._tiles),
            must=must,
            must_not=must_not,
            selectable=selectable,
        )
        logger.debug(
            f"Finalized tile catalog: {len(self._tiles)} tiles, "
            f"{sum(selectable)} selectable"
        )
        return self._rules

    def _check_strictness(self, strict: bool | None) -> CatalogRules:
        """Return the cached rules, honoring a strictness request made late."""
        assert self._rules is not None
        if strict is None or strict == self._strict:
            return self._rules
        if strict and self._unknown:
            raise UnknownTileReferenceError(self._unknown)
        logger.warning(
            f"Tile catalog was already finalized with strict={self._strict}; "
            f"ignoring strict={strict}"
        )
        return self._rules

    def _compile(
        self, tile: TileType, *, must: bool
    ) -> tuple[frozenset[TileIndex], ...]:
        by_direction: list[set[TileIndex]] = [set() for _ in RelativeDirection]
        for req in tile.must if must else tile.must_not:
            by_direction[req.direction].add(
                self._index_by_name.get(req.tile, UNKNOWN_TILE)
            )
        return tuple(frozenset(targets) for targets in by_direction)

    @staticmethod
    def _is_selectable(
        tile: TileType,
        must: tuple[frozenset[TileIndex], ...],
        must_not: tuple[frozenset[TileIndex], ...],
    ) -> bool:
        for direction in RelativeDirection:
            required = must[direction]
            if not required:
                continue
            if (
                len(required) > 1
                or UNKNOWN_TILE in required
                or required & must_not[direction]
            ):
                logger.warning(
                    f"Tile '{tile.name}' can never be placed: its "
                    f"{direction.name} requirements cannot all hold."
                )
                return False
        return True
