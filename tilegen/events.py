"""Search events reported by the placer at its decision points.

A caller can pass an `on_event` callback to the generator to trace a search
(for debugging or visualization). Events are fire-and-forget: the callback's
return value is ignored and installing one never changes the search outcome.
When no callback is installed no event objects are created at all.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TypeAlias

from tilegen.types import TileCoord


class SearchEventKind(Enum):
    """What the placer just decided."""

    CANDIDATE_CHOSEN = auto()  # A tile was tentatively placed in a cell
    CANDIDATE_REJECTED = auto()  # A placed tile was abandoned; its subtree undone
    BACKTRACK = auto()  # A cell ran out of candidates; failure goes to its parent


@dataclass(frozen=True)
class SearchEvent:
    """A single decision made while filling the grid.

    Attributes:
        kind: The decision taken.
        x: Column of the cell concerned.
        y: Row of the cell concerned (0 = bottom).
        tile: Name of the tile chosen or rejected; None for BACKTRACK.
        attempt: Zero-based attempt number within the retry loop.
    """

    kind: SearchEventKind
    x: TileCoord
    y: TileCoord
    tile: str | None
    attempt: int


SearchEventHandler: TypeAlias = Callable[[SearchEvent], None]
