"""Backtracking placement of tiles onto a grid.

The placer fills a grid cell by cell, depth first, starting at (0, 0):

1. An out-of-bounds or already occupied cell needs nothing and succeeds.
2. An empty cell asks the `ConstraintEvaluator` for candidates. None means
   failure.
3. Each candidate in turn is placed tentatively and the placer descends into
   the cell's forward neighbors (every direction except the one it was
   entered from) in RIGHT, DOWN, LEFT, UP order.
4. The first failing neighbor abandons the candidate. Every cell placed since
   the candidate went down is cleared again, using an undo log, before the
   next candidate is tried.
5. A cell whose candidates are exhausted clears itself and reports failure to
   the cell it was entered from.

The traversal is the natural recursive one, but runs on an explicit frame
stack: grids with more cells than Python's recursion limit would otherwise
overflow the interpreter stack.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from tilegen import config
from tilegen.events import SearchEvent, SearchEventKind
from tilegen.grid import EMPTY
from tilegen.types import FORWARD_ORDER, RelativeDirection

if TYPE_CHECKING:
    from tilegen.constraints import ConstraintEvaluator
    from tilegen.events import SearchEventHandler
    from tilegen.types import TileCoord, TileIndex, TilePos


class SearchBudgetExceeded(Exception):
    """Raised when a single attempt runs out of steps or time."""


@dataclass
class _Frame:
    """One cell being filled; the explicit stand-in for a recursive call."""

    x: TileCoord
    y: TileCoord
    forward: tuple[RelativeDirection, ...]
    candidates: list[TileIndex]
    # Length of the undo log before this cell's first candidate was placed.
    undo_mark: int
    next_candidate: int = 0
    next_forward: int = 0


class BacktrackingPlacer:
    """Fills one grid in a single attempt.

    A placer is single use: create a new one for every attempt.
    """

    def __init__(
        self,
        width: int,
        height: int,
        evaluator: ConstraintEvaluator,
        *,
        step_budget: int | None = None,
        time_budget: float | None = None,
        on_event: SearchEventHandler | None = None,
        attempt: int = 0,
    ) -> None:
        """Initialize the placer.

        Args:
            width: Grid width in cells.
            height: Grid height in cells.
            evaluator: Candidate source, carrying this attempt's ordering.
            step_budget: Maximum tentative placements (None = unlimited).
            time_budget: Maximum seconds of search (None = unlimited).
            on_event: Optional callback for search decisions.
            attempt: Attempt number, reported in events.
        """
        self.width = width
        self.height = height
        self.evaluator = evaluator
        self.step_budget = step_budget
        self.time_budget = time_budget
        self.on_event = on_event
        self.attempt = attempt

        # Catalog indices shaped (width, height); EMPTY marks unfilled cells.
        self.tiles = np.full((width, height), EMPTY, dtype=config.GRID_DTYPE)
        self.steps = 0
        self._undo: list[TilePos] = []
        self._deadline: float | None = None

    def in_bounds(self, x: TileCoord, y: TileCoord) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def fill(self) -> bool:
        """Fill the whole grid, returning True on success.

        On failure every cell is left empty again.

        Raises:
            SearchBudgetExceeded: If the step or time budget runs out.
        """
        if self.time_budget is not None:
            self._deadline = time.monotonic() + self.time_budget

        root = self._enter(0, 0, None)
        if not isinstance(root, _Frame):
            return root

        stack = [root]
        child_ok: bool | None = None
        while stack:
            frame = stack[-1]
            if child_ok is False:
                # A forward neighbor failed: this candidate cannot stand.
                self._reject(frame)
                if not self._place_next(frame):
                    self._emit(SearchEventKind.BACKTRACK, frame.x, frame.y)
                    stack.pop()
                    continue

            step = self._advance(frame)
            if isinstance(step, _Frame):
                stack.append(step)
                child_ok = None
            elif step:
                stack.pop()
                child_ok = True
            else:
                child_ok = False

        return bool(child_ok)

    def _enter(
        self,
        x: TileCoord,
        y: TileCoord,
        entry: RelativeDirection | None,
    ) -> bool | _Frame:
        """Start filling a cell.

        Returns True when there is nothing to fill, False when the cell has no
        candidates, or the frame of a cell now holding its first candidate.
        """
        if not self.in_bounds(x, y) or self.tiles[x, y] != EMPTY:
            return True

        neighbors: dict[RelativeDirection, TileIndex] = {}
        in_bounds: set[RelativeDirection] = set()
        for direction in RelativeDirection:
            dx, dy = direction.offset
            nx, ny = x + dx, y + dy
            if not self.in_bounds(nx, ny):
                continue
            in_bounds.add(direction)
            neighbor = int(self.tiles[nx, ny])
            if neighbor != EMPTY:
                neighbors[direction] = neighbor

        candidates = self.evaluator.candidates(neighbors, in_bounds)
        if not candidates:
            self._emit(SearchEventKind.BACKTRACK, x, y)
            return False

        frame = _Frame(
            x=x,
            y=y,
            forward=tuple(d for d in FORWARD_ORDER if d != entry),
            candidates=candidates,
            undo_mark=len(self._undo),
        )
        self._place_next(frame)
        return frame

    def _advance(self, frame: _Frame) -> bool | _Frame:
        """Visit the frame's remaining forward neighbors.

        Returns True once all of them succeeded, False on the first immediate
        failure, or the frame of a neighbor that needs filling.
        """
        while frame.next_forward < len(frame.forward):
            direction = frame.forward[frame.next_forward]
            frame.next_forward += 1
            dx, dy = direction.offset
            child = self._enter(frame.x + dx, frame.y + dy, direction.flip)
            if child is not True:
                return child
        return True

    def _place_next(self, frame: _Frame) -> bool:
        """Place the frame's next candidate; False when none are left."""
        if frame.next_candidate >= len(frame.candidates):
            return False
        tile = frame.candidates[frame.next_candidate]
        frame.next_candidate += 1
        frame.next_forward = 0

        self._charge_step()
        self.tiles[frame.x, frame.y] = tile
        self._undo.append((frame.x, frame.y))
        self._emit(SearchEventKind.CANDIDATE_CHOSEN, frame.x, frame.y, tile)
        return True

    def _reject(self, frame: _Frame) -> None:
        """Undo the frame's current candidate and everything placed under it."""
        tile = int(self.tiles[frame.x, frame.y])
        while len(self._undo) > frame.undo_mark:
            x, y = self._undo.pop()
            self.tiles[x, y] = EMPTY
        self._emit(SearchEventKind.CANDIDATE_REJECTED, frame.x, frame.y, tile)

    def _charge_step(self) -> None:
        self.steps += 1
        if self.step_budget is not None and self.steps > self.step_budget:
            raise SearchBudgetExceeded(
                f"Attempt {self.attempt} exceeded its budget of "
                f"{self.step_budget} placements"
            )
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise SearchBudgetExceeded(
                f"Attempt {self.attempt} exceeded its time budget of "
                f"{self.time_budget}s"
            )

    def _emit(
        self,
        kind: SearchEventKind,
        x: TileCoord,
        y: TileCoord,
        tile: TileIndex | None = None,
    ) -> None:
        if self.on_event is None:
            return
        name = None if tile is None else self.evaluator.rules.names[tile]
        self.on_event(SearchEvent(kind, x, y, name, self.attempt))
