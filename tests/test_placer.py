"""Tests for the backtracking placer."""

from __future__ import annotations

from unittest.mock import patch

import numpy as np
import pytest

from tilegen import EMPTY, SearchEvent, SearchEventKind, TileCatalog, TileGrid
from tilegen.constraints import ConstraintEvaluator
from tilegen.placer import BacktrackingPlacer, SearchBudgetExceeded


def make_placer(
    catalog: TileCatalog, width: int, height: int, **kwargs
) -> BacktrackingPlacer:
    evaluator = ConstraintEvaluator(catalog.finalize())
    return BacktrackingPlacer(width, height, evaluator, **kwargs)


def make_stacking_catalog() -> TileCatalog:
    """Nothing may sit on top of "a"; "b" has no rules.

    On a 2x2 grid with registration order the placer first puts "a" in the
    bottom-left corner, fills two more cells under that choice, fails, and
    has to undo all of them.
    """
    catalog = TileCatalog()
    catalog.register("a").not_below("a").not_below("b")
    catalog.register("b")
    return catalog


# =============================================================================
# Basic Filling
# =============================================================================


class TestFill:
    """Tests for a single fill of the grid."""

    def test_fills_unique_column(self, layered_catalog: TileCatalog) -> None:
        placer = make_placer(layered_catalog, 1, 3)

        assert placer.fill()
        assert placer.tiles[0].tolist() == [0, 1, 2]

    def test_zero_area_grid_succeeds(self, layered_catalog: TileCatalog) -> None:
        placer = make_placer(layered_catalog, 0, 4)

        assert placer.fill()
        assert placer.tiles.shape == (0, 4)
        assert placer.steps == 0

    def test_failure_leaves_grid_empty(self) -> None:
        catalog = TileCatalog()
        catalog.register("solo").not_left("solo")
        placer = make_placer(catalog, 2, 1)

        assert not placer.fill()
        assert np.all(placer.tiles == EMPTY)

    def test_grid_larger_than_recursion_limit(self) -> None:
        """Filling runs on an explicit stack, not the interpreter's."""
        catalog = TileCatalog()
        catalog.register("only")
        placer = make_placer(catalog, 70, 70)

        assert placer.fill()
        assert np.all(placer.tiles == 0)
        assert placer.steps == 70 * 70


# =============================================================================
# Backtracking
# =============================================================================


class TestBacktracking:
    """Abandoned candidates are fully undone before the next one is tried."""

    def test_recovers_from_bad_first_choice(self) -> None:
        catalog = make_stacking_catalog()
        placer = make_placer(catalog, 2, 2)

        assert placer.fill()

        grid = TileGrid(catalog, placer.tiles)
        assert grid.to_names() == [["b", "b"], ["a", "a"]]
        assert grid.find_violations() == []

    def test_rejection_undoes_every_cell_placed_under_it(self) -> None:
        catalog = make_stacking_catalog()
        snapshots: dict[tuple[int, int], np.ndarray] = {}
        placer: BacktrackingPlacer

        def on_event(event: SearchEvent) -> None:
            if event.kind is SearchEventKind.CANDIDATE_REJECTED:
                snapshots.setdefault((event.x, event.y), placer.tiles.copy())

        placer = make_placer(catalog, 2, 2, on_event=on_event)
        assert placer.fill()

        # Rejecting "a" at the corner wiped the whole grid.
        assert np.all(snapshots[(0, 0)] == EMPTY)

    def test_events_trace_the_search(self, recorded_events: list[SearchEvent]) -> None:
        placer = make_placer(
            make_stacking_catalog(), 2, 2, on_event=recorded_events.append
        )
        assert placer.fill()

        first = recorded_events[0]
        assert first.kind is SearchEventKind.CANDIDATE_CHOSEN
        assert (first.x, first.y, first.tile) == (0, 0, "a")

        kinds = {event.kind for event in recorded_events}
        assert kinds == set(SearchEventKind)

        corner_rejections = [
            event
            for event in recorded_events
            if event.kind is SearchEventKind.CANDIDATE_REJECTED
            and (event.x, event.y) == (0, 0)
        ]
        assert [event.tile for event in corner_rejections] == ["a"]
        backtracks = [
            e for e in recorded_events if e.kind is SearchEventKind.BACKTRACK
        ]
        assert all(event.tile is None for event in backtracks)

    def test_events_do_not_change_the_outcome(self) -> None:
        quiet = make_placer(make_stacking_catalog(), 2, 2)
        traced = make_placer(make_stacking_catalog(), 2, 2, on_event=lambda e: None)

        assert quiet.fill() and traced.fill()
        assert np.array_equal(quiet.tiles, traced.tiles)
        assert quiet.steps == traced.steps


# =============================================================================
# Budgets
# =============================================================================


class TestBudgets:
    """A single attempt can be bounded by steps or time."""

    def test_step_budget(self, layered_catalog: TileCatalog) -> None:
        placer = make_placer(layered_catalog, 1, 3, step_budget=2)

        with pytest.raises(SearchBudgetExceeded):
            placer.fill()
        assert placer.steps == 3

    def test_step_budget_large_enough(self, layered_catalog: TileCatalog) -> None:
        placer = make_placer(layered_catalog, 1, 3, step_budget=3)
        assert placer.fill()

    def test_time_budget(self, layered_catalog: TileCatalog) -> None:
        placer = make_placer(layered_catalog, 1, 3, time_budget=-1.0)

        with pytest.raises(SearchBudgetExceeded):
            placer.fill()

    def test_time_budget_is_checked_on_every_placement(
        self, layered_catalog: TileCatalog
    ) -> None:
        placer = make_placer(layered_catalog, 1, 3, time_budget=5.0)

        # Deadline at 105; the third placement sees the clock jump past it.
        clock = [100.0, 100.0, 100.0, 200.0]
        with (
            patch("tilegen.placer.time.monotonic", side_effect=clock),
            pytest.raises(SearchBudgetExceeded),
        ):
            placer.fill()
        assert placer.steps == 3
