"""Map generation with bounded retries.

A single placement attempt is not an exhaustive search, so generation runs
fresh attempts on an empty grid until one succeeds or the attempt budget is
spent. Each attempt offers candidates in its own order (see
`CandidateOrdering`); with a seed the whole sequence is reproducible.

Usage:
    catalog = TileCatalog()
    catalog.register("ground").not_above("ground").below("floor")
    catalog.register("floor").above("ground").not_below("floor").below("roof")
    catalog.register("roof").above("floor").not_below("roof")

    generator = TileMapGenerator(catalog, seed=42)
    grid = generator.generate(width=1, height=3, max_attempts=10)
    grid.to_names()  # [["ground"], ["floor"], ["roof"]] - row 0 is the bottom
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from tilegen import config
from tilegen.constraints import ConstraintEvaluator
from tilegen.grid import TileGrid
from tilegen.placer import BacktrackingPlacer, SearchBudgetExceeded
from tilegen.util.rng import RNGProvider

if TYPE_CHECKING:
    from tilegen.catalog import TileCatalog
    from tilegen.events import SearchEventHandler
    from tilegen.types import RandomSeed, TileIndex

logger = logging.getLogger(__name__)


class CandidateOrdering(Enum):
    """How the candidate order changes from one attempt to the next."""

    REGISTRATION = "registration"  # Catalog order on every attempt
    ROTATE = "rotate"  # Attempt n starts from the n-th registered tile
    SHUFFLE = "shuffle"  # Attempt n shuffles with its own seeded stream


class GenerationFailed(Exception):
    """Raised when no attempt produced a complete, consistent map."""

    def __init__(self, width: int, height: int, attempts: int) -> None:
        super().__init__(
            f"Could not generate a {width}x{height} map in {attempts} attempt(s)."
        )
        self.width = width
        self.height = height
        self.attempts = attempts


class TileMapGenerator:
    """Fills rectangular grids from a tile catalog."""

    def __init__(
        self,
        catalog: TileCatalog,
        *,
        seed: RandomSeed = config.RANDOM_SEED,
        ordering: CandidateOrdering | str = config.CANDIDATE_ORDERING,
        step_budget: int | None = config.STEP_BUDGET,
        time_budget: float | None = config.TIME_BUDGET_SECONDS,
        strict: bool | None = None,
        on_event: SearchEventHandler | None = None,
    ) -> None:
        """Initialize the generator, finalizing the catalog.

        Args:
            catalog: Tile types to build maps from. It is frozen here.
            seed: Master seed for candidate ordering (None = system entropy).
            ordering: How candidate order varies between attempts.
            step_budget: Maximum tentative placements per attempt.
            time_budget: Maximum seconds per attempt.
            strict: Reject requirements naming unregistered tiles. Defaults to
                `config.STRICT_TILE_REFERENCES`.
            on_event: Optional callback receiving every search decision.

        Raises:
            UnknownTileReferenceError: In strict mode, for dangling requirements.
        """
        self.catalog = catalog
        self.rules = catalog.finalize(strict)
        self.ordering = CandidateOrdering(ordering)
        self.step_budget = step_budget
        self.time_budget = time_budget
        self.on_event = on_event
        self._rng = RNGProvider(seed)

    @property
    def seed(self) -> RandomSeed:
        return self._rng.master_seed

    def reseed(self, seed: RandomSeed = None) -> None:
        """Restart candidate ordering from a new master seed.

        Shuffle streams continue across `generate` calls, so a second call
        normally yields a different map. Reseeding with the same seed makes
        the next call repeat the first one.
        """
        self._rng.reset(seed)

    def candidate_order(self, attempt: int) -> list[TileIndex]:
        """The order in which attempt number `attempt` offers candidates."""
        order = list(range(len(self.rules)))
        if self.ordering is CandidateOrdering.ROTATE:
            shift = attempt % len(order)
            order = order[shift:] + order[:shift]
        elif self.ordering is CandidateOrdering.SHUFFLE:
            self._rng.get(f"order.attempt.{attempt}").shuffle(order)
        return order

    def try_generate(self, width: int, height: int, *, attempt: int = 0) -> TileGrid:
        """Run a single attempt.

        Raises:
            GenerationFailed: If the attempt does not produce a map.
        """
        _check_size(width, height)
        grid = self._attempt(width, height, attempt)
        if grid is None:
            raise GenerationFailed(width, height, 1)
        return grid

    def generate(
        self,
        width: int,
        height: int,
        max_attempts: int = config.DEFAULT_MAX_ATTEMPTS,
    ) -> TileGrid:
        """Run up to `max_attempts` attempts and return the first map found.

        Raises:
            GenerationFailed: If every attempt failed.
        """
        _check_size(width, height)
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        for attempt in range(max_attempts):
            grid = self._attempt(width, height, attempt)
            if grid is not None:
                logger.info(
                    f"Generated {width}x{height} map on attempt "
                    f"{attempt + 1}/{max_attempts}"
                )
                return grid

        raise GenerationFailed(width, height, max_attempts)

    def _attempt(self, width: int, height: int, attempt: int) -> TileGrid | None:
        evaluator = ConstraintEvaluator(self.rules, self.candidate_order(attempt))
        placer = BacktrackingPlacer(
            width,
            height,
            evaluator,
            step_budget=self.step_budget,
            time_budget=self.time_budget,
            on_event=self.on_event,
            attempt=attempt,
        )
        logger.debug(f"Attempt {attempt}: filling {width}x{height} grid")

        try:
            filled = placer.fill()
        except SearchBudgetExceeded as exc:
            logger.warning(f"{exc}; abandoning attempt")
            return None

        if not filled:
            logger.debug(f"Attempt {attempt} failed after {placer.steps} placements")
            return None

        grid = TileGrid(self.catalog, placer.tiles)
        violations = grid.find_violations()
        if violations or not grid.is_complete():
            logger.error(
                f"Attempt {attempt} produced an inconsistent grid "
                f"({len(violations)} violations); discarding it"
            )
            return None

        logger.debug(f"Attempt {attempt} succeeded after {placer.steps} placements")
        return grid


def _check_size(width: int, height: int) -> None:
    if width < 0 or height < 0:
        raise ValueError(f"Grid size must be non-negative, got {width}x{height}")


def generate(
    catalog: TileCatalog,
    width: int,
    height: int,
    max_attempts: int = config.DEFAULT_MAX_ATTEMPTS,
    **kwargs: Any,
) -> TileGrid:
    """Build a `TileMapGenerator` for `catalog` and generate one map.

    Keyword arguments are passed to `TileMapGenerator`.
    """
    return TileMapGenerator(catalog, **kwargs).generate(width, height, max_attempts)
