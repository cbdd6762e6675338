"""Catalog builders shared by the generator tests."""

from __future__ import annotations

import random

from tilegen import RelativeDirection, TileCatalog


def make_layered_catalog() -> TileCatalog:
    """ground / floor / roof: a 1x3 column has exactly one solution."""
    catalog = TileCatalog()
    catalog.register("ground").not_above("ground").below("floor")
    catalog.register("floor").above("ground").not_below("floor").below("roof")
    catalog.register("roof").above("floor").not_below("roof")
    return catalog


def make_exclusion_catalog() -> TileCatalog:
    """red / green / blue stacked bottom-up using must-not rules only.

    The only allowed vertical pairs are red under green and green under blue.
    """
    catalog = TileCatalog()
    catalog.register("red").not_below("red").not_below("blue")
    catalog.register("green").not_below("red").not_below("green")
    blue = catalog.register("blue")
    for name in ("red", "green", "blue"):
        blue.not_below(name)
    return catalog


def make_row_catalog() -> TileCatalog:
    """left / middle / right: a 3x1 row has exactly one solution."""
    catalog = TileCatalog()
    catalog.register("left").left("middle")
    catalog.register("middle").right("left").left("right")
    catalog.register("right").right("middle")
    return catalog


def make_platformer_catalog() -> TileCatalog:
    """Side-on platformer terrain: a ground strip, air, floating platforms."""
    catalog = TileCatalog()
    ground = catalog.register("ground")
    for name in ("ground", "air", "block", "special"):
        ground.not_above(name)
    catalog.register("air")
    catalog.register("block").above("air")
    catalog.register("special").left("block").right("block").above("air")
    return catalog


def make_random_catalog(rng: random.Random, size: int = 4) -> TileCatalog:
    """A catalog with a few random must / must-not rules."""
    names = [f"t{i}" for i in range(size)]
    catalog = TileCatalog()
    for name in names:
        tile = catalog.register(name)
        for _ in range(rng.randint(0, 2)):
            direction = rng.choice(list(RelativeDirection))
            if rng.random() < 0.3:
                tile.add_must(direction, rng.choice(names))
            else:
                tile.add_must_not(direction, rng.choice(names))
    return catalog
