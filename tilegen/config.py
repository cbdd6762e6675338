"""
Configuration constants.

Centralizes the default knobs used by catalog finalization and map generation.
Every value here can be overridden per call through the matching constructor
or function argument.
"""

from typing import Literal

import numpy as np

from tilegen.types import RandomSeed

# =============================================================================
# GENERAL
# =============================================================================

# None = system entropy, so every run differs. Set an int or str for
# reproducible maps.
RANDOM_SEED: RandomSeed = None

# =============================================================================
# CATALOG
# =============================================================================

# Reject requirements that name an unregistered tile when the catalog is
# finalized. False restores the permissive behavior where such a requirement
# is simply never satisfiable.
STRICT_TILE_REFERENCES = True

# =============================================================================
# GENERATION
# =============================================================================

# Fresh attempts made by generate() before giving up.
DEFAULT_MAX_ATTEMPTS = 10

# Tentative placements allowed in a single attempt. Bounds the exponential
# worst case of nearly unsatisfiable catalogs.
STEP_BUDGET = 250_000

# Wall-clock seconds allowed in a single attempt (None = unlimited).
TIME_BUDGET_SECONDS: float | None = None

# How candidate order varies between attempts: "registration", "rotate" or
# "shuffle".
CANDIDATE_ORDERING: Literal["registration", "rotate", "shuffle"] = "shuffle"

# =============================================================================
# GRID STORAGE
# =============================================================================

# Cells hold catalog indices; -1 marks an empty cell, so the type is signed.
GRID_DTYPE = np.int32
