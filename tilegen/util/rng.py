"""Deterministic random number generation with isolated streams.

Each consumer (candidate ordering for attempt 0, attempt 1, ...) gets its own
independent random stream derived from a master seed. This ensures that:

1. Generation is fully reproducible from the same master seed
2. How much randomness one attempt consumes never shifts another attempt
3. Changing the attempt budget does not change the outcome of earlier attempts

Usage:
    provider = RNGProvider(master_seed=42)
    order_rng = provider.get("order.attempt.3")
    order_rng.shuffle(order)

Domain naming convention (hierarchical):
    - "order.attempt.0", "order.attempt.1", ...
"""

from __future__ import annotations

import zlib
from random import Random
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tilegen.types import RandomSeed


def derive_seed(master_seed: RandomSeed, domain: str) -> int:
    """Derive a stable 32-bit seed for a domain from the master seed."""
    # Use crc32 instead of hash() - hash() is randomized per Python session via
    # PYTHONHASHSEED, which would break cross-session determinism
    return zlib.crc32(f"{master_seed}:{domain}".encode())


class RNGProvider:
    """Provides isolated RNG streams for named domains.

    Each domain gets its own Random instance derived deterministically
    from the master seed. Domains are identified by string names.
    """

    def __init__(self, master_seed: RandomSeed = None) -> None:
        self._master_seed = master_seed
        self._streams: dict[str, Random] = {}

    @property
    def master_seed(self) -> RandomSeed:
        return self._master_seed

    def get(self, domain: str) -> Random:
        """Get the RNG stream for the named domain.

        Repeated calls with the same domain return the same stream, so
        consumption continues where it left off.

        Args:
            domain: Hierarchical name like "order.attempt.0"

        Returns:
            A Random instance private to the domain
        """
        if domain not in self._streams:
            if self._master_seed is None:
                # No seed: use system entropy for non-deterministic behavior
                self._streams[domain] = Random()
            else:
                self._streams[domain] = Random(
                    derive_seed(self._master_seed, domain)
                )
        return self._streams[domain]

    def reset(self, master_seed: RandomSeed = None) -> None:
        """Drop all streams and start over from a new master seed.

        Args:
            master_seed: New master seed for all streams
        """
        self._master_seed = master_seed
        self._streams.clear()
