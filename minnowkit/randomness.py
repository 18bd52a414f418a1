"""Well-seeded pseudo-random generators."""

from __future__ import annotations

import os
import random

_SEED_WORDS = 1024


def get_random_engine() -> random.Random:
    """Return a generator seeded from 1024 words of operating-system entropy."""
    seed = int.from_bytes(os.urandom(4 * _SEED_WORDS), "big")
    return random.Random(seed)