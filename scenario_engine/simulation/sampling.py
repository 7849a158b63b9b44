"""Standard-normal draws via the Box-Muller transform."""
from __future__ import annotations

import math
import random


class StandardNormalSampler:
    """Draws N(0, 1) variates from an injected uniform source."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def sample(self) -> float:
        u1 = self.rng.random()
        # random() covers [0, 1); ln(0) is undefined
        while u1 == 0.0:
            u1 = self.rng.random()
        u2 = self.rng.random()
        return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
