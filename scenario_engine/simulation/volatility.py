"""Historical volatility from a rolling window of observed prices.

sigma_ann = stdev(ln(p_i / p_{i-1})) * sqrt(365), clamped to [0.05, 1.0].
"""
from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timezone

from scenario_engine.config import settings
from scenario_engine.models.market import VOLATILITY_CAP, VOLATILITY_FLOOR, PriceSample

_MIN_SAMPLES = 3
_PERIODS_PER_YEAR = 365


def estimate_volatility(
    samples: Sequence[PriceSample], default: float | None = None,
) -> float:
    """Annualized log-return volatility of an ordered price history.

    Returns ``default`` (settings.DEFAULT_VOLATILITY when None) for fewer
    than three samples.
    """
    if len(samples) < _MIN_SAMPLES:
        return settings.DEFAULT_VOLATILITY if default is None else default

    log_returns = [
        math.log(samples[i].price / samples[i - 1].price)
        for i in range(1, len(samples))
    ]
    n = len(log_returns)
    mean = sum(log_returns) / n
    variance = sum((r - mean) ** 2 for r in log_returns) / (n - 1)

    annualized = math.sqrt(variance) * math.sqrt(_PERIODS_PER_YEAR)
    return max(VOLATILITY_FLOOR, min(VOLATILITY_CAP, annualized))


class PriceHistory:
    """Bounded FIFO buffer of price samples for one market feed.

    Holds at most ``2 * window`` samples; once exceeded only the newest
    ``window`` are kept. Not thread-safe: one writer per instance.
    """

    def __init__(
        self, window: int | None = None, default_volatility: float | None = None,
    ) -> None:
        if window is None:
            window = settings.VOLATILITY_WINDOW
        if window < 1:
            raise ValueError(f"window must be at least 1, got {window}")
        self.window = window
        self.default_volatility = default_volatility
        self._samples: list[PriceSample] = []

    def record(self, price: float, timestamp: datetime | None = None) -> None:
        self._samples.append(
            PriceSample(timestamp=timestamp or datetime.now(timezone.utc), price=price)
        )
        if len(self._samples) > self.window * 2:
            self._samples = self._samples[-self.window:]

    def samples(self) -> list[PriceSample]:
        return list(self._samples)

    def estimate(self) -> float:
        return estimate_volatility(self._samples, self.default_volatility)

    def clear(self) -> None:
        self._samples = []

    def __len__(self) -> int:
        return len(self._samples)
