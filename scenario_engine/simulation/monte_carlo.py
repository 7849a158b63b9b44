"""Monte Carlo aggregation of branch EV samples.

Percentile points are read from the sorted sample at index floor(q * n),
so the 95% confidence interval is (sorted[floor(0.025n)], sorted[floor(0.975n)]).
"""
from __future__ import annotations

import math
from collections.abc import Sequence

from scenario_engine.models.monte_carlo import EVPercentiles, MonteCarloResult


class RunningStats:
    """Welford's online mean and variance."""

    def __init__(self) -> None:
        self.n = 0
        self.mean = 0.0
        self._m2 = 0.0

    def push(self, x: float) -> None:
        self.n += 1
        delta = x - self.mean
        self.mean += delta / self.n
        self._m2 += delta * (x - self.mean)

    @property
    def variance(self) -> float:
        return self._m2 / (self.n - 1) if self.n > 1 else 0.0

    @property
    def standard_error(self) -> float:
        if self.n == 0:
            return math.inf
        return math.sqrt(self.variance) / math.sqrt(self.n)


def percentile_at(sorted_values: Sequence[float], q: float) -> float:
    """Value at index floor(q * n) of an ascending sample."""
    idx = min(int(q * len(sorted_values)), len(sorted_values) - 1)
    return sorted_values[idx]


def _cvar(sorted_values: Sequence[float], q: float) -> float:
    """Mean of the worst floor(q * n) samples (expected shortfall)."""
    cutoff = int(q * len(sorted_values))
    if cutoff == 0:
        return sorted_values[0]
    tail = sorted_values[:cutoff]
    return sum(tail) / len(tail)


def _standardized_moment(values: Sequence[float], mean: float, std: float, k: int) -> float:
    return sum(((v - mean) / std) ** k for v in values) / len(values)


def summarize_ev_samples(
    evs: Sequence[float],
    success_count: int,
    failure_count: int,
    iterations_run: int | None = None,
    converged: bool = False,
) -> MonteCarloResult:
    """Build a MonteCarloResult from collected branch EVs.

    An empty sample produces a result whose statistics are all None.
    """
    n = len(evs)
    if iterations_run is None:
        iterations_run = n
    if n == 0:
        return MonteCarloResult(iterations_run=iterations_run, converged=False)

    mean = sum(evs) / n
    variance = sum((v - mean) ** 2 for v in evs) / (n - 1) if n > 1 else 0.0
    std = math.sqrt(variance)
    ordered = sorted(evs)

    percentiles = EVPercentiles(
        p5=percentile_at(ordered, 0.05),
        p10=percentile_at(ordered, 0.10),
        p25=percentile_at(ordered, 0.25),
        p50=percentile_at(ordered, 0.50),
        p75=percentile_at(ordered, 0.75),
        p90=percentile_at(ordered, 0.90),
        p95=percentile_at(ordered, 0.95),
    )

    skewness = _standardized_moment(evs, mean, std, 3) if std > 0 and n >= 3 else 0.0
    kurtosis = _standardized_moment(evs, mean, std, 4) - 3.0 if std > 0 and n >= 4 else 0.0

    return MonteCarloResult(
        mean_ev=mean,
        median_ev=percentiles.p50,
        std_ev=std,
        success_probability=success_count / n,
        failure_probability=failure_count / n,
        confidence_interval=(percentile_at(ordered, 0.025), percentile_at(ordered, 0.975)),
        confidence_interval_99=(percentile_at(ordered, 0.005), percentile_at(ordered, 0.995)),
        var_95=percentiles.p5,
        var_99=percentile_at(ordered, 0.01),
        cvar_95=_cvar(ordered, 0.05),
        percentiles=percentiles,
        skewness=skewness,
        kurtosis=kurtosis,
        standard_error=std / math.sqrt(n),
        converged=converged,
        iterations_run=iterations_run,
        sample_size=n,
    )
