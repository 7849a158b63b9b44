from typing import Optional

from pydantic import BaseModel


class EVPercentiles(BaseModel):
    """Points of the sorted Monte Carlo EV sample."""
    p5: float
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    p95: float


class MonteCarloResult(BaseModel):
    """Summary of the EV distribution from repeated single-branch runs.

    Every statistic is None when no valid sample was collected.
    """
    mean_ev: Optional[float] = None
    median_ev: Optional[float] = None
    std_ev: Optional[float] = None
    success_probability: Optional[float] = None
    failure_probability: Optional[float] = None
    confidence_interval: Optional[tuple[float, float]] = None
    confidence_interval_99: Optional[tuple[float, float]] = None
    var_95: Optional[float] = None
    var_99: Optional[float] = None
    cvar_95: Optional[float] = None
    percentiles: Optional[EVPercentiles] = None
    skewness: Optional[float] = None
    kurtosis: Optional[float] = None
    standard_error: Optional[float] = None
    converged: bool = False
    iterations_run: int = 0
    sample_size: int = 0

    @property
    def is_empty(self) -> bool:
        return self.sample_size == 0
