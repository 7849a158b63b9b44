"""One-step Geometric Brownian Motion price update.

Model: dS = mu * S * dt + sigma * S * dW
Exact: S(t+dt) = S(t) * exp((mu - 0.5*sigma^2)*dt + sigma*sqrt(dt)*Z)
"""
from __future__ import annotations

import math
import sys

from scenario_engine.simulation.sampling import StandardNormalSampler

_DAYS_PER_YEAR = 365.0


def predict_price(
    current_price: float,
    volatility: float,
    drift: float,
    time_step_days: float,
    sampler: StandardNormalSampler,
) -> float:
    """Advance ``current_price`` by one GBM step of ``time_step_days``."""
    if current_price <= 0:
        raise ValueError(f"current_price must be positive, got {current_price}")

    dt = time_step_days / _DAYS_PER_YEAR
    z = sampler.sample()
    log_return = (drift - 0.5 * volatility ** 2) * dt + volatility * math.sqrt(dt) * z
    # exp underflows to 0 for extreme negative returns
    return max(current_price * math.exp(log_return), sys.float_info.min)
