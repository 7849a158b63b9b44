"""Branch construction: iterates time steps along one simulated trajectory.

Each branch gets its own drift and volatility multiplier as a function of
its index so that branches in the same run are not identical:

    drift      = 0.05 + (i/N - 0.5) * 0.2     ~[-0.05, +0.15]
    vol_factor = 0.8  + (i/N) * 0.4           [0.8, 1.2]
"""
from __future__ import annotations

import logging
import random
from datetime import timedelta

from scenario_engine.models.market import MarketSnapshot
from scenario_engine.models.simulation import SimulationBranch, SimulationConfig, StepPrediction
from scenario_engine.simulation.predictors import PEG_ASSETS, predict_peg_deviation, predict_yield
from scenario_engine.simulation.price_path import predict_price
from scenario_engine.simulation.sampling import StandardNormalSampler

logger = logging.getLogger(__name__)

_BASE_DRIFT = 0.05
_DRIFT_SPREAD = 0.2
_VOL_FACTOR_BASE = 0.8
_VOL_FACTOR_SPREAD = 0.4
_TVL_PRICE_ELASTICITY = 0.5
_TVL_NOISE = 0.05
_MINUTES_PER_DAY = 24 * 60


def branch_parameters(branch_index: int, branch_count: int) -> tuple[float, float]:
    """Return (drift, volatility_factor) for a branch."""
    position = branch_index / branch_count
    drift = _BASE_DRIFT + (position - 0.5) * _DRIFT_SPREAD
    vol_factor = _VOL_FACTOR_BASE + position * _VOL_FACTOR_SPREAD
    return drift, vol_factor


def build_branch(
    simulation_id: str,
    branch_index: int,
    config: SimulationConfig,
    snapshot: MarketSnapshot,
    rng: random.Random,
) -> SimulationBranch:
    """Simulate one branch; predictions carry ev=0 and outcome is pending."""
    if not 0 <= branch_index < config.branch_count:
        raise ValueError(
            f"branch_index must be in [0, {config.branch_count}), got {branch_index}"
        )

    drift, vol_factor = branch_parameters(branch_index, config.branch_count)
    volatility = snapshot.volatility * vol_factor
    interval = timedelta(minutes=config.prediction_interval_minutes)
    time_step_days = config.prediction_interval_minutes / _MINUTES_PER_DAY
    sampler = StandardNormalSampler(rng)

    price = snapshot.price
    peg_deviations = [asset.initial_deviation for asset in PEG_ASSETS]
    predictions: list[StepPrediction] = []

    for t in range(config.intervals):
        price = predict_price(price, volatility, drift, time_step_days, sampler)

        # TVL follows price with dampened elasticity plus a little noise
        price_ratio = price / snapshot.price
        tvl = (
            snapshot.tvl
            * price_ratio ** _TVL_PRICE_ELASTICITY
            * rng.uniform(1.0 - _TVL_NOISE, 1.0 + _TVL_NOISE)
        )
        tvl_change = (tvl - snapshot.tvl) / snapshot.tvl if snapshot.tvl else 0.0
        yield_pct = predict_yield(snapshot.yield_pct, tvl_change, volatility)

        peg_deviations = [
            predict_peg_deviation(dev, asset.reversion_speed, rng)
            for dev, asset in zip(peg_deviations, PEG_ASSETS)
        ]

        predictions.append(StepPrediction(
            timestamp=snapshot.timestamp + interval * (t + 1),
            price=price,
            volatility=volatility,
            tvl=tvl,
            yield_pct=yield_pct,
            peg_deviation_a=peg_deviations[0],
            peg_deviation_b=peg_deviations[1],
        ))

    logger.debug(
        "Built branch %d/%d: drift=%+.3f vol=%.3f steps=%d",
        branch_index + 1, config.branch_count, drift, volatility, len(predictions),
    )

    return SimulationBranch(
        id=f"{simulation_id}-branch-{branch_index}",
        parent_id=None,
        predictions=predictions,
    )
