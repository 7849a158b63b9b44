"""Risk-adjusted expected value per step and per branch.

Step EV:
    return% + yield * (i+1)/365 - volatility * 8 - (peg_a + peg_b) * 200

Branch EV is an exponentially time-decayed average of step EVs so that
near-term steps dominate:
    w_i = exp(-0.1 * i),  EV = sum(ev_i * w_i) / sum(w_i)
"""
from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from scenario_engine.models.simulation import StepPrediction

logger = logging.getLogger(__name__)

VOLATILITY_PENALTY = 8.0
PEG_PENALTY = 200.0
DECAY_LAMBDA = 0.1
EV_BOUND = 1000.0
_DAYS_PER_YEAR = 365.0


def step_ev(prediction: StepPrediction, step_index: int, base_price: float) -> float:
    """Risk-adjusted return of one step relative to the branch's base price."""
    return_pct = (prediction.price - base_price) / base_price * 100.0
    yield_return = prediction.yield_pct * (step_index + 1) / _DAYS_PER_YEAR
    volatility_penalty = prediction.volatility * VOLATILITY_PENALTY
    peg_penalty = (prediction.peg_deviation_a + prediction.peg_deviation_b) * PEG_PENALTY

    ev = return_pct + yield_return - volatility_penalty - peg_penalty
    if not math.isfinite(ev):
        logger.warning("Non-finite EV at step %d, defaulting to 0", step_index)
        return 0.0
    return max(-EV_BOUND, min(EV_BOUND, ev))


def score_predictions(
    predictions: Sequence[StepPrediction], base_price: float,
) -> list[StepPrediction]:
    """Return copies of ``predictions`` with their ``ev`` filled in."""
    return [
        pred.model_copy(update={"ev": step_ev(pred, i, base_price)})
        for i, pred in enumerate(predictions)
    ]


def branch_ev(step_evs: Sequence[float], decay: float = DECAY_LAMBDA) -> float:
    """Time-decay weighted average of step EVs (0 for an empty branch)."""
    weighted_sum = 0.0
    total_weight = 0.0
    for i, ev in enumerate(step_evs):
        weight = math.exp(-decay * i)
        weighted_sum += ev * weight
        total_weight += weight

    if total_weight == 0:
        return 0.0
    return weighted_sum / total_weight
