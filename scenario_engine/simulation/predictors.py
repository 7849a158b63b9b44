"""Yield and peg-deviation predictors used alongside the price path."""
from __future__ import annotations

import random
from dataclasses import dataclass

_TVL_DILUTION = 0.3         # yield falls as deposits grow
_VOLATILITY_PREMIUM = 0.2   # risk premium per unit of volatility
_YIELD_MIN = 0.1
_YIELD_MAX = 50.0

_PEG_NOISE = 0.0025         # half-width of the uniform perturbation
_PEG_MAX = 0.1


@dataclass(frozen=True)
class PegAsset:
    """A tracked pegged asset and its mean-reversion behaviour."""
    name: str
    initial_deviation: float
    reversion_speed: float


PEG_ASSETS: tuple[PegAsset, PegAsset] = (
    PegAsset(name="a", initial_deviation=0.001, reversion_speed=0.3),
    PegAsset(name="b", initial_deviation=0.002, reversion_speed=0.2),
)


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def predict_yield(base_yield: float, tvl_change_ratio: float, volatility: float) -> float:
    """Yield (percent) after a relative TVL change, bounded to [0.1, 50]."""
    factor = 1.0 - _TVL_DILUTION * tvl_change_ratio + _VOLATILITY_PREMIUM * volatility
    return _clamp(base_yield * factor, _YIELD_MIN, _YIELD_MAX)


def predict_peg_deviation(
    current_deviation: float,
    reversion_speed: float,
    rng: random.Random,
) -> float:
    """Mean-reverting random walk of a peg deviation, bounded to [0, 0.1]."""
    noise = rng.uniform(-_PEG_NOISE, _PEG_NOISE)
    reverted = current_deviation * (1.0 - reversion_speed) + noise
    return _clamp(abs(reverted), 0.0, _PEG_MAX)
