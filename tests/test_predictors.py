"""Tests for the yield and peg-deviation predictors."""
import random

import pytest

from scenario_engine.simulation.predictors import (
    PEG_ASSETS,
    predict_peg_deviation,
    predict_yield,
)


# --- Yield tests ---


def test_yield_without_tvl_change_adds_volatility_premium():
    assert predict_yield(3.5, 0.0, 0.25) == pytest.approx(3.5 * 1.05)


def test_yield_dilutes_as_tvl_grows():
    assert predict_yield(3.5, 0.2, 0.25) < predict_yield(3.5, 0.0, 0.25)
    assert predict_yield(3.5, -0.2, 0.25) > predict_yield(3.5, 0.0, 0.25)


def test_yield_clamped_to_range():
    assert predict_yield(100.0, 0.0, 0.25) == 50.0
    assert predict_yield(3.5, 10.0, 0.0) == 0.1


# --- Peg deviation tests ---


def test_peg_deviation_within_bounds():
    rng = random.Random(11)
    deviation = 0.002
    for _ in range(2_000):
        deviation = predict_peg_deviation(deviation, 0.2, rng)
        assert 0.0 <= deviation <= 0.1


def test_peg_deviation_capped():
    rng = random.Random(11)
    assert predict_peg_deviation(0.5, 0.0, rng) == 0.1


def test_peg_deviation_reverts_toward_zero():
    rng = random.Random(13)
    deviation = 0.08
    for _ in range(50):
        deviation = predict_peg_deviation(deviation, 0.3, rng)
    # steady state is bounded by the noise amplitude
    assert deviation < 0.01


def test_peg_assets_constants():
    a, b = PEG_ASSETS
    assert (a.initial_deviation, a.reversion_speed) == (0.001, 0.3)
    assert (b.initial_deviation, b.reversion_speed) == (0.002, 0.2)
