"""Tests for branch construction."""
import random
from datetime import datetime, timedelta, timezone

import pytest

from scenario_engine.models.market import MarketSnapshot
from scenario_engine.models.simulation import BranchOutcome, SimulationConfig
from scenario_engine.simulation.branch import branch_parameters, build_branch


def _make_snapshot(**overrides) -> MarketSnapshot:
    defaults = dict(
        price=2000.0,
        tvl=1_000_000.0,
        yield_pct=3.5,
        gas_price=20.0,
        volatility=0.25,
        timestamp=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
    )
    defaults.update(overrides)
    return MarketSnapshot(**defaults)


def _make_config(**overrides) -> SimulationConfig:
    defaults = dict(time_horizon_minutes=60, branch_count=3, prediction_interval_minutes=20)
    defaults.update(overrides)
    return SimulationConfig(**defaults)


# --- Branch parameter tests ---


def test_branch_parameters_span():
    drift, vol_factor = branch_parameters(0, 2)
    assert drift == pytest.approx(-0.05)
    assert vol_factor == pytest.approx(0.8)
    drift, vol_factor = branch_parameters(1, 2)
    assert drift == pytest.approx(0.05)
    assert vol_factor == pytest.approx(1.0)


def test_branch_parameters_increase_with_index():
    params = [branch_parameters(i, 10) for i in range(10)]
    drifts = [d for d, _ in params]
    factors = [f for _, f in params]
    assert drifts == sorted(drifts)
    assert factors == sorted(factors)
    assert all(0.8 <= f < 1.2 for f in factors)


# --- build_branch tests ---


def test_branch_has_one_prediction_per_interval():
    branch = build_branch("sim-1", 0, _make_config(), _make_snapshot(), random.Random(1))
    assert len(branch.predictions) == 3
    assert branch.id == "sim-1-branch-0"
    assert branch.parent_id is None


def test_interval_count_rounds_up():
    config = _make_config(time_horizon_minutes=50)
    branch = build_branch("sim-1", 0, config, _make_snapshot(), random.Random(1))
    assert len(branch.predictions) == 3


def test_timestamps_step_by_prediction_interval():
    snapshot = _make_snapshot()
    branch = build_branch("sim-1", 1, _make_config(), snapshot, random.Random(2))
    stamps = [p.timestamp for p in branch.predictions]
    assert stamps[0] == snapshot.timestamp + timedelta(minutes=20)
    for earlier, later in zip(stamps, stamps[1:]):
        assert later - earlier == timedelta(minutes=20)


def test_branch_volatility_scaled_by_factor():
    config = _make_config(branch_count=2)
    branch = build_branch("sim-1", 1, config, _make_snapshot(volatility=0.3), random.Random(3))
    for pred in branch.predictions:
        assert pred.volatility == pytest.approx(0.3)


def test_unscored_branch_is_pending():
    branch = build_branch("sim-1", 2, _make_config(), _make_snapshot(), random.Random(4))
    assert branch.outcome == BranchOutcome.pending
    assert branch.ev_score == 0.0
    assert all(p.ev == 0.0 for p in branch.predictions)


def test_predictions_respect_bounds():
    config = _make_config(time_horizon_minutes=24 * 60 * 30, prediction_interval_minutes=24 * 60)
    branch = build_branch("sim-1", 0, config, _make_snapshot(volatility=1.0), random.Random(5))
    for pred in branch.predictions:
        assert pred.price > 0
        assert 0.1 <= pred.yield_pct <= 50
        assert 0.0 <= pred.peg_deviation_a <= 0.1
        assert 0.0 <= pred.peg_deviation_b <= 0.1


def test_same_seed_same_branch():
    config, snapshot = _make_config(), _make_snapshot()
    a = build_branch("sim-1", 0, config, snapshot, random.Random(99))
    b = build_branch("sim-1", 0, config, snapshot, random.Random(99))
    assert a.predictions == b.predictions


def test_branch_index_out_of_range_rejected():
    with pytest.raises(ValueError):
        build_branch("sim-1", 3, _make_config(), _make_snapshot(), random.Random(0))
