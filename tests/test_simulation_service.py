"""Tests for the synchronous simulation facade."""
from scenario_engine.market.provider import StaticMarketDataProvider
from scenario_engine.models.market import MarketSnapshot, OnChainMetrics
from scenario_engine.models.simulation import SimulationConfig
from scenario_engine.services import simulation_service


def test_default_engine_is_shared():
    assert simulation_service.get_engine() is simulation_service.get_engine()


def test_run_simulation_with_override():
    snapshot = MarketSnapshot(price=1800.0, tvl=500_000.0, yield_pct=4.0,
                              gas_price=15.0, volatility=0.4)
    branches = simulation_service.run_simulation(SimulationConfig(seed=1), snapshot)
    assert len(branches) == 3
    best = simulation_service.select_best_branch(branches)
    assert best is branches[0]


def test_last_snapshot_none_without_provider():
    simulation_service.run_simulation(SimulationConfig(seed=2))
    assert simulation_service.get_last_market_snapshot() is None


def test_configured_provider_feeds_last_snapshot():
    provider = StaticMarketDataProvider(OnChainMetrics(eth_price_usd=2400.0, tvl_usd=2e6))
    engine = simulation_service.configure_engine(provider=provider, seed=3)
    assert simulation_service.get_engine() is engine
    simulation_service.run_simulation(SimulationConfig())
    snapshot = simulation_service.get_last_market_snapshot()
    assert snapshot.price == 2400.0
    assert snapshot.tvl == 2e6


def test_run_monte_carlo():
    result = simulation_service.run_monte_carlo(SimulationConfig(seed=4), 25)
    assert result.sample_size == 25
    assert result.iterations_run == 25


def test_reset_engine_drops_state():
    provider = StaticMarketDataProvider(OnChainMetrics(eth_price_usd=2400.0))
    simulation_service.configure_engine(provider=provider)
    simulation_service.run_simulation(SimulationConfig())
    simulation_service.reset_engine()
    assert simulation_service.get_last_market_snapshot() is None
