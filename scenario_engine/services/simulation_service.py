"""Simulation service facade.

Synchronous entry points over a process-wide default engine for callers
that do not run an event loop. Async callers should hold a
``SimulationEngine`` and await it directly.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Optional

from scenario_engine.market.provider import MarketDataProvider
from scenario_engine.models.market import MarketSnapshot
from scenario_engine.models.monte_carlo import MonteCarloResult
from scenario_engine.models.simulation import SimulationBranch, SimulationConfig
from scenario_engine.simulation.engine import SimulationEngine
from scenario_engine.simulation.engine import select_best_branch as _select_best_branch

logger = logging.getLogger(__name__)

_engine: SimulationEngine | None = None


def get_engine() -> SimulationEngine:
    global _engine
    if _engine is None:
        _engine = SimulationEngine()
    return _engine


def configure_engine(
    provider: MarketDataProvider | None = None, seed: int | None = None,
) -> SimulationEngine:
    """Replace the default engine, e.g. to attach a live market data provider."""
    global _engine
    _engine = SimulationEngine(provider=provider, seed=seed)
    logger.info("Simulation engine configured (provider: %s)", type(provider).__name__)
    return _engine


def reset_engine() -> None:
    """Drop the default engine, mainly for testing."""
    global _engine
    _engine = None


def run_simulation(
    config: SimulationConfig, market_override: MarketSnapshot | None = None,
) -> list[SimulationBranch]:
    return asyncio.run(get_engine().run_simulation(config, market_override))


def select_best_branch(branches: Sequence[SimulationBranch]) -> Optional[SimulationBranch]:
    return _select_best_branch(branches)


def run_monte_carlo(config: SimulationConfig, iterations: int | None = None) -> MonteCarloResult:
    return asyncio.run(get_engine().run_monte_carlo(config, iterations))


def get_last_market_snapshot() -> Optional[MarketSnapshot]:
    return get_engine().get_last_market_snapshot()
