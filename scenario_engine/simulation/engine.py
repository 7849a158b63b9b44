"""Simulation orchestrator.

Obtains a market snapshot, builds N independent branches, scores and
classifies each, and returns them ranked by EV. Monte Carlo mode repeats
single-branch runs against one snapshot and summarizes the EV distribution.
"""
from __future__ import annotations

import asyncio
import logging
import math
import random
import uuid
from collections.abc import Sequence
from typing import Optional

from scenario_engine.config import Settings, settings as default_settings
from scenario_engine.market.provider import MarketDataProvider
from scenario_engine.models.market import MarketSnapshot, OnChainMetrics
from scenario_engine.models.monte_carlo import MonteCarloResult
from scenario_engine.models.simulation import BranchOutcome, SimulationBranch, SimulationConfig
from scenario_engine.simulation.branch import build_branch
from scenario_engine.simulation.monte_carlo import RunningStats, summarize_ev_samples
from scenario_engine.simulation.outcome import classify_branch
from scenario_engine.simulation.scoring import branch_ev, score_predictions
from scenario_engine.simulation.volatility import PriceHistory

logger = logging.getLogger(__name__)


def _positive_or(value: Optional[float], default: float) -> float:
    return value if value is not None and value > 0 else default


def select_best_branch(branches: Sequence[SimulationBranch]) -> Optional[SimulationBranch]:
    """Branch with the highest EV; the first one wins ties. None if empty."""
    best: Optional[SimulationBranch] = None
    for branch in branches:
        if best is None or branch.ev_score > best.ev_score:
            best = branch
    return best


class SimulationEngine:
    """Runs branch simulations against live or supplied market data.

    The engine owns a rolling ``PriceHistory`` fed by live snapshots; use
    one engine per market feed.
    """

    def __init__(
        self,
        provider: MarketDataProvider | None = None,
        history: PriceHistory | None = None,
        seed: int | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.provider = provider
        self.history = history if history is not None else PriceHistory(
            window=self.settings.VOLATILITY_WINDOW,
            default_volatility=self.settings.DEFAULT_VOLATILITY,
        )
        self._rng = random.Random(seed)
        self._last_snapshot: MarketSnapshot | None = None

    # ------------------------------------------------------------------
    # Market data
    # ------------------------------------------------------------------
    def get_last_market_snapshot(self) -> Optional[MarketSnapshot]:
        return self._last_snapshot

    def fallback_snapshot(self) -> MarketSnapshot:
        s = self.settings
        return MarketSnapshot(
            price=s.FALLBACK_PRICE,
            tvl=s.FALLBACK_TVL,
            yield_pct=s.FALLBACK_YIELD,
            gas_price=s.FALLBACK_GAS_PRICE,
            volatility=s.DEFAULT_VOLATILITY,
        )

    async def fetch_market_snapshot(self) -> MarketSnapshot:
        """Live snapshot from the provider, or the fallback snapshot on failure."""
        if self.provider is None:
            logger.info("No market data provider configured, using fallback snapshot")
            return self.fallback_snapshot()

        timeout = self.settings.MARKET_DATA_TIMEOUT_SECONDS
        try:
            metrics, spot_price = await asyncio.wait_for(self._fetch_from_provider(), timeout)
        except asyncio.TimeoutError:
            logger.warning("Market data fetch timed out after %.1fs, using fallback", timeout)
            return self.fallback_snapshot()
        except Exception as e:
            logger.warning("Failed to fetch market data, using fallback: %s", e)
            return self.fallback_snapshot()

        s = self.settings
        price = _positive_or(spot_price, _positive_or(metrics.eth_price_usd, s.FALLBACK_PRICE))

        # Estimate from history before this price joins it
        volatility = self.history.estimate()
        self.history.record(price)

        snapshot = MarketSnapshot(
            price=price,
            tvl=_positive_or(metrics.tvl_usd, s.FALLBACK_TVL),
            yield_pct=_positive_or(metrics.apy, s.FALLBACK_YIELD),
            gas_price=_positive_or(metrics.gas_price_gwei, s.FALLBACK_GAS_PRICE),
            volatility=volatility,
        )
        self._last_snapshot = snapshot
        logger.info(
            "Market snapshot: price=%.2f tvl=%.0f yield=%.2f%% vol=%.3f",
            snapshot.price, snapshot.tvl, snapshot.yield_pct, snapshot.volatility,
        )
        return snapshot

    async def _fetch_from_provider(self) -> tuple[OnChainMetrics, Optional[float]]:
        metrics = await self.provider.get_on_chain_metrics()
        spot_price = await self.provider.get_spot_price()
        return metrics, spot_price

    # ------------------------------------------------------------------
    # Branch simulation
    # ------------------------------------------------------------------
    def _call_rng(self, config: SimulationConfig) -> random.Random:
        if config.seed is not None:
            return random.Random(config.seed)
        return self._rng

    @staticmethod
    def _child_rng(rng: random.Random) -> random.Random:
        # Every branch draws from its own stream
        return random.Random(rng.getrandbits(32))

    def _simulate_branch(
        self,
        simulation_id: str,
        branch_index: int,
        config: SimulationConfig,
        snapshot: MarketSnapshot,
        rng: random.Random,
    ) -> SimulationBranch:
        branch = build_branch(simulation_id, branch_index, config, snapshot, rng)
        scored = branch.model_copy(
            update={"predictions": score_predictions(branch.predictions, snapshot.price)}
        )
        return scored.model_copy(update={
            "ev_score": branch_ev([p.ev for p in scored.predictions]),
            "outcome": classify_branch(scored),
        })

    async def run_simulation(
        self,
        config: SimulationConfig,
        market_override: MarketSnapshot | None = None,
    ) -> list[SimulationBranch]:
        """Simulate ``config.branch_count`` branches, sorted by EV descending."""
        simulation_id = f"sim-{uuid.uuid4().hex[:12]}"
        logger.info(
            "Simulation %s started: %d branches x %d steps",
            simulation_id, config.branch_count, config.intervals,
        )

        snapshot = market_override if market_override is not None else await self.fetch_market_snapshot()

        if config.intervals == 0:
            logger.info("Simulation %s has a zero time horizon, no branches", simulation_id)
            return []

        rng = self._call_rng(config)
        branches = [
            self._simulate_branch(simulation_id, i, config, snapshot, self._child_rng(rng))
            for i in range(config.branch_count)
        ]
        branches.sort(key=lambda b: b.ev_score, reverse=True)

        logger.info(
            "Simulation %s completed: best EV %.2f (%s)",
            simulation_id, branches[0].ev_score, branches[0].outcome.value,
        )
        return branches

    def select_best_branch(self, branches: Sequence[SimulationBranch]) -> Optional[SimulationBranch]:
        return select_best_branch(branches)

    # ------------------------------------------------------------------
    # Monte Carlo
    # ------------------------------------------------------------------
    async def run_monte_carlo(
        self,
        config: SimulationConfig,
        iterations: int | None = None,
        *,
        market_override: MarketSnapshot | None = None,
        min_iterations: int = 100,
        convergence_threshold: float | None = None,
        check_interval: int = 50,
    ) -> MonteCarloResult:
        """Repeat single-branch runs and summarize the EV distribution.

        The snapshot is fetched once so every iteration shares a baseline;
        all variation comes from the price process. With a
        ``convergence_threshold`` the loop stops early once the standard
        error of the mean drops below it.
        """
        if iterations is None:
            iterations = self.settings.MONTE_CARLO_DEFAULT_ITERATIONS
        if iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {iterations}")
        if check_interval < 1:
            raise ValueError(f"check_interval must be at least 1, got {check_interval}")

        snapshot = market_override if market_override is not None else await self.fetch_market_snapshot()
        single = config.model_copy(update={"branch_count": 1})
        if single.intervals == 0:
            logger.warning("Monte Carlo requested with a zero time horizon, no samples")
            return summarize_ev_samples([], 0, 0, iterations_run=0)

        rng = self._call_rng(config)
        run_id = f"mc-{uuid.uuid4().hex[:12]}"
        logger.info("Monte Carlo %s started: up to %d iterations", run_id, iterations)

        evs: list[float] = []
        success_count = 0
        failure_count = 0
        stats = RunningStats()
        last_mean = 0.0
        converged = False
        iterations_run = 0

        for i in range(iterations):
            iterations_run = i + 1
            branch = self._simulate_branch(f"{run_id}-{i}", 0, single, snapshot, self._child_rng(rng))

            ev = branch.ev_score
            if not math.isfinite(ev):
                logger.warning("Monte Carlo iteration %d: invalid EV, skipping", i)
                continue

            evs.append(ev)
            stats.push(ev)
            if branch.outcome is BranchOutcome.success:
                success_count += 1
            elif branch.outcome is BranchOutcome.failure:
                failure_count += 1

            n = stats.n
            if convergence_threshold is None or n < min_iterations or n % check_interval:
                continue

            se = stats.standard_error
            if se < convergence_threshold:
                converged = True
                logger.info("Monte Carlo converged after %d iterations (SE: %.4f)", n, se)
                break

            mean_change_pct = (
                abs(stats.mean - last_mean) / abs(last_mean) * 100 if last_mean else 100.0
            )
            if mean_change_pct < 1 and se < convergence_threshold * 2:
                converged = True
                logger.info("Monte Carlo converged (mean stabilized) after %d iterations", n)
                break
            last_mean = stats.mean

        result = summarize_ev_samples(
            evs, success_count, failure_count,
            iterations_run=iterations_run, converged=converged,
        )
        if result.is_empty:
            logger.warning("Monte Carlo %s collected no valid samples", run_id)
        else:
            logger.info(
                "Monte Carlo %s completed: n=%d mean EV %.2f, P(success)=%.3f",
                run_id, result.sample_size, result.mean_ev, result.success_probability,
            )
        return result

    async def run_batch_monte_carlo(
        self,
        configs: Sequence[SimulationConfig],
        iterations_per_config: int = 500,
    ) -> dict[str, MonteCarloResult]:
        """Monte Carlo per config, keyed ``scenario-{i}-h{horizon}-b{branches}``."""
        results: dict[str, MonteCarloResult] = {}
        for i, config in enumerate(configs):
            key = f"scenario-{i}-h{config.time_horizon_minutes}-b{config.branch_count}"
            logger.info("Running Monte Carlo for scenario %d/%d", i + 1, len(configs))
            results[key] = await self.run_monte_carlo(config, iterations_per_config)
        return results
