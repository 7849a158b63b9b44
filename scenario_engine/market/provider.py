"""Market data provider interface consumed by the simulation engine.

The engine never talks to a chain or exchange directly; it awaits a provider
and falls back to conservative constants on any failure.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from scenario_engine.models.market import OnChainMetrics


class MarketDataProvider(ABC):
    """Source of live on-chain metrics and a spot price."""

    @abstractmethod
    async def get_on_chain_metrics(self) -> OnChainMetrics:
        ...

    async def get_spot_price(self) -> Optional[float]:
        """Spot price of the simulated asset; None defers to the metrics."""
        return None


class StaticMarketDataProvider(MarketDataProvider):
    """Serves fixed metrics for offline runs and tests."""

    def __init__(self, metrics: OnChainMetrics, spot_price: Optional[float] = None) -> None:
        self.metrics = metrics
        self.spot_price = spot_price

    async def get_on_chain_metrics(self) -> OnChainMetrics:
        return self.metrics

    async def get_spot_price(self) -> Optional[float]:
        return self.spot_price
