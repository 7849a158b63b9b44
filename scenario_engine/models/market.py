from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

VOLATILITY_FLOOR = 0.05
VOLATILITY_CAP = 1.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PriceSample(BaseModel):
    """One observation in a rolling price-history buffer."""
    timestamp: datetime
    price: float = Field(gt=0)


class OnChainMetrics(BaseModel):
    """Raw metrics returned by a market data provider.

    Any field may be missing or zero when the upstream source is degraded;
    the engine substitutes conservative defaults per field.
    """
    tvl_usd: Optional[float] = None
    apy: Optional[float] = None
    gas_price_gwei: Optional[float] = None
    eth_price_usd: Optional[float] = None


class MarketSnapshot(BaseModel):
    """Immutable market state a simulation run starts from."""
    price: float = Field(gt=0)
    tvl: float
    yield_pct: float
    gas_price: float
    volatility: float
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}

    @field_validator("volatility")
    @classmethod
    def _clamp_volatility(cls, v: float) -> float:
        return max(VOLATILITY_FLOOR, min(VOLATILITY_CAP, v))
