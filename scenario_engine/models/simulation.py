import math
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

# Keeps step timestamps inside the datetime range and GBM steps inside exp range
MAX_HORIZON_MINUTES = 100 * 365 * 24 * 60


class BranchOutcome(str, Enum):
    """Classification of a finished branch."""
    success = "success"
    failure = "failure"
    pending = "pending"


class SimulationConfig(BaseModel):
    """Configuration for a single simulation run."""
    time_horizon_minutes: int = Field(default=60, ge=0, le=MAX_HORIZON_MINUTES)
    branch_count: int = Field(default=3, ge=1)
    prediction_interval_minutes: int = Field(default=20, ge=1, le=MAX_HORIZON_MINUTES)
    seed: Optional[int] = None

    @property
    def intervals(self) -> int:
        return math.ceil(self.time_horizon_minutes / self.prediction_interval_minutes)


class StepPrediction(BaseModel):
    """Predicted market state at one time step of a branch."""
    timestamp: datetime
    price: float = Field(gt=0)
    volatility: float
    tvl: float
    yield_pct: float
    peg_deviation_a: float = Field(ge=0.0, le=0.1)
    peg_deviation_b: float = Field(ge=0.0, le=0.1)
    ev: float = 0.0

    model_config = {"frozen": True}


class SimulationBranch(BaseModel):
    """One simulated future trajectory."""
    id: str
    parent_id: Optional[str] = None
    predictions: list[StepPrediction]
    outcome: BranchOutcome = BranchOutcome.pending
    ev_score: float = 0.0

    model_config = {"frozen": True}

    @property
    def final_ev(self) -> float:
        return self.predictions[-1].ev if self.predictions else 0.0

    @property
    def average_volatility(self) -> float:
        if not self.predictions:
            return 0.0
        return sum(p.volatility for p in self.predictions) / len(self.predictions)
