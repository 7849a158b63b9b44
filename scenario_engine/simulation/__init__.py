"""Simulation engine: branch construction, EV scoring and Monte Carlo."""
from scenario_engine.simulation.volatility import PriceHistory, estimate_volatility
from scenario_engine.simulation.sampling import StandardNormalSampler
from scenario_engine.simulation.price_path import predict_price
from scenario_engine.simulation.predictors import PEG_ASSETS, predict_peg_deviation, predict_yield
from scenario_engine.simulation.branch import build_branch
from scenario_engine.simulation.scoring import branch_ev, score_predictions, step_ev
from scenario_engine.simulation.outcome import classify_branch, classify_outcome
from scenario_engine.simulation.monte_carlo import summarize_ev_samples
from scenario_engine.simulation.engine import SimulationEngine, select_best_branch

__all__ = [
    "PriceHistory",
    "estimate_volatility",
    "StandardNormalSampler",
    "predict_price",
    "PEG_ASSETS",
    "predict_peg_deviation",
    "predict_yield",
    "build_branch",
    "branch_ev",
    "score_predictions",
    "step_ev",
    "classify_branch",
    "classify_outcome",
    "summarize_ev_samples",
    "SimulationEngine",
    "select_best_branch",
]
