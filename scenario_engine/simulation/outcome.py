"""Branch outcome labelling from final EV and average volatility."""
from __future__ import annotations

from scenario_engine.models.simulation import BranchOutcome, SimulationBranch

# Fixed model thresholds
SUCCESS_MIN_EV = 8.0
SUCCESS_MAX_VOLATILITY = 0.5
FAILURE_MAX_EV = -8.0
FAILURE_MIN_VOLATILITY = 0.7


def classify_outcome(final_ev: float, avg_volatility: float) -> BranchOutcome:
    if final_ev > SUCCESS_MIN_EV and avg_volatility < SUCCESS_MAX_VOLATILITY:
        return BranchOutcome.success
    if final_ev < FAILURE_MAX_EV or avg_volatility > FAILURE_MIN_VOLATILITY:
        return BranchOutcome.failure
    return BranchOutcome.pending


def classify_branch(branch: SimulationBranch) -> BranchOutcome:
    """Classify a scored branch; branches without predictions stay pending."""
    if not branch.predictions:
        return BranchOutcome.pending
    return classify_outcome(branch.final_ev, branch.average_volatility)
