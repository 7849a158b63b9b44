"""Scenario simulation engine: probabilistic market branches ranked by risk-adjusted EV."""
