import pytest

from scenario_engine.services import simulation_service


@pytest.fixture(autouse=True)
def _reset_default_engine():
    # The facade keeps a process-wide engine; isolate it between tests
    simulation_service.reset_engine()
    yield
    simulation_service.reset_engine()
