"""Fixtures for scenarios that run against the real wallet API."""

import pytest

from wallet_recon.api import PortfolioClient
from wallet_recon.config import Config
from wallet_recon.logger import RunLogger
from wallet_recon.validator import ReconciliationValidator


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


@pytest.fixture(scope="session")
def live_config():
    return Config.from_env()


@pytest.fixture(scope="session")
def run_logger(live_config):
    run_logger = RunLogger.from_config(live_config)
    yield run_logger
    run_logger.close()


@pytest.fixture(autouse=True)
def scenario_log(request, run_logger):
    """Bracket each scenario with start/end records."""
    name = request.node.name
    run_logger.test_start(name)
    yield run_logger
    report = getattr(request.node, "rep_call", None)
    run_logger.test_end(name, passed=report is not None and report.passed)


@pytest.fixture
async def client(live_config):
    async with PortfolioClient.from_config(live_config) as client:
        yield client


@pytest.fixture
def validator(live_config):
    return ReconciliationValidator.from_config(live_config)
