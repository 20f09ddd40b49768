"""Tests for the run logger."""

import io
import logging

import pytest
from rich.console import Console

from wallet_recon.config import Config
from wallet_recon.logger import RunLogger


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def run_logger(tmp_path, console):
    run_logger = RunLogger(name="wallet_recon.test_run", logs_dir=tmp_path, console=console)
    yield run_logger
    run_logger.close()


def read(path):
    return path.read_text(encoding="utf-8")


def test_writes_timestamped_log_file(run_logger, tmp_path):
    run_logger.test_start("Portfolio - mainnet")
    run_logger.summary("Portfolio Summary", {"Total Value": "$12.50"})
    run_logger.test_end("Portfolio - mainnet", passed=True)

    assert run_logger.log_file.parent == tmp_path
    assert run_logger.log_file.name.startswith("test-")
    content = read(run_logger.log_file)
    assert "INFO: TEST STARTED: Portfolio - mainnet" in content
    assert "  - Total Value: $12.50" in content
    assert "TEST PASSED: Portfolio - mainnet" in content


def test_error_file_created_only_on_failure(run_logger):
    run_logger.info("all good")
    assert not run_logger.error_log_file.exists()
    assert not run_logger.has_errors

    run_logger.test_end("Balances", passed=False)

    assert run_logger.has_errors
    assert "ERROR: TEST FAILED: Balances" in read(run_logger.error_log_file)


def test_error_with_exception_is_logged(run_logger):
    run_logger.error("request failed", ValueError("boom"))
    content = read(run_logger.error_log_file)
    assert "request failed: boom" in content
    assert "ValueError" in content


def test_debug_data_goes_to_file_only(run_logger, console):
    run_logger.debug("payload", {"netWorth": 1.5})
    assert '"netWorth": 1.5' in read(run_logger.log_file)
    assert "netWorth" not in console.file.getvalue()


def test_console_shows_info(run_logger, console):
    run_logger.verify("mainnet network validated")
    assert "VERIFY: mainnet network validated" in console.file.getvalue()


def test_api_response_levels(run_logger):
    run_logger.api_request("GET", "https://wallet-api.test/v3/portfolio/tokens/x")
    run_logger.api_response(200)
    run_logger.api_response(404, "not found")
    content = read(run_logger.log_file)
    assert "INFO: API GET: https://wallet-api.test/v3/portfolio/tokens/x" in content
    assert "INFO: Response: 200 OK" in content
    assert "WARNING: Response: 404 not found" in content


def test_captures_child_module_records(tmp_path, console):
    run_logger = RunLogger(name="wallet_recon", logs_dir=tmp_path, console=console)
    try:
        logging.getLogger("wallet_recon.validator").info("Net worth: $1.00 vs $1.00")
    finally:
        run_logger.close()
    assert "Net worth: $1.00 vs $1.00" in read(run_logger.log_file)


def test_close_detaches_handlers(tmp_path, console):
    run_logger = RunLogger(name="wallet_recon.closing", logs_dir=tmp_path, console=console)
    target = logging.getLogger("wallet_recon.closing")
    assert len(target.handlers) == 2
    run_logger.close()
    assert target.handlers == []


def test_console_only_without_logs_dir(console):
    run_logger = RunLogger(name="wallet_recon.console_only", console=console)
    try:
        run_logger.error("no file")
        assert run_logger.log_file is None
        assert not run_logger.has_errors
    finally:
        run_logger.close()


def test_from_config(tmp_path, console):
    config = Config(base_url="https://x.test", logs_dir=tmp_path / "logs", log_level="WARNING")
    run_logger = RunLogger.from_config(config, console=console)
    try:
        run_logger.info("hidden")
        run_logger.warn("shown")
        output = console.file.getvalue()
        assert "shown" in output
        assert "hidden" not in output
        assert run_logger.log_file.parent == tmp_path / "logs"
    finally:
        run_logger.close()
