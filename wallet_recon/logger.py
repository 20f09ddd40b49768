"""Run logger for reconciliation scenarios.

Console output goes through rich; a timestamped log file captures every
record at DEBUG. An error log file is only created once something fails.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from .config import Config

RULE = "=" * 70

_FILE_FORMAT = logging.Formatter(
    "[%(asctime)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


class RunLogger:
    """
    Scenario-level logging on top of the ``wallet_recon`` logger hierarchy.

    Records emitted by the client and validator modules propagate into the
    handlers attached here, so one RunLogger captures a whole run.
    """

    def __init__(
        self,
        name: str = "wallet_recon",
        logs_dir: Path | str | None = None,
        level: str = "INFO",
        console: Console | None = None,
    ):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._handlers: list[logging.Handler] = []
        self._error_handler: logging.FileHandler | None = None

        timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
        self.logs_dir = Path(logs_dir) if logs_dir is not None else None
        self.log_file: Path | None = None
        self.error_log_file: Path | None = None

        console_handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            log_time_format="%H:%M:%S",
        )
        console_handler.setLevel(level.upper())
        self._attach(console_handler)

        if self.logs_dir is not None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.logs_dir / f"test-{timestamp}.log"
            self.error_log_file = self.logs_dir / f"error-{timestamp}.log"
            file_handler = logging.FileHandler(self.log_file, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(_FILE_FORMAT)
            self._attach(file_handler)

    @classmethod
    def from_config(cls, config: Config, console: Console | None = None) -> "RunLogger":
        return cls(logs_dir=config.logs_dir, level=config.log_level, console=console)

    def _attach(self, handler: logging.Handler) -> None:
        self._logger.addHandler(handler)
        self._handlers.append(handler)

    def _ensure_error_handler(self) -> None:
        """Add the error log file on first failure."""
        if self._error_handler is not None or self.error_log_file is None:
            return
        self._error_handler = logging.FileHandler(self.error_log_file, encoding="utf-8")
        self._error_handler.setLevel(logging.ERROR)
        self._error_handler.setFormatter(_FILE_FORMAT)
        self._attach(self._error_handler)

    @property
    def has_errors(self) -> bool:
        return self._error_handler is not None

    # -------------------------------------------------------------------------
    # Scenario structure
    # -------------------------------------------------------------------------

    def test_start(self, test_name: str) -> None:
        self._logger.info(RULE)
        self._logger.info("TEST STARTED: %s", test_name)
        self._logger.info(RULE)

    def test_end(self, test_name: str, passed: bool = True) -> None:
        self._logger.info(RULE)
        if passed:
            self._logger.info("TEST PASSED: %s", test_name)
        else:
            self._ensure_error_handler()
            self._logger.error("TEST FAILED: %s", test_name)
        self._logger.info(RULE)

    def step(self, message: str) -> None:
        self._logger.info("STEP: %s", message)

    def section(self, message: str) -> None:
        self._logger.info("")
        self._logger.info("> %s", message)

    def action(self, message: str) -> None:
        self._logger.debug("ACTION: %s", message)

    def verify(self, message: str) -> None:
        self._logger.info("VERIFY: %s", message)

    # -------------------------------------------------------------------------
    # Plain levels
    # -------------------------------------------------------------------------

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warn(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self._ensure_error_handler()
        if exc is not None:
            self._logger.error("%s: %s", message, exc, exc_info=exc)
        else:
            self._logger.error(message)

    def debug(self, message: str, data: Any = None) -> None:
        if data is not None:
            self._logger.debug("%s\nData: %s", message, json.dumps(data, indent=2, default=str))
        else:
            self._logger.debug(message)

    # -------------------------------------------------------------------------
    # API traffic and summaries
    # -------------------------------------------------------------------------

    def api_request(self, method: str, url: str) -> None:
        self._logger.info("API %s: %s", method, url)

    def api_response(self, status: int, message: str = "") -> None:
        if 200 <= status < 300:
            self._logger.info("Response: %s OK %s", status, message)
        else:
            self._logger.warning("Response: %s %s", status, message)

    def summary(self, title: str, data: dict[str, Any]) -> None:
        self._logger.info("")
        self._logger.info("%s", title)
        for key, value in data.items():
            self._logger.info("  - %s: %s", key, value)

    def close(self) -> None:
        """Detach and close every handler this logger added."""
        for handler in self._handlers:
            self._logger.removeHandler(handler)
            handler.close()
        self._handlers.clear()
