"""Configuration management for the reconciliation suite."""

import json
import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env file from project root
_project_root = Path(__file__).parent.parent
_env_path = _project_root / ".env"
_config_path = _project_root / "config.json"

load_dotenv(_env_path)

# Environments exercised by the cross-network scenarios. The API is the
# authority on which ones it accepts; the client does not enforce this list.
KNOWN_NETWORKS = ("mainnet", "devnet", "testnet")

# Defaults (used when config.json is missing or incomplete)
_DEFAULTS = {
    "base_url": "https://wallet-api.solflare.com",
    "request_timeout": 30.0,
    "pubkey_prefix": "1",       # network tag the balances endpoint expects
    "value_usd": 0.01,          # absolute tolerance in USD
    "network": "mainnet",
    "currency": "usd",
    "wallet_addresses": [
        "96Y3j66AX16noUAAVriW8bmwTGzV1PVqBKCEArPd5fuU",
        "7eXxD3vQww9cgBgD3gb7iqTriAzAmCBXFBMpdDi71P3i",
    ],
    "log_level": "INFO",
    "logs_dir": "logs",
}


def _load_config_json(path: Path) -> dict:
    """Load config.json. Returns empty dict if missing."""
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not parse %s: %s -- using defaults", path, e)
        return {}


def _setting(env_var: str | None, user_cfg: dict, key: str):
    """Environment variable, then config.json, then the default."""
    if env_var:
        value = os.getenv(env_var)
        if value not in (None, ""):
            return value
    return user_cfg.get(key, _DEFAULTS[key])


def _parse_float(value, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    if number < 0:
        raise ValueError(f"{name} must be non-negative, got {number}")
    return number


def _parse_addresses(value) -> list[str]:
    if isinstance(value, str):
        value = value.split(",")
    return [a.strip() for a in value if a and a.strip()]


@dataclass
class Tolerances:
    """Comparison tolerances for reconciliation checks."""
    # Absolute tolerance in USD (not a percentage)
    value_usd: float = _DEFAULTS["value_usd"]


@dataclass
class Config:
    """Application configuration."""
    base_url: str
    tolerances: Tolerances = field(default_factory=Tolerances)

    request_timeout: float = _DEFAULTS["request_timeout"]
    pubkey_prefix: str = _DEFAULTS["pubkey_prefix"]
    network: str = _DEFAULTS["network"]
    currency: str = _DEFAULTS["currency"]
    wallet_addresses: list[str] = field(
        default_factory=lambda: list(_DEFAULTS["wallet_addresses"])
    )

    # Logging
    log_level: str = _DEFAULTS["log_level"]
    logs_dir: Path = Path(_DEFAULTS["logs_dir"])

    @classmethod
    def from_env(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from .env + config.json."""
        user_cfg = _load_config_json(config_path or _config_path)
        tol_cfg = user_cfg.get("tolerances", {})

        base_url = str(_setting("WALLET_API_BASE_URL", user_cfg, "base_url")).strip()
        if not base_url:
            raise ValueError("WALLET_API_BASE_URL must not be empty.")

        tolerance = os.getenv("WALLET_RECON_TOLERANCE") or tol_cfg.get(
            "value_usd", _DEFAULTS["value_usd"]
        )
        tolerances = Tolerances(
            value_usd=_parse_float(tolerance, "tolerance"),
        )

        timeout = _parse_float(
            _setting("WALLET_API_TIMEOUT", user_cfg, "request_timeout"),
            "request timeout",
        )
        if timeout == 0:
            raise ValueError("request timeout must be greater than zero")

        # An empty prefix is a legitimate setting, so only None falls back
        prefix = os.getenv("WALLET_API_PUBKEY_PREFIX")
        if prefix is None:
            prefix = user_cfg.get("pubkey_prefix", _DEFAULTS["pubkey_prefix"])

        return cls(
            base_url=base_url,
            tolerances=tolerances,
            request_timeout=timeout,
            pubkey_prefix=str(prefix),
            network=str(_setting("WALLET_RECON_NETWORK", user_cfg, "network")),
            currency=str(user_cfg.get("currency", _DEFAULTS["currency"])),
            wallet_addresses=_parse_addresses(
                _setting("WALLET_ADDRESSES", user_cfg, "wallet_addresses")
            ),
            log_level=str(_setting("LOG_LEVEL", user_cfg, "log_level")).upper(),
            logs_dir=Path(_setting("WALLET_RECON_LOGS_DIR", user_cfg, "logs_dir")),
        )

    @classmethod
    def load(cls) -> "Config":
        """Load configuration, with helpful error messages."""
        try:
            return cls.from_env()
        except ValueError as e:
            print(f"\n[ERROR] Configuration Error:\n{e}\n")
            print("Setup instructions:")
            print("1. Copy .env.example to .env")
            print("2. Set WALLET_API_BASE_URL if you are not testing the public API")
            print("3. Adjust tolerances / wallet_addresses in config.json if needed\n")
            raise
