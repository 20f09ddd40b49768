"""Markers and parameters shared by the live scenarios."""

import os

import pytest

from wallet_recon.config import Config

LIVE = os.getenv("WALLET_RECON_LIVE") == "1"

live = [
    pytest.mark.live,
    pytest.mark.skipif(not LIVE, reason="set WALLET_RECON_LIVE=1 to run against the real API"),
]


def configured_addresses() -> list[str]:
    """Wallets to parametrize over, read at collection time."""
    try:
        return Config.from_env().wallet_addresses
    except ValueError:
        return []
