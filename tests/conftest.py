"""Shared fixtures for the offline test suite."""

import httpx
import pytest

from wallet_recon.api import PortfolioClient
from wallet_recon.validator import ReconciliationValidator

from .payloads import BASE_URL


@pytest.fixture
def validator():
    return ReconciliationValidator(tolerance=0.01)


@pytest.fixture
async def make_client():
    """Factory for clients backed by an ``httpx.MockTransport`` handler."""
    clients = []

    def _make(handler, **kwargs):
        client = PortfolioClient(
            base_url=BASE_URL,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.close()
