"""Wallet API client for portfolio and balances lookups."""

import asyncio
import logging
import uuid
from typing import Any, Sequence
from urllib.parse import quote

import httpx

from ..config import Config
from ..models import AggregateBalances, WalletPortfolio
from .base import APIError, BaseAPIClient, RequestRejected

logger = logging.getLogger(__name__)


class PortfolioClient(BaseAPIClient):
    """
    Service object for the wallet portfolio API.

    Translates wallet addresses into ``WalletPortfolio`` and
    ``AggregateBalances`` values. Performs no business validation;
    that is the job of ``ReconciliationValidator``.
    """

    BASE_URL = "https://wallet-api.solflare.com"
    PORTFOLIO_PATH = "/v3/portfolio/tokens/{address}"
    BALANCES_PATH = "/v2/portfolio/balances"

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        pubkey_prefix: str = "1",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)
        self.pubkey_prefix = pubkey_prefix
        # Not a real credential; the API only requires a bearer header
        self.auth_token = str(uuid.uuid4())

    @classmethod
    def from_config(
        cls,
        config: Config,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "PortfolioClient":
        return cls(
            base_url=config.base_url,
            timeout=config.request_timeout,
            pubkey_prefix=config.pubkey_prefix,
            transport=transport,
        )

    def _get_default_headers(self) -> dict[str, str]:
        headers = super()._get_default_headers()
        headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    async def fetch_portfolio(
        self,
        address: str,
        network: str | None = "mainnet",
    ) -> WalletPortfolio:
        """
        Get the token holdings snapshot for one wallet.

        Args:
            address: Wallet address
            network: Network selector, passed through to the API as-is

        Returns:
            Parsed WalletPortfolio

        Raises:
            RequestRejected: empty address or non-success status
            TransportError: network-level failure
        """
        if not address:
            raise RequestRejected("Wallet address is required")

        params = {"network": network} if network is not None else None
        # The address is always exactly one path segment
        path = self.PORTFOLIO_PATH.format(address=quote(address, safe=""))
        data = await self.get(path, params=params)
        if not isinstance(data, dict):
            raise APIError(f"Unexpected portfolio payload: {type(data).__name__}")

        try:
            portfolio = WalletPortfolio.from_api(address, network or "", data)
        except ValueError as e:
            raise APIError(f"Malformed portfolio payload: {e}") from e
        logger.debug(
            "Portfolio %s on %s: %d tokens, total $%.2f",
            address, network, len(portfolio.tokens), portfolio.total_value,
        )
        return portfolio

    def build_balances_payload(
        self,
        addresses: Sequence[str],
        currency: str = "usd",
        network: str = "mainnet",
        general: bool = True,
    ) -> dict[str, Any]:
        """Request body for the balances endpoint, network-tag prefix applied."""
        return {
            "pubkeys": [f"{self.pubkey_prefix}{addr}" for addr in addresses],
            "currency": currency,
            "general": general,
            "network": network,
        }

    async def make_balances_request(self, body: dict[str, Any]) -> Any:
        """
        Post a caller-built body to the balances endpoint.

        Used to check how the API handles malformed requests; returns the
        raw JSON without parsing it into a model.
        """
        return await self.post(self.BALANCES_PATH, json_data=body)

    async def fetch_aggregate_balances(
        self,
        addresses: Sequence[str],
        currency: str = "usd",
        network: str = "mainnet",
    ) -> AggregateBalances:
        """
        Get the combined balances for several wallets.

        Args:
            addresses: Wallet addresses (without the network-tag prefix)
            currency: Valuation currency
            network: Network selector

        Returns:
            Parsed AggregateBalances
        """
        if not addresses:
            raise RequestRejected("At least one wallet address is required")

        body = self.build_balances_payload(addresses, currency=currency, network=network)
        data = await self.make_balances_request(body)
        if not isinstance(data, dict):
            raise APIError(f"Unexpected balances payload: {type(data).__name__}")

        try:
            balances = AggregateBalances.from_api(data, currency=currency, network=network)
        except ValueError as e:
            raise APIError(f"Malformed balances payload: {e}") from e
        logger.debug(
            "Balances for %d wallet(s): net worth $%.2f",
            len(addresses), balances.net_worth,
        )
        return balances

    async def fetch_multiple_portfolios(
        self,
        addresses: Sequence[str],
        network: str = "mainnet",
    ) -> list[WalletPortfolio]:
        """
        Fetch several portfolios concurrently.

        Results keep the input order. The first failure fails the whole call
        and cancels the requests still in flight.
        """
        tasks = [
            asyncio.ensure_future(self.fetch_portfolio(addr, network))
            for addr in addresses
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
