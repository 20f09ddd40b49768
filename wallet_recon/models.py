"""Data models for portfolio reconciliation.

Absent or null fields count as zero. Any other unexpected shape raises
``ValueError``.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


def _as_float(value: Any) -> float:
    """Numeric wire field to float; absent or null counts as zero."""
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    return float(value)


def _mapping(value: Any, what: str) -> Mapping:
    """A JSON object; absent or null reads as an empty one."""
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _entries(value: Any, what: str) -> list:
    """A JSON array; absent or null reads as an empty one."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{what} must be an array, got {type(value).__name__}")
    return value


def _total(data: Mapping[str, Any], key: str) -> float:
    """Read ``data[key]["total"]``, tolerating a missing or null block."""
    return _as_float(_mapping(data.get(key), key).get("total"))


@dataclass(frozen=True)
class TokenHolding:
    """One token position within a wallet."""
    total_ui_amount: float = 0.0   # Human-readable amount (after decimals)
    unit_price_usd: float = 0.0
    mint: str | None = None
    symbol: str | None = None
    name: str | None = None

    @property
    def value_usd(self) -> float:
        return self.total_ui_amount * self.unit_price_usd

    @classmethod
    def from_api(cls, data: Mapping[str, Any] | None) -> "TokenHolding":
        """Create TokenHolding from a ``tokens[]`` entry of the portfolio endpoint."""
        data = _mapping(data, "token entry")
        price = _mapping(data.get("price"), "price")
        return cls(
            total_ui_amount=_as_float(data.get("totalUiAmount")),
            unit_price_usd=_as_float(price.get("usdPrice")),
            mint=data.get("mint"),
            symbol=data.get("symbol"),
            name=data.get("name"),
        )


@dataclass(frozen=True)
class WalletPortfolio:
    """Holdings snapshot for one wallet address on one network."""
    address: str
    network: str
    tokens: tuple[TokenHolding, ...] = ()
    total_value: float = 0.0    # tokens + other asset classes
    tokens_value: float = 0.0
    stocks_value: float = 0.0   # tokenized equities

    @classmethod
    def from_api(cls, address: str, network: str, data: dict[str, Any]) -> "WalletPortfolio":
        """Create WalletPortfolio from a ``/v3/portfolio/tokens`` response body."""
        return cls(
            address=address,
            network=network,
            tokens=tuple(TokenHolding.from_api(t) for t in _entries(data.get("tokens"), "tokens")),
            total_value=_total(data, "value"),
            tokens_value=_total(data, "tokensValue"),
            stocks_value=_total(data, "stocksValue"),
        )


@dataclass(frozen=True)
class AggregateBalances:
    """Result of querying the balances endpoint for several wallets at once."""
    net_worth: float = 0.0
    per_wallet_values: tuple[float, ...] = ()
    currency: str = "usd"
    network: str = "mainnet"

    @property
    def wallet_count(self) -> int:
        return len(self.per_wallet_values)

    @classmethod
    def from_api(
        cls,
        data: dict[str, Any],
        currency: str = "usd",
        network: str = "mainnet",
    ) -> "AggregateBalances":
        """Create AggregateBalances from a ``/v2/portfolio/balances`` response body."""
        return cls(
            net_worth=_as_float(data.get("netWorth")),
            per_wallet_values=tuple(
                _as_float(_mapping(entry, "data entry").get("value"))
                for entry in _entries(data.get("data"), "data")
            ),
            currency=currency,
            network=network,
        )
