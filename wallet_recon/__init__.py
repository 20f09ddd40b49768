"""Wallet Recon - consistency checks for wallet portfolio API totals."""

from .api import APIError, PortfolioClient, RequestRejected, TransportError
from .models import AggregateBalances, TokenHolding, WalletPortfolio
from .validator import (
    ReconciliationFailed,
    ReconciliationReport,
    ReconciliationValidator,
    ToleranceExceeded,
)

__all__ = [
    "APIError",
    "AggregateBalances",
    "PortfolioClient",
    "ReconciliationFailed",
    "ReconciliationReport",
    "ReconciliationValidator",
    "RequestRejected",
    "TokenHolding",
    "ToleranceExceeded",
    "TransportError",
    "WalletPortfolio",
]

__version__ = "0.1.0"
