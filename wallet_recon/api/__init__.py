"""API clients for the wallet backend."""

from .base import APIError, RequestRejected, TransportError
from .portfolio import PortfolioClient

__all__ = ["APIError", "PortfolioClient", "RequestRejected", "TransportError"]
