"""Transfermarkt API access."""

from tmsync.api.client import RateLimiter, TransfermarktClient

__all__ = ["RateLimiter", "TransfermarktClient"]
