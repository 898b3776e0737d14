"""
nftmarket Runtime - the marketplace facade, message dispatch and configuration.

Every mutating entry point runs as one store transaction.
"""

from nftmarket.runtime.config import MarketConfig
from nftmarket.runtime.market import Marketplace

__all__ = [
    "MarketConfig",
    "Marketplace",
]
