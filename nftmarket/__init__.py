"""
nftmarket/__init__.py

nftmarket: settlement engine for NFT marketplace listings.

Token owners list items for sale in one accepted currency; a buyer
purchases a listing atomically and the price is split between the
platform taker, an optional collection royalty recipient and the seller.
"""

__version__ = "0.1.0"

from nftmarket.core.exceptions import MarketError
from nftmarket.core.models import (
    BankSend,
    Coin,
    Collection,
    Event,
    Response,
    Sale,
    TransferNft,
)
from nftmarket.core.ownership import Ownership, OwnershipAction
from nftmarket.registry.client import InMemoryRegistry, RegistryClient
from nftmarket.runtime.config import MarketConfig
from nftmarket.runtime.market import Marketplace

__all__ = [
    # Entry point
    "Marketplace",
    "MarketConfig",
    # Records and instructions
    "BankSend",
    "Coin",
    "Collection",
    "Event",
    "Response",
    "Sale",
    "TransferNft",
    "Ownership",
    "OwnershipAction",
    # Registry
    "InMemoryRegistry",
    "RegistryClient",
    # Errors
    "MarketError",
]
