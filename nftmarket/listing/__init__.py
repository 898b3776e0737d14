"""
nftmarket Listing - validated CRUD over collections and sales.
"""

from nftmarket.listing.collections import CollectionManager
from nftmarket.listing.sales import SaleManager

__all__ = ["CollectionManager", "SaleManager"]
