"""
nftmarket Registry - client interface to the external token registry.
"""

from nftmarket.registry.client import InMemoryRegistry, RegistryClient

__all__ = ["InMemoryRegistry", "RegistryClient"]
