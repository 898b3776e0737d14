"""
nftmarket Query - read-only views of marketplace state.
"""

from nftmarket.query.surface import QuerySurface

__all__ = ["QuerySurface"]
