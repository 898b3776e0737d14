"""
nftmarket Policy - capability checks gating every mutation.
"""

from nftmarket.policy.guard import AuthorizationGuard

__all__ = ["AuthorizationGuard"]
