"""
nftmarket Settlement Engine

Executes purchases:
- validates the attached funds against the listing
- splits the price between taker, royalty recipient and seller
- emits value transfers and the token transfer as one response

Invariants:
- taker + royalty + owner == price, exactly
- overpayment is rejected, never refunded
- the sale disappears only together with its transfers
"""

from nftmarket.settlement.engine import PaymentSplit, SettlementEngine, split_payment

__all__ = ["PaymentSplit", "SettlementEngine", "split_payment"]
