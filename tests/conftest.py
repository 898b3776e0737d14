"""
tests/conftest.py

Shared marketplace fixtures.

Default deployment:
    admin     admin, taker fee 5%, currency 'u'
    market    marketplace address (approved operator on nfts/1)
    taker     taker fee recipient
    nfts/1    owned by seller
"""

import pytest

from nftmarket import InMemoryRegistry, Marketplace
from nftmarket.core.exceptions import LedgerError
from nftmarket.core.models import Coin


COLLECTION = "nfts"
TOKEN      = "1"
DENOM      = "u"


def coin(amount: int) -> Coin:
    return Coin(denom=DENOM, amount=amount)


class FailingJournal:
    """Journal stand-in whose writes always fail."""

    def record(self, operation, sender, response):
        raise LedgerError("Journal write failed: disk full")


@pytest.fixture
def registry():
    """nfts/1 owned by seller, marketplace approved."""
    reg = InMemoryRegistry()
    reg.mint(COLLECTION, TOKEN, "seller")
    reg.approve(COLLECTION, TOKEN, "market")
    return reg


@pytest.fixture
def market(registry):
    """An instantiated marketplace over the default registry."""
    m = Marketplace(registry)
    m.instantiate(
        sender=              "admin",
        taker_fee=           5,
        native_denom=        DENOM,
        marketplace_address= "market",
        taker_address=       "taker",
    )
    return m


@pytest.fixture
def listed(market):
    """Default marketplace with nfts/1 listed by seller at 1000u."""
    market.create_sale("seller", COLLECTION, TOKEN, coin(1000))
    return market
