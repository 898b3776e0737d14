"""
Settlement engine: executes a purchase.

buy() runs, in order:
    1. Load the sale                       → SaleNotFound
    2. Funds must be exactly the price     → InsufficientFunds (overpay too)
    3. Remove the sale
    4. Taker amount  = price * taker_fee / 100, floored
    5. Royalty amount = price * royalty / 100, floored; zero when the
       collection is unregistered or has no payment address
    6. Owner amount  = price - taker - royalty → FeeConfigurationError on underflow
    7. Pay the lister captured at listing time, not the current holder
    8. Transfer the token to the buyer

Zero amounts produce no BankSend. The caller runs buy() inside one store
transaction, so any failure after step 3 restores the sale.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from nftmarket.core.exceptions import (
    FeeConfigurationError,
    InsufficientFunds,
    SaleNotFound,
)
from nftmarket.core.models import (
    MAX_PERCENTAGE,
    Coin,
    Event,
    Response,
    Sale,
    bank_send,
    validate_address,
    validate_token_id,
)
from nftmarket.ledger.store import LedgerStore
from nftmarket.registry.client import RegistryClient


@dataclass(frozen=True)
class PaymentSplit:
    taker_amount:   int
    royalty_amount: int
    owner_amount:   int

    @property
    def total(self) -> int:
        return self.taker_amount + self.royalty_amount + self.owner_amount


def percentage_of(amount: int, percentage: int) -> int:
    return amount * percentage // MAX_PERCENTAGE


def split_payment(
    amount: int,
    taker_fee: int,
    royalty_percentage: Optional[int] = None,
) -> PaymentSplit:
    """
    Split amount into taker, royalty and owner shares.

    Shares always sum to amount. Raises FeeConfigurationError if the
    taker and royalty shares together exceed it.
    """
    taker_amount = percentage_of(amount, taker_fee)
    royalty_amount = percentage_of(amount, royalty_percentage or 0)
    owner_amount = amount - taker_amount - royalty_amount
    if owner_amount < 0:
        raise FeeConfigurationError(
            "taker fee and royalty exceed the sale price",
            {
                "amount": amount,
                "taker_fee": taker_fee,
                "royalty_percentage": royalty_percentage,
            },
        )
    return PaymentSplit(taker_amount, royalty_amount, owner_amount)


class SettlementEngine:

    def __init__(self, store: LedgerStore, registry: RegistryClient):
        self.store = store
        self.registry = registry

    def buy(
        self,
        caller: str,
        collection: str,
        token_id: str,
        funds: Sequence[Coin],
    ) -> Response:
        collection = validate_address(collection)
        token_id = validate_token_id(token_id)

        sale = self.store.load_sale(collection, token_id)
        if sale is None:
            raise SaleNotFound(
                "sale not found", {"collection": collection, "token_id": token_id}
            )

        self._check_funds(sale, funds)

        self.store.remove_sale(collection, token_id)

        price = sale.price
        split = split_payment(
            price.amount,
            self.store.load_taker_fee(),
            self._royalty_percentage(collection),
        )

        response = Response()

        if split.taker_amount > 0:
            response.add_message(
                bank_send(self.store.load_taker_address(), split.taker_amount, price.denom)
            )

        if split.royalty_amount > 0:
            royalty_address = self.store.load_collection(collection).royalty_payment_address
            response.add_message(bank_send(royalty_address, split.royalty_amount, price.denom))

        if split.owner_amount > 0:
            response.add_message(
                bank_send(sale.owner_address, split.owner_amount, price.denom)
            )

        response.add_message(self.registry.transfer(collection, token_id, caller))

        return response.add_event(
            Event("buy")
            .add_attribute("contract_address", collection)
            .add_attribute("token_id", token_id)
            .add_attribute("buyer", caller)
            .add_attribute("seller", sale.owner_address)
            .add_attribute("price", price.amount)
            .add_attribute("taker_amount", split.taker_amount)
            .add_attribute("royalty_amount", split.royalty_amount)
            .add_attribute("owner_amount", split.owner_amount)
        )

    @staticmethod
    def _check_funds(sale: Sale, funds: Sequence[Coin]) -> None:
        if len(funds) != 1 or funds[0] != sale.price:
            raise InsufficientFunds(
                "funds must be exactly the sale price",
                {
                    "expected": str(sale.price),
                    "received": ",".join(str(c) for c in funds) or "none",
                },
            )

    def _royalty_percentage(self, collection: str) -> Optional[int]:
        record = self.store.load_collection(collection)
        if record is None or not record.pays_royalty():
            return None
        return record.royalty_percentage
