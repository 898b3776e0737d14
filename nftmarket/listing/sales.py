"""
Sale listings and the platform taker fee.

Owner path:
    create_or_update_sale   owner + approval + accepted currency, then upsert
    remove_sale             owner only; removing a missing sale is a no-op

Admin path:
    admin_remove_sale       fails with SaleDoesNotExist if nothing is listed
    update_taker_fee        overwrites the fee percentage

No optimistic-concurrency check: a new listing replaces the old one.
"""

from nftmarket.core.exceptions import DenomNotSupported, InvalidPrice, SaleDoesNotExist
from nftmarket.core.models import (
    Coin,
    Event,
    Response,
    Sale,
    check_fee_total,
    validate_address,
    validate_percentage,
    validate_token_id,
)
from nftmarket.ledger.store import LedgerStore
from nftmarket.policy.guard import AuthorizationGuard


class SaleManager:

    def __init__(self, store: LedgerStore, guard: AuthorizationGuard):
        self.store = store
        self.guard = guard

    def create_or_update_sale(
        self,
        caller: str,
        collection: str,
        token_id: str,
        price: Coin,
    ) -> Response:
        """
        List a token, replacing any existing listing for it.

        Checks in order: Unauthorized, NotApproved, DenomNotSupported,
        InvalidPrice. The first failing check raises and nothing is written.
        """
        collection = validate_address(collection)
        token_id = validate_token_id(token_id)

        self.guard.assert_token_owner(collection, token_id, caller)
        self.guard.assert_marketplace_approved(collection, token_id)

        native_denom = self.store.load_native_denom()
        if price.denom != native_denom:
            raise DenomNotSupported(
                "price denomination is not accepted",
                {"denom": price.denom, "accepted": native_denom},
            )
        if price.amount == 0:
            raise InvalidPrice("price must be greater than zero")

        self.store.save_sale(collection, token_id, Sale(owner_address=caller, price=price))

        return Response().add_event(
            Event("update_sale")
            .add_attribute("contract_address", collection)
            .add_attribute("token_id", token_id)
            .add_attribute("price", price.amount)
        )

    create_sale = create_or_update_sale
    update_sale = create_or_update_sale

    def remove_sale(self, caller: str, collection: str, token_id: str) -> Response:
        collection = validate_address(collection)
        token_id = validate_token_id(token_id)

        self.guard.assert_token_owner(collection, token_id, caller)

        self.store.remove_sale(collection, token_id)
        return Response().add_event(self._removed(collection, token_id))

    def admin_remove_sale(self, caller: str, collection: str, token_id: str) -> Response:
        self.guard.assert_admin(caller)
        collection = validate_address(collection)
        token_id = validate_token_id(token_id)

        if not self.store.has_sale(collection, token_id):
            raise SaleDoesNotExist(
                "sale does not exist", {"collection": collection, "token_id": token_id}
            )

        self.store.remove_sale(collection, token_id)
        return Response().add_event(self._removed(collection, token_id))

    def update_taker_fee(self, caller: str, taker_fee: int) -> Response:
        self.guard.assert_admin(caller)
        taker_fee = validate_percentage(taker_fee, "taker_fee")

        for _, collection in self.store.iter_collections():
            check_fee_total(taker_fee, collection.royalty_percentage)

        self.store.save_taker_fee(taker_fee)
        return Response().add_event(
            Event("update_taker_fee").add_attribute("taker_fee", taker_fee)
        )

    @staticmethod
    def _removed(collection: str, token_id: str) -> Event:
        return (
            Event("remove_sale")
            .add_attribute("contract_address", collection)
            .add_attribute("token_id", token_id)
        )
