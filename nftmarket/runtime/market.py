"""
Marketplace facade.

Wires store, registry, guard, managers, settlement engine and journal,
and runs every mutating entry point as one unit:

    with store.transaction():
        response = <entry point>
        journal.record(response)

If anything raises, including the journal write, the store is restored
and the exception propagates. Nothing is partially applied.
"""

from typing import Optional, Sequence

from nftmarket.core.exceptions import LedgerError
from nftmarket.core.models import (
    Coin,
    Collection,
    Response,
    Sale,
    validate_address,
    validate_denom,
    validate_optional_address,
    validate_percentage,
)
from nftmarket.core.ownership import Ownership, OwnershipAction
from nftmarket.ledger.journal import EventJournal
from nftmarket.ledger.store import LedgerStore
from nftmarket.listing.collections import CollectionManager
from nftmarket.listing.sales import SaleManager
from nftmarket.policy.guard import AuthorizationGuard
from nftmarket.query.surface import QuerySurface
from nftmarket.registry.client import RegistryClient
from nftmarket.settlement.engine import SettlementEngine


class Marketplace:

    def __init__(
        self,
        registry: RegistryClient,
        store: Optional[LedgerStore] = None,
        journal: Optional[EventJournal] = None,
    ):
        self.registry = registry
        self.store = store if store is not None else LedgerStore()
        self.journal = journal

        self.guard = AuthorizationGuard(self.store, registry)
        self.collections = CollectionManager(self.store, self.guard)
        self.sales = SaleManager(self.store, self.guard)
        self.settlement = SettlementEngine(self.store, registry)
        self.queries = QuerySurface(self.store)

    # ── Setup ─────────────────────────────────────────────────

    def instantiate(
        self,
        sender: str,
        taker_fee: int,
        native_denom: str,
        marketplace_address: str,
        taker_address: Optional[str] = None,
    ) -> Response:
        """
        Initialize state. sender becomes the admin; the taker address
        defaults to the admin and cannot be changed afterwards.
        """
        def run() -> Response:
            if self.store.is_instantiated():
                raise LedgerError("Marketplace is already instantiated")
            owner = Ownership.initialize(sender)
            self.store.save_ownership(owner)
            self.store.save_taker_fee(validate_percentage(taker_fee, "taker_fee"))
            self.store.save_native_denom(validate_denom(native_denom))
            self.store.save_marketplace_address(validate_address(marketplace_address))
            self.store.save_taker_address(
                validate_optional_address(taker_address) or owner.owner
            )
            return (
                Response()
                .add_attribute("method", "instantiate")
                .add_attribute("owner", sender)
            )

        return self._run("instantiate", sender, run)

    # ── Admin ─────────────────────────────────────────────────

    def register_collection(
        self,
        sender: str,
        collection: str,
        royalty_percentage: Optional[int] = None,
        royalty_payment_address: Optional[str] = None,
    ) -> Response:
        return self._run(
            "register_collection", sender, self.collections.register_collection,
            sender, collection, royalty_percentage, royalty_payment_address,
        )

    def update_collection(
        self,
        sender: str,
        collection: str,
        royalty_percentage: Optional[int] = None,
        royalty_payment_address: Optional[str] = None,
        is_paused: bool = False,
    ) -> Response:
        return self._run(
            "update_collection", sender, self.collections.update_collection,
            sender, collection, royalty_percentage, royalty_payment_address, is_paused,
        )

    def admin_remove_sale(self, sender: str, collection: str, token_id: str) -> Response:
        return self._run(
            "admin_remove_sale", sender, self.sales.admin_remove_sale,
            sender, collection, token_id,
        )

    def update_taker_fee(self, sender: str, taker_fee: int) -> Response:
        return self._run(
            "update_taker_fee", sender, self.sales.update_taker_fee, sender, taker_fee,
        )

    def update_ownership(
        self,
        sender: str,
        action: OwnershipAction,
        new_owner: Optional[str] = None,
    ) -> Response:
        def run() -> Response:
            ownership = self.store.load_ownership().apply(sender, action, new_owner)
            self.store.save_ownership(ownership)
            return (
                Response()
                .add_attribute("action", "update_ownership")
                .add_attribute("owner", ownership.owner)
                .add_attribute("pending_owner", ownership.pending_owner)
            )

        return self._run("update_ownership", sender, run)

    # ── Sellers ───────────────────────────────────────────────

    def create_or_update_sale(
        self, sender: str, collection: str, token_id: str, price: Coin
    ) -> Response:
        return self._run(
            "update_sale", sender, self.sales.create_or_update_sale,
            sender, collection, token_id, price,
        )

    create_sale = create_or_update_sale
    update_sale = create_or_update_sale

    def remove_sale(self, sender: str, collection: str, token_id: str) -> Response:
        return self._run(
            "remove_sale", sender, self.sales.remove_sale, sender, collection, token_id,
        )

    # ── Buyers ────────────────────────────────────────────────

    def buy(
        self,
        sender: str,
        collection: str,
        token_id: str,
        funds: Sequence[Coin] = (),
    ) -> Response:
        return self._run(
            "buy", sender, self.settlement.buy, sender, collection, token_id, list(funds),
        )

    # ── Queries ───────────────────────────────────────────────

    def get_sale(self, collection: str, token_id: str) -> Sale:
        return self.queries.get_sale(collection, token_id)

    def get_collection(self, collection: str) -> Collection:
        return self.queries.get_collection(collection)

    def get_taker_fee(self) -> int:
        return self.queries.get_taker_fee()

    # ── Internal ──────────────────────────────────────────────

    def _run(self, operation: str, sender: str, fn, *args) -> Response:
        with self.store.transaction():
            response = fn(*args)
            if self.journal is not None:
                self.journal.record(operation, sender, response)
        return response
