"""
Collection registration and configuration. Admin only.

Registration fails on an existing record; update fails on a missing one.
Both decide on the record's existence before looking at the royalty
payload. Update is a full replace of the record, not a merge.
"""

from typing import Optional

from nftmarket.core.exceptions import (
    CollectionAlreadyRegistered,
    CollectionNotFound,
    ValidationError,
)
from nftmarket.core.models import (
    Collection,
    Event,
    Response,
    check_fee_total,
    validate_address,
    validate_optional_address,
    validate_optional_percentage,
)
from nftmarket.ledger.store import LedgerStore
from nftmarket.policy.guard import AuthorizationGuard


class CollectionManager:

    def __init__(self, store: LedgerStore, guard: AuthorizationGuard):
        self.store = store
        self.guard = guard

    def register_collection(
        self,
        caller: str,
        collection: str,
        royalty_percentage: Optional[int] = None,
        royalty_payment_address: Optional[str] = None,
    ) -> Response:
        self.guard.assert_admin(caller)
        collection = validate_address(collection)

        if self.store.has_collection(collection):
            raise CollectionAlreadyRegistered(
                "collection is already registered", {"collection": collection}
            )

        record = self._build(royalty_percentage, royalty_payment_address, False)
        self.store.save_collection(collection, record)

        event = self._event("register_collection", collection, record)
        return Response().add_event(event)

    def update_collection(
        self,
        caller: str,
        collection: str,
        royalty_percentage: Optional[int] = None,
        royalty_payment_address: Optional[str] = None,
        is_paused: bool = False,
    ) -> Response:
        self.guard.assert_admin(caller)
        collection = validate_address(collection)

        if not self.store.has_collection(collection):
            raise CollectionNotFound("collection is not registered", {"collection": collection})

        if not isinstance(is_paused, bool):
            raise ValidationError(
                f"is_paused must be a boolean, got {type(is_paused).__name__}"
            )
        record = self._build(royalty_percentage, royalty_payment_address, is_paused)
        self.store.save_collection(collection, record)

        event = self._event("update_collection", collection, record)
        event.add_attribute("is_paused", record.is_paused)
        return Response().add_event(event)

    def _build(
        self,
        royalty_percentage: Optional[int],
        royalty_payment_address: Optional[str],
        is_paused: bool,
    ) -> Collection:
        royalty_percentage = validate_optional_percentage(
            royalty_percentage, "royalty_percentage"
        )
        royalty_payment_address = validate_optional_address(royalty_payment_address)
        check_fee_total(self.store.load_taker_fee(), royalty_percentage)
        return Collection(
            royalty_percentage=royalty_percentage,
            royalty_payment_address=royalty_payment_address,
            is_paused=is_paused,
        )

    @staticmethod
    def _event(kind: str, collection: str, record: Collection) -> Event:
        return (
            Event(kind)
            .add_attribute("contract_address", collection)
            .add_attribute("royalty_percentage", record.royalty_percentage)
            .add_attribute("royalty_payment_address", record.royalty_payment_address)
        )
