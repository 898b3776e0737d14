"""
Read-only projections of the ledger store.
"""

from nftmarket.core.exceptions import CollectionNotFound, SaleNotFound
from nftmarket.core.models import Collection, Sale, validate_address, validate_token_id
from nftmarket.core.ownership import Ownership
from nftmarket.ledger.store import LedgerStore


class QuerySurface:

    def __init__(self, store: LedgerStore):
        self.store = store

    def get_sale(self, collection: str, token_id: str) -> Sale:
        collection = validate_address(collection)
        token_id = validate_token_id(token_id)
        sale = self.store.load_sale(collection, token_id)
        if sale is None:
            raise SaleNotFound(
                "sale not found", {"collection": collection, "token_id": token_id}
            )
        return sale

    def get_collection(self, collection: str) -> Collection:
        record = self.store.load_collection(validate_address(collection))
        if record is None:
            raise CollectionNotFound("collection is not registered", {"collection": collection})
        return record

    def get_taker_fee(self) -> int:
        return self.store.load_taker_fee()

    def get_taker_address(self) -> str:
        return self.store.load_taker_address()

    def get_native_denom(self) -> str:
        return self.store.load_native_denom()

    def get_ownership(self) -> Ownership:
        return self.store.load_ownership()
