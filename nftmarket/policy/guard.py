"""
Authorization guard.

Every mutating entry point passes through one of these checks before it
touches the store:

    assert_admin                 caller holds the admin slot
    assert_token_owner           registry reports caller as current owner
    assert_marketplace_approved  marketplace may transfer the token

Registry failures in assert_token_owner (unknown collection or token)
propagate unchanged as RegistryQueryError.
"""

from nftmarket.core.exceptions import NotApproved, RegistryQueryError, Unauthorized
from nftmarket.ledger.store import LedgerStore
from nftmarket.registry.client import RegistryClient


class AuthorizationGuard:

    def __init__(self, store: LedgerStore, registry: RegistryClient):
        self.store = store
        self.registry = registry

    def assert_admin(self, caller: str) -> None:
        self.store.load_ownership().assert_owner(caller)

    def assert_token_owner(self, collection: str, token_id: str, caller: str) -> None:
        owner = self.registry.owner_of(collection, token_id)
        if owner != caller:
            raise Unauthorized(
                "caller does not own the token",
                {"collection": collection, "token_id": token_id, "caller": caller},
            )

    def assert_marketplace_approved(self, collection: str, token_id: str) -> None:
        marketplace = self.store.load_marketplace_address()
        try:
            self.registry.approval(collection, token_id, marketplace)
        except RegistryQueryError as e:
            raise NotApproved(
                "marketplace is not approved for the token",
                {"collection": collection, "token_id": token_id},
            ) from e
