"""
Token registry client.

The registry is the system of record for token custody. The marketplace
only queries it, except for the TransferNft instruction it emits when a
purchase completes; the execution environment carries that out.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional, Set, Tuple

from nftmarket.core.exceptions import RegistryQueryError
from nftmarket.core.models import TransferNft, validate_address


class RegistryClient(ABC):
    """Read-only view of an external token registry plus the transfer command."""

    @abstractmethod
    def owner_of(self, collection: str, token_id: str) -> str:
        """Current owner. Raises RegistryQueryError if the token does not exist."""

    @abstractmethod
    def approval(self, collection: str, token_id: str, spender: str) -> None:
        """Return if spender may transfer the token, else raise RegistryQueryError."""

    def transfer(self, collection: str, token_id: str, recipient: str) -> TransferNft:
        return TransferNft(
            collection=collection,
            recipient=validate_address(recipient),
            token_id=token_id,
        )


class InMemoryRegistry(RegistryClient):
    """
    Registry held in process memory.

    Used by tests and by the CLI, which loads it from the config file's
    registry section.
    """

    def __init__(self) -> None:
        self._owners:    Dict[Tuple[str, str], str] = {}
        self._approvals: Dict[Tuple[str, str], Set[str]] = {}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "InMemoryRegistry":
        """
        Build from {collection: {token_id: {"owner": ..., "approvals": [...]}}}.
        """
        registry = cls()
        for collection, tokens in (data or {}).items():
            for token_id, token in (tokens or {}).items():
                registry.mint(collection, str(token_id), token["owner"])
                for spender in token.get("approvals", []):
                    registry.approve(collection, str(token_id), spender)
        return registry

    def mint(self, collection: str, token_id: str, owner: str) -> None:
        self._owners[(collection, token_id)] = validate_address(owner)
        self._approvals[(collection, token_id)] = set()

    def approve(self, collection: str, token_id: str, spender: str) -> None:
        self._require(collection, token_id)
        self._approvals[(collection, token_id)].add(validate_address(spender))

    def revoke(self, collection: str, token_id: str, spender: str) -> None:
        self._require(collection, token_id)
        self._approvals[(collection, token_id)].discard(spender)

    def owner_of(self, collection: str, token_id: str) -> str:
        return self._require(collection, token_id)

    def approval(self, collection: str, token_id: str, spender: str) -> None:
        self._require(collection, token_id)
        if spender not in self._approvals[(collection, token_id)]:
            raise RegistryQueryError(
                "approval not found",
                {"collection": collection, "token_id": token_id, "spender": spender},
            )

    def apply_transfers(self, messages: Iterable) -> None:
        """Execute the TransferNft instructions of a response. Approvals reset."""
        for message in messages:
            if isinstance(message, TransferNft):
                self._require(message.collection, message.token_id)
                key = (message.collection, message.token_id)
                self._owners[key] = message.recipient
                self._approvals[key] = set()

    def _require(self, collection: str, token_id: str) -> str:
        owner = self._owners.get((collection, token_id))
        if owner is None:
            raise RegistryQueryError(
                "token not found",
                {"collection": collection, "token_id": token_id},
            )
        return owner
