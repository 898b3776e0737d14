"""
Two-phase admin identity.

The slot holds an owner and at most one pending candidate:

    no owner ──initialize──▶ owner
    owner ──propose(candidate)──▶ owner + pending
    owner + pending ──accept (by candidate)──▶ candidate
    owner [+ pending] ──renounce──▶ no owner

Transitions return new values; the caller persists them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from nftmarket.core.exceptions import (
    NoOwner,
    NotPendingOwner,
    TransferNotFound,
    Unauthorized,
)
from nftmarket.core.models import validate_address


class OwnershipAction(Enum):
    TRANSFER_OWNERSHIP = "transfer_ownership"
    ACCEPT_OWNERSHIP   = "accept_ownership"
    RENOUNCE_OWNERSHIP = "renounce_ownership"


@dataclass(frozen=True)
class Ownership:
    owner:         Optional[str] = None
    pending_owner: Optional[str] = None

    @staticmethod
    def initialize(owner: str) -> "Ownership":
        return Ownership(owner=validate_address(owner))

    def assert_owner(self, caller: str) -> None:
        if self.owner is None:
            raise NoOwner("contract has no owner")
        if caller != self.owner:
            raise Unauthorized("caller is not the contract owner", {"caller": caller})

    def propose(self, caller: str, candidate: str) -> "Ownership":
        self.assert_owner(caller)
        return Ownership(owner=self.owner, pending_owner=validate_address(candidate))

    def accept(self, caller: str) -> "Ownership":
        if self.pending_owner is None:
            raise TransferNotFound("no ownership transfer is pending")
        if caller != self.pending_owner:
            raise NotPendingOwner("caller is not the pending owner", {"caller": caller})
        return Ownership(owner=self.pending_owner)

    def renounce(self, caller: str) -> "Ownership":
        self.assert_owner(caller)
        return Ownership()

    def apply(
        self,
        caller: str,
        action: OwnershipAction,
        new_owner: Optional[str] = None,
    ) -> "Ownership":
        if action is OwnershipAction.TRANSFER_OWNERSHIP:
            return self.propose(caller, new_owner)
        if action is OwnershipAction.ACCEPT_OWNERSHIP:
            return self.accept(caller)
        return self.renounce(caller)

    def to_dict(self) -> dict:
        return {"owner": self.owner, "pending_owner": self.pending_owner}

    @staticmethod
    def from_dict(data: dict) -> "Ownership":
        return Ownership(
            owner=data.get("owner"),
            pending_owner=data.get("pending_owner"),
        )
