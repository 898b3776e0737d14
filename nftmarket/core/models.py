"""
nftmarket/core/models.py

Marketplace data model.

Records (persisted in the ledger store):
    Collection    royalty configuration and pause flag of one token collection
    Sale          one listed (collection, token) at a fixed price

Instructions (returned to the execution environment, never executed here):
    BankSend      move value to an address
    TransferNft   move a token to a recipient on the registry

Every mutating entry point returns a Response carrying instructions,
structured Events and top-level attributes.

Untrusted strings enter through validate_address(), validate_token_id()
and validate_percentage(). Each raises a typed ValidationError; none
asserts or returns None.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from nftmarket.core.exceptions import (
    FeeConfigurationError,
    InvalidAddress,
    InvalidPercentage,
    ValidationError,
)


# ─────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────

_ADDRESS_RE = re.compile(r"^[a-z0-9][a-z0-9_\-]{2,89}$")
_DENOM_RE   = re.compile(r"^[a-zA-Z][a-zA-Z0-9/:._\-]{0,127}$")
_AMOUNT_RE  = re.compile(r"^[0-9]+$")
_COIN_RE    = re.compile(r"^([0-9]+)([a-zA-Z][a-zA-Z0-9/:._\-]{0,127})$")

MAX_PERCENTAGE = 100


def validate_address(raw: Any) -> str:
    """
    Validate an untrusted address string and return it unchanged.

    Accepted: 3..90 characters of lowercase ASCII letters, digits, '-' and
    '_', starting with a letter or digit. Mixed case is rejected rather
    than normalized so the same account never appears under two keys.
    """
    if not isinstance(raw, str):
        raise InvalidAddress(
            f"address must be a string, got {type(raw).__name__}"
        )
    if not _ADDRESS_RE.match(raw):
        raise InvalidAddress("invalid address", {"address": raw})
    return raw


def validate_optional_address(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    return validate_address(raw)


def validate_denom(raw: Any) -> str:
    if not isinstance(raw, str) or not _DENOM_RE.match(raw):
        raise ValidationError("invalid denomination", {"denom": raw})
    return raw


def validate_token_id(raw: Any) -> str:
    if not isinstance(raw, str) or not raw:
        raise ValidationError(
            "token_id must be a non-empty string", {"token_id": raw}
        )
    return raw


def validate_percentage(value: Any, name: str = "percentage") -> int:
    """Return value if it is an integer in 0..=100, else raise InvalidPercentage."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPercentage(
            f"{name} must be an integer, got {type(value).__name__}"
        )
    if not 0 <= value <= MAX_PERCENTAGE:
        raise InvalidPercentage(
            f"{name} must be between 0 and {MAX_PERCENTAGE}", {name: value}
        )
    return value


def validate_optional_percentage(value: Any, name: str = "percentage") -> Optional[int]:
    if value is None:
        return None
    return validate_percentage(value, name)


def check_fee_total(taker_fee: int, royalty_percentage: Optional[int]) -> None:
    """Taker fee and royalty together may take at most the whole price."""
    total = taker_fee + (royalty_percentage or 0)
    if total > MAX_PERCENTAGE:
        raise FeeConfigurationError(
            f"taker fee plus royalty exceeds {MAX_PERCENTAGE}%",
            {"taker_fee": taker_fee, "royalty_percentage": royalty_percentage},
        )


# ─────────────────────────────────────────────────────────────
# Coin
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Coin:
    """An amount of a single denomination. Amount is a non-negative integer."""
    denom:  str
    amount: int

    def __post_init__(self):
        validate_denom(self.denom)
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValidationError(
                f"amount must be an integer, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError("amount must be non-negative", {"amount": self.amount})

    @staticmethod
    def parse(text: str) -> "Coin":
        """Parse the '<amount><denom>' wire form, e.g. '1000uatom'."""
        match = _COIN_RE.match(text.strip()) if isinstance(text, str) else None
        if match is None:
            raise ValidationError(f"cannot parse coin {text!r}")
        return Coin(denom=match.group(2), amount=int(match.group(1)))

    def to_dict(self) -> dict:
        return {"denom": self.denom, "amount": str(self.amount)}

    @staticmethod
    def from_dict(data: dict) -> "Coin":
        """Amounts travel as decimal strings; plain integers are accepted too."""
        if not isinstance(data, dict) or "denom" not in data or "amount" not in data:
            raise ValidationError(f"coin must have denom and amount, got {data!r}")
        amount = data["amount"]
        if isinstance(amount, str):
            if not _AMOUNT_RE.match(amount):
                raise ValidationError("amount must be a decimal string", {"amount": amount})
            amount = int(amount)
        return Coin(denom=data["denom"], amount=amount)

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


# ─────────────────────────────────────────────────────────────
# Records
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Collection:
    """
    Registered collection.

    A royalty_percentage without a royalty_payment_address pays no royalty.
    """
    royalty_percentage:      Optional[int] = None
    royalty_payment_address: Optional[str] = None
    is_paused:               bool = False

    def pays_royalty(self) -> bool:
        return (
            self.royalty_percentage is not None
            and self.royalty_payment_address is not None
        )

    def to_dict(self) -> dict:
        return {
            "royalty_percentage":      self.royalty_percentage,
            "royalty_payment_address": self.royalty_payment_address,
            "is_paused":               self.is_paused,
        }

    @staticmethod
    def from_dict(data: dict) -> "Collection":
        return Collection(
            royalty_percentage=data.get("royalty_percentage"),
            royalty_payment_address=data.get("royalty_payment_address"),
            is_paused=bool(data.get("is_paused", False)),
        )


@dataclass(frozen=True)
class Sale:
    """A listing. owner_address is the lister captured at listing time."""
    owner_address: str
    price:         Coin

    def to_dict(self) -> dict:
        return {
            "owner_address": self.owner_address,
            "price":         self.price.to_dict(),
        }

    @staticmethod
    def from_dict(data: dict) -> "Sale":
        return Sale(
            owner_address=data["owner_address"],
            price=Coin.from_dict(data["price"]),
        )


# ─────────────────────────────────────────────────────────────
# Instructions
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BankSend:
    to_address: str
    amount:     Tuple[Coin, ...]

    def to_dict(self) -> dict:
        return {
            "bank_send": {
                "to_address": self.to_address,
                "amount":     [c.to_dict() for c in self.amount],
            }
        }


@dataclass(frozen=True)
class TransferNft:
    collection: str
    recipient:  str
    token_id:   str

    def to_dict(self) -> dict:
        return {
            "transfer_nft": {
                "collection": self.collection,
                "recipient":  self.recipient,
                "token_id":   self.token_id,
            }
        }


def bank_send(to_address: str, amount: int, denom: str) -> BankSend:
    """Build a value-transfer instruction. Zero or negative amounts are refused."""
    to_address = validate_address(to_address)
    coin = Coin(denom=denom, amount=amount)
    if coin.amount == 0:
        raise ValidationError("cannot send a zero amount", {"to_address": to_address})
    return BankSend(to_address=to_address, amount=(coin,))


# ─────────────────────────────────────────────────────────────
# Events and responses
# ─────────────────────────────────────────────────────────────

def render_attribute(value: Any) -> str:
    """Render an attribute value. Absent values are written out as 'null'."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class Event:
    """A structured event: kind plus ordered string attributes."""
    kind:       str
    attributes: List[Tuple[str, str]] = field(default_factory=list)

    def add_attribute(self, key: str, value: Any) -> "Event":
        self.attributes.append((key, render_attribute(value)))
        return self

    def get(self, key: str) -> Optional[str]:
        for k, v in self.attributes:
            if k == key:
                return v
        return None

    def to_dict(self) -> dict:
        return {
            "type":       self.kind,
            "attributes": [{"key": k, "value": v} for k, v in self.attributes],
        }


@dataclass
class Response:
    """Result of a successful mutating entry point."""
    messages:   List[Any] = field(default_factory=list)
    events:     List[Event] = field(default_factory=list)
    attributes: List[Tuple[str, str]] = field(default_factory=list)

    def add_message(self, message: Any) -> "Response":
        self.messages.append(message)
        return self

    def add_event(self, event: Event) -> "Response":
        self.events.append(event)
        return self

    def add_attribute(self, key: str, value: Any) -> "Response":
        self.attributes.append((key, render_attribute(value)))
        return self

    def bank_sends(self) -> List[BankSend]:
        return [m for m in self.messages if isinstance(m, BankSend)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "messages":   [m.to_dict() for m in self.messages],
            "events":     [e.to_dict() for e in self.events],
            "attributes": [{"key": k, "value": v} for k, v in self.attributes],
        }
