"""
nftmarket Exception Hierarchy

All exceptions inherit from MarketError for easy catching.
Every precondition failure raises one of these at the check that fails;
the enclosing transaction restores the store before it propagates.
"""


class MarketError(Exception):
    """Base exception for all marketplace errors"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


# ── Validation ────────────────────────────────────────────────

class ValidationError(MarketError):
    """Raised when untrusted input fails validation"""
    pass


class InvalidAddress(ValidationError):
    """Raised when an address string is not a valid account or contract address"""
    pass


class InvalidPercentage(ValidationError):
    """Raised when a percentage is not an integer in 0..=100"""
    pass


class InvalidPrice(ValidationError):
    """Raised when a listing price is malformed or zero"""
    pass


# ── Authorization ─────────────────────────────────────────────

class AuthorizationError(MarketError):
    """Raised when authorization fails"""
    pass


class Unauthorized(AuthorizationError):
    """Caller is neither the admin nor the token's current owner"""
    pass


class NotApproved(AuthorizationError):
    """The marketplace is not an approved operator for the token"""
    pass


class OwnershipError(MarketError):
    """Raised when an admin-identity transition is invalid"""
    pass


class NoOwner(OwnershipError):
    """Ownership has been renounced; no admin exists"""
    pass


class NotPendingOwner(OwnershipError):
    """Caller is not the proposed candidate"""
    pass


class TransferNotFound(OwnershipError):
    """No ownership transfer is pending"""
    pass


# ── Collections and sales ─────────────────────────────────────

class CollectionError(MarketError):
    """Raised when collection registration state conflicts"""
    pass


class CollectionAlreadyRegistered(CollectionError):
    pass


class CollectionNotFound(CollectionError):
    pass


class SaleError(MarketError):
    """Raised when a sale record is missing"""
    pass


class SaleNotFound(SaleError):
    pass


# Admin removal reports the missing record under this name.
SaleDoesNotExist = SaleNotFound


# ── Settlement ────────────────────────────────────────────────

class SettlementError(MarketError):
    """Raised when settlement fails"""
    pass


class DenomNotSupported(SettlementError):
    """Price denomination differs from the accepted currency"""
    pass


class InsufficientFunds(SettlementError):
    """Attached funds are not exactly the listing price"""
    pass


class FeeConfigurationError(SettlementError):
    """Taker fee plus royalty percentage exceeds 100"""
    pass


# ── Collaborators and infrastructure ──────────────────────────

class RegistryQueryError(MarketError):
    """Raised when the token registry cannot answer a query"""
    pass


class LedgerError(MarketError):
    """Raised when store or journal operations fail"""
    pass


class ConfigError(MarketError):
    """Raised when a configuration document is invalid"""
    pass


class UnsupportedOperation(MarketError):
    """Raised for declared entry points that are not implemented"""
    pass
