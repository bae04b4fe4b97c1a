# storefront/domain/errors.py
from typing import Dict


class StorefrontError(Exception):
    """Base class for failures the routing layer turns into responses."""


class MissingSubjectError(StorefrontError):
    """Identity claims carry no usable subject identifier."""


class UnauthenticatedError(StorefrontError):
    """Cart or order operation called without a subject."""


class ProfileNotFoundError(StorefrontError):
    """No local profile for the subject, identity sync has not run yet."""


class EmptyCartError(StorefrontError):
    """Checkout attempted on an absent or empty cart."""


class ValidationError(StorefrontError):
    """Checkout details are malformed. ``errors`` maps field name to message."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))


class OrderNotFoundError(StorefrontError):
    """Order does not exist for this subject."""


class CheckoutInProgressError(StorefrontError):
    """Another checkout for the same subject holds the lock."""


class PersistenceError(StorefrontError):
    """Storage write failed."""


class ConcurrencyConflictError(PersistenceError):
    """Cart version moved under us on every attempt."""


class CatalogUnavailableError(StorefrontError):
    """Product catalog could not be reached."""
