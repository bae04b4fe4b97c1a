# storefront/api/errors.py
from fastapi import HTTPException

from storefront.domain.errors import (
    CatalogUnavailableError,
    CheckoutInProgressError,
    ConcurrencyConflictError,
    EmptyCartError,
    MissingSubjectError,
    OrderNotFoundError,
    PersistenceError,
    ProfileNotFoundError,
    StorefrontError,
    UnauthenticatedError,
    ValidationError,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# most specific first, ConcurrencyConflictError is a PersistenceError
_STATUS = [
    (MissingSubjectError, 401),
    (UnauthenticatedError, 401),
    (ProfileNotFoundError, 409),
    (EmptyCartError, 400),
    (ValidationError, 422),
    (OrderNotFoundError, 404),
    (CheckoutInProgressError, 409),
    (ConcurrencyConflictError, 409),
    (CatalogUnavailableError, 503),
    (PersistenceError, 500),
]


def http_error(exc: StorefrontError) -> HTTPException:
    for exc_type, status in _STATUS:
        if isinstance(exc, exc_type):
            break
    else:
        status = 500

    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status, detail={"errors": exc.errors})

    if status >= 500:
        # storage details stay in the log
        logger.error(f"Request failed: {exc!r}")
        return HTTPException(status_code=status, detail="Something went wrong, please try again.")

    return HTTPException(status_code=status, detail=str(exc))
