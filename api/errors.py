"""
Mapping from domain errors to HTTP responses.
"""

from fastapi import HTTPException

from domain.errors import (
    AccountingError,
    AuthorizationError,
    NotFoundError,
    PolicyViolation,
    ResourceError,
    StateError,
    TokenPlatformError,
    ValidationError,
)

_STATUS_BY_KIND: list[tuple[type[TokenPlatformError], int]] = [
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (StateError, 409),
    (ResourceError, 409),
    (AccountingError, 409),
    (PolicyViolation, 422),
]


def status_for(error: TokenPlatformError) -> int:
    for kind, status in _STATUS_BY_KIND:
        if isinstance(error, kind):
            return status
    return 500


def to_http_exception(error: TokenPlatformError) -> HTTPException:
    return HTTPException(status_code=status_for(error), detail=error.to_dict())
