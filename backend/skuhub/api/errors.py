from fastapi import HTTPException

from skuhub.exceptions import (
    AuthorizationError,
    IntegrityError,
    NotFoundError,
    SkuHubError,
    ValidationError,
)

_STATUS = [
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (IntegrityError, 409),
]


def http_error(e: SkuHubError) -> HTTPException:
    for exc_type, status in _STATUS:
        if isinstance(e, exc_type):
            return HTTPException(status_code=status, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))
