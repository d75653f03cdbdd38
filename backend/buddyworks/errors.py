import logging
from typing import Any, NoReturn, Optional

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Base class for user-visible marketplace errors."""

    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(MarketplaceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidToken(MarketplaceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND


class BadRequest(MarketplaceError):
    status_code = status.HTTP_400_BAD_REQUEST


class StoreFailure(MarketplaceError):
    """Wraps a data-access error; the original error is kept on ``cause``."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


def _detail(exc: MarketplaceError) -> Any:
    if isinstance(exc, StoreFailure):
        return {"message": str(exc), "error": str(exc.cause) if exc.cause else ""}
    return str(exc)


def raise_http_error(exc: MarketplaceError) -> NoReturn:
    if isinstance(exc, StoreFailure):
        logger.error("Store failure: %s", exc, exc_info=exc.cause)
    headers = None
    if isinstance(exc, (Unauthenticated, InvalidToken)):
        headers = {"WWW-Authenticate": "Cookie"}
    raise HTTPException(status_code=exc.status_code, detail=_detail(exc), headers=headers)
