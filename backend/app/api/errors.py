"""Translate valuation failures into HTTP errors."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from app.services.valuation import ValuationTimeout
from portfolio_engine import InvalidValuationRequest, StoreUnavailableError

logger = logging.getLogger(__name__)


def as_http_error(exc: Exception) -> HTTPException:
    """Map an engine or service exception to the response the caller sees."""

    if isinstance(exc, InvalidValuationRequest):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, StoreUnavailableError):
        logger.exception("Valuation store unavailable")
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    if isinstance(exc, ValuationTimeout):
        return HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(exc))
    raise TypeError(f"Unhandled valuation error type: {type(exc).__name__}") from exc


VALUATION_ERRORS = (InvalidValuationRequest, StoreUnavailableError, ValuationTimeout)

__all__ = ["VALUATION_ERRORS", "as_http_error"]
