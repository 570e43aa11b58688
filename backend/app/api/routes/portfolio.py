"""Holdings snapshot and performance endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from app.api.dependencies.auth import InternalAuth, RequestContext, get_request_context
from app.api.dependencies.valuation import get_valuation_service
from app.api.errors import VALUATION_ERRORS, as_http_error
from app.config import get_settings
from app.schemas import PerformanceResponse, SnapshotResponse
from app.services.valuation import ValuationService

router = APIRouter(dependencies=[InternalAuth])


@router.get("/snapshot", response_model=SnapshotResponse)
async def get_snapshot(
    currency: str | None = Query(default=None, description="Reporting currency code"),
    context: RequestContext = Depends(get_request_context),
    service: ValuationService = Depends(get_valuation_service),
) -> SnapshotResponse:
    currency = currency or get_settings().base_currency.value
    try:
        snapshot = await service.snapshot(context.user_id, currency)
    except VALUATION_ERRORS as exc:
        raise as_http_error(exc) from exc
    return SnapshotResponse.from_snapshot(snapshot)


@router.get("/performance", response_model=PerformanceResponse)
async def get_performance(
    currency: str | None = Query(default=None, description="Reporting currency code"),
    start: date | None = Query(default=None, alias="from"),
    end: date | None = Query(default=None, alias="to"),
    context: RequestContext = Depends(get_request_context),
    service: ValuationService = Depends(get_valuation_service),
) -> PerformanceResponse:
    """Return the TWR/MWR series for the display window.

    ``to`` defaults to today and ``from`` to the first day of ``to``'s month.
    """

    currency = currency or get_settings().base_currency.value
    end = end or date.today()
    start = start or end.replace(day=1)
    try:
        result = await service.performance(context.user_id, currency, start, end)
    except VALUATION_ERRORS as exc:
        raise as_http_error(exc) from exc
    return PerformanceResponse.from_result(result)


__all__ = ["router"]
