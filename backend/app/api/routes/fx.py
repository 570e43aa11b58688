"""FX conversion table and stored quote monitoring endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies.auth import InternalAuth
from app.api.dependencies.valuation import get_valuation_service
from app.api.errors import VALUATION_ERRORS, as_http_error
from app.schemas import FxMatrixResponse, FxRateSchema, FxRatesResponse, FxRateStatsSchema
from app.services.fx import age_hours, filter_rates, summarize_fx_rates
from app.services.valuation import ValuationService
from portfolio_engine import Currency

router = APIRouter(dependencies=[InternalAuth])


def _currency_param(value: str | None, name: str) -> Currency | None:
    if value is None:
        return None
    try:
        return Currency.parse(value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unsupported {name} currency: {value}"
        ) from exc


@router.get("/matrix", response_model=FxMatrixResponse)
async def get_fx_matrix(
    include_derived: bool = Query(default=True, description="Include pivot-triangulated pairs"),
    service: ValuationService = Depends(get_valuation_service),
) -> FxMatrixResponse:
    try:
        matrix = await service.fx_matrix()
    except VALUATION_ERRORS as exc:
        raise as_http_error(exc) from exc
    return FxMatrixResponse(
        pivot=matrix.pivot.value,
        include_derived=include_derived,
        rates=matrix.as_table(include_derived=include_derived),
    )


@router.get("/rates", response_model=FxRatesResponse)
async def get_fx_rates(
    base: str | None = Query(default=None),
    quote: str | None = Query(default=None),
    service: ValuationService = Depends(get_valuation_service),
) -> FxRatesResponse:
    base_ccy = _currency_param(base, "base")
    quote_ccy = _currency_param(quote, "quote")
    try:
        rows = await service.fx_rates()
    except VALUATION_ERRORS as exc:
        raise as_http_error(exc) from exc

    now = datetime.now(timezone.utc)
    selected = filter_rates(rows, base_ccy, quote_ccy)
    stats = summarize_fx_rates(selected, now)
    return FxRatesResponse(
        rates=[
            FxRateSchema(
                base=row.base.value,
                quote=row.quote.value,
                rate=row.rate,
                fetched_at=row.fetched_at,
                age_hours=age_hours(row, now),
            )
            for row in selected
        ],
        stats=FxRateStatsSchema(
            total_rates=stats.total_rates,
            average_age_hours=stats.average_age_hours,
            oldest_update=stats.oldest_update,
            recent_update=stats.recent_update,
        ),
    )


__all__ = ["router"]
