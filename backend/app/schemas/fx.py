"""Pydantic schemas for FX conversion tables and stored quotes."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class FxMatrixResponse(BaseModel):
    pivot: str
    include_derived: bool
    rates: dict[str, dict[str, float]] = Field(
        ..., description="rates[base][quote] converts one unit of base into quote"
    )


class FxRateSchema(BaseModel):
    base: str = Field(..., examples=["EUR"])
    quote: str = Field(..., examples=["USD"])
    rate: float
    fetched_at: Optional[datetime] = None
    age_hours: Optional[float] = None


class FxRateStatsSchema(BaseModel):
    total_rates: int
    average_age_hours: Optional[float] = None
    oldest_update: Optional[datetime] = None
    recent_update: Optional[datetime] = None


class FxRatesResponse(BaseModel):
    rates: list[FxRateSchema]
    stats: FxRateStatsSchema


__all__ = ["FxMatrixResponse", "FxRateSchema", "FxRateStatsSchema", "FxRatesResponse"]
