"""Pydantic schema exports."""

from .fx import FxMatrixResponse, FxRateSchema, FxRatesResponse, FxRateStatsSchema
from .portfolio import (
    PerformancePointSchema,
    PerformanceResponse,
    SnapshotItemSchema,
    SnapshotResponse,
)

__all__ = [
    "SnapshotItemSchema",
    "SnapshotResponse",
    "PerformancePointSchema",
    "PerformanceResponse",
    "FxMatrixResponse",
    "FxRateSchema",
    "FxRateStatsSchema",
    "FxRatesResponse",
]
