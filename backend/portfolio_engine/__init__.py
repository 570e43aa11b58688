"""Core package for the portfolio valuation and returns engine."""

from .engine import InvalidValuationRequest, ValuationEngine
from .fx import FxMatrix, build_fx_matrix, convert_amount
from .models import (
    Currency,
    FxRateRow,
    Holding,
    NavPoint,
    PerformancePoint,
    PerformanceResult,
    PricePoint,
    Snapshot,
    SnapshotItem,
    Transaction,
    TransactionSide,
)
from .sources import StoreUnavailableError

__all__ = [
    "Currency",
    "FxMatrix",
    "FxRateRow",
    "Holding",
    "InvalidValuationRequest",
    "NavPoint",
    "PerformancePoint",
    "PerformanceResult",
    "PricePoint",
    "Snapshot",
    "SnapshotItem",
    "StoreUnavailableError",
    "Transaction",
    "TransactionSide",
    "ValuationEngine",
    "build_fx_matrix",
    "convert_amount",
]
