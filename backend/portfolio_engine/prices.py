"""Gap-filled daily close series built from sparse price-store rows."""
from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Iterable, Mapping

import pandas as pd

from .models import PricePoint

SEED_DAYS = 7


def seed_start(start: date, seed_days: int = SEED_DAYS) -> date:
    """First day to query so ``start`` can already carry a forward-filled close."""

    return start - timedelta(days=max(seed_days, SEED_DAYS))


class DailyPriceSeries:
    """Forward-filled closes keyed by symbol then calendar day."""

    def __init__(self, closes: Mapping[str, Mapping[date, float]] | None = None):
        self._closes: dict[str, dict[date, float]] = {
            symbol: dict(days) for symbol, days in (closes or {}).items()
        }

    def close(self, symbol: str, day: date) -> float | None:
        """Return the close for ``symbol`` on ``day`` or ``None`` when unknown."""

        return self._closes.get(symbol, {}).get(day)

    def symbols(self) -> list[str]:
        return sorted(self._closes)

    def days(self, symbol: str) -> dict[date, float]:
        return dict(self._closes.get(symbol, {}))


def build_price_series(points: Iterable[PricePoint], start: date, end: date) -> DailyPriceSeries:
    """Forward-fill raw closes across every calendar day in ``[start, end]``.

    The latest close strictly before ``start`` seeds the first day. Days
    before a symbol's first known close are left out; callers treat them as
    "no valuation possible".
    """

    records = [
        (point.symbol, pd.Timestamp(point.date), float(point.close))
        for point in points
        if point.date <= end and math.isfinite(float(point.close))
    ]
    if not records or start > end:
        return DailyPriceSeries()

    frame = pd.DataFrame(records, columns=["symbol", "day", "close"])
    frame = frame.sort_values("day", kind="stable")
    wide = frame.pivot_table(index="day", columns="symbol", values="close", aggfunc="last")

    calendar = pd.date_range(pd.Timestamp(start), pd.Timestamp(end), freq="D")
    wide = wide.reindex(wide.index.union(calendar)).sort_index().ffill()
    wide = wide.loc[calendar]

    closes: dict[str, dict[date, float]] = {}
    for symbol in wide.columns:
        column = wide[symbol].dropna()
        if column.empty:
            continue
        closes[str(symbol)] = {stamp.date(): float(value) for stamp, value in column.items()}
    return DailyPriceSeries(closes)


__all__ = ["SEED_DAYS", "DailyPriceSeries", "build_price_series", "seed_start"]
