"""Freshness reporting over the stored FX quotes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from portfolio_engine.models import Currency, FxRateRow


@dataclass(frozen=True)
class FxRateStats:
    total_rates: int
    average_age_hours: Optional[float]
    oldest_update: Optional[datetime]
    recent_update: Optional[datetime]


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive timestamps; they are stored as UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def age_hours(row: FxRateRow, now: datetime) -> Optional[float]:
    if row.fetched_at is None:
        return None
    return (_aware(now) - _aware(row.fetched_at)).total_seconds() / 3600.0


def filter_rates(
    rows: Iterable[FxRateRow],
    base: Optional[Currency] = None,
    quote: Optional[Currency] = None,
) -> list[FxRateRow]:
    return [
        row
        for row in rows
        if (base is None or row.base == base) and (quote is None or row.quote == quote)
    ]


def summarize_fx_rates(rows: Iterable[FxRateRow], now: datetime) -> FxRateStats:
    """Count the quotes and describe how old they are relative to ``now``."""

    rows = list(rows)
    stamped = [_aware(row.fetched_at) for row in rows if row.fetched_at is not None]
    ages = [age for age in (age_hours(row, now) for row in rows) if age is not None]
    return FxRateStats(
        total_rates=len(rows),
        average_age_hours=sum(ages) / len(ages) if ages else None,
        oldest_update=min(stamped) if stamped else None,
        recent_update=max(stamped) if stamped else None,
    )


__all__ = ["FxRateStats", "age_hours", "filter_rates", "summarize_fx_rates"]
