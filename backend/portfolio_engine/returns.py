"""Chain-linked TWR / Modified Dietz indices and display-window rebasing.

The chain always starts at the inception day with both indices at 100 and is
never recomputed for a display window; windows are a pure rebasing view over
the full chain.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import List, Sequence

from .models import NavDay, NavPoint, PerformancePoint

BASE_INDEX = 100.0
NAV_EPSILON = 1e-8


@dataclass(frozen=True)
class ReturnSummary:
    total_return_twr: float = 0.0
    total_return_mwr: float = 0.0
    prev_day_return_twr: float = 0.0
    prev_day_return_mwr: float = 0.0


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def daily_twr(prev_nav: float, nav: float, flow: float) -> float:
    safe_prev = prev_nav if abs(prev_nav) > NAV_EPSILON else 1.0
    return _finite_or_zero((nav - prev_nav - flow) / safe_prev)


def daily_mwr(prev_nav: float, nav: float, flow: float) -> float:
    """Modified Dietz return with the day's flow weighted at one half."""

    denom = prev_nav + 0.5 * flow
    if not math.isfinite(denom) or abs(denom) <= NAV_EPSILON:
        return 0.0
    return _finite_or_zero((nav - prev_nav - flow) / denom)


def chain_link(days: Sequence[NavDay]) -> List[NavPoint]:
    """Link daily returns into inception-to-date TWR and MWR indices."""

    points: List[NavPoint] = []
    twr_index = BASE_INDEX
    mwr_index = BASE_INDEX
    previous: NavDay | None = None
    for day in days:
        if previous is not None:
            twr_index *= 1.0 + daily_twr(previous.nav, day.nav, day.external_flow)
            mwr_index *= 1.0 + daily_mwr(previous.nav, day.nav, day.external_flow)
        points.append(
            NavPoint(
                date=day.date,
                nav=day.nav,
                external_flow=day.external_flow,
                twr_index=twr_index,
                mwr_index=mwr_index,
            )
        )
        previous = day
    return points


def _rebased_yield(index: float, base: float) -> float:
    if abs(base) <= NAV_EPSILON:
        return 0.0
    return BASE_INDEX * (index / base) - BASE_INDEX


def rebase_window(points: Sequence[NavPoint], start: date, end: date) -> List[PerformancePoint]:
    """Express the chain inside ``[start, end]`` relative to its first point."""

    window = [point for point in points if start <= point.date <= end]
    if not window:
        return []
    base_twr = window[0].twr_index
    base_mwr = window[0].mwr_index
    return [
        PerformancePoint(
            date=point.date,
            net_assets=point.nav,
            yield_twr=_rebased_yield(point.twr_index, base_twr),
            yield_mwr=_rebased_yield(point.mwr_index, base_mwr),
        )
        for point in window
    ]


def _prev_day_return(last: float, previous: float) -> float:
    if abs(previous) <= NAV_EPSILON:
        return 0.0
    return _finite_or_zero((last / previous - 1.0) * 100.0)


def summarize(points: Sequence[NavPoint]) -> ReturnSummary:
    """Inception-to-date totals and the last day's return, in percent."""

    if not points:
        return ReturnSummary()
    last = points[-1]
    summary = ReturnSummary(
        total_return_twr=last.twr_index - BASE_INDEX,
        total_return_mwr=last.mwr_index - BASE_INDEX,
    )
    if len(points) < 2:
        return summary
    previous = points[-2]
    return ReturnSummary(
        total_return_twr=summary.total_return_twr,
        total_return_mwr=summary.total_return_mwr,
        prev_day_return_twr=_prev_day_return(last.twr_index, previous.twr_index),
        prev_day_return_mwr=_prev_day_return(last.mwr_index, previous.mwr_index),
    )


__all__ = [
    "BASE_INDEX",
    "NAV_EPSILON",
    "ReturnSummary",
    "chain_link",
    "daily_mwr",
    "daily_twr",
    "rebase_window",
    "summarize",
]
