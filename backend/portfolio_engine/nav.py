"""Daily net asset value and external cash-flow series."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .fx import FxMatrix, convert_amount
from .holdings import QUANTITY_EPSILON, trade_cash_flow
from .models import Currency, NavDay, Transaction
from .prices import DailyPriceSeries


def resolve_native_currency(*sources: Optional[Currency], default: Currency) -> Currency:
    """Return the first defined currency among ``sources``, else ``default``."""

    for candidate in sources:
        if candidate is not None:
            return candidate
    return default


def last_trade_currencies(transactions: Iterable[Transaction]) -> Dict[str, Currency]:
    """Map each symbol to the trade currency of its most recent transaction."""

    latest: Dict[str, Currency] = {}
    for tx in sorted(transactions, key=lambda t: t.date):
        latest[tx.symbol] = tx.price_currency
    return latest


def native_currencies(
    symbols: Iterable[str],
    registered: Mapping[str, Optional[Currency]],
    transactions: Sequence[Transaction],
    default: Currency,
) -> Dict[str, Currency]:
    """Resolve the valuation currency of every symbol.

    Precedence: registered trading currency, then the currency of the most
    recent transaction in the symbol, then ``default``.
    """

    from_trades = last_trade_currencies(transactions)
    return {
        symbol: resolve_native_currency(
            registered.get(symbol),
            from_trades.get(symbol),
            default=default,
        )
        for symbol in symbols
    }


def _calendar(start: date, end: date) -> List[date]:
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def build_nav_series(
    transactions: Sequence[Transaction],
    prices: DailyPriceSeries,
    native: Mapping[str, Currency],
    target: Currency,
    matrix: FxMatrix,
    *,
    end: date,
    default_currency: Currency = Currency.USD,
) -> List[NavDay]:
    """Compute one :class:`NavDay` per calendar day from inception to ``end``.

    Each day first applies its own transactions (quantities and external
    flow), then values every long position at that day's forward-filled
    close. Symbols without a close yet contribute nothing.
    """

    if not transactions:
        return []
    inception = min(tx.date for tx in transactions)
    if end < inception:
        return []

    by_day: Dict[date, List[Transaction]] = {}
    for tx in transactions:
        if tx.date <= end:
            by_day.setdefault(tx.date, []).append(tx)

    quantities: Dict[str, float] = {}
    series: List[NavDay] = []
    for day in _calendar(inception, end):
        flow = 0.0
        for tx in by_day.get(day, []):
            quantities[tx.symbol] = quantities.get(tx.symbol, 0.0) + tx.side.sign * tx.quantity
            flow += trade_cash_flow(tx, target, matrix)

        nav = 0.0
        for symbol, quantity in quantities.items():
            if quantity <= QUANTITY_EPSILON:
                continue
            close = prices.close(symbol, day)
            if close is None:
                continue
            currency = native.get(symbol, default_currency)
            nav += quantity * convert_amount(close, currency, target, matrix)
        series.append(NavDay(date=day, nav=nav, external_flow=flow))
    return series


__all__ = [
    "build_nav_series",
    "last_trade_currencies",
    "native_currencies",
    "resolve_native_currency",
]
