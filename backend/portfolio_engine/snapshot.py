"""Current holdings valuation with per-symbol weights."""
from __future__ import annotations

from typing import Iterable, Mapping, Optional

from .fx import FxMatrix, convert_amount
from .models import Currency, Holding, Snapshot, SnapshotItem


def compose_snapshot(
    holdings: Iterable[Holding],
    latest_prices: Mapping[str, Optional[float]],
    native: Mapping[str, Currency],
    target: Currency,
    matrix: FxMatrix,
    *,
    default_currency: Currency = Currency.USD,
) -> Snapshot:
    """Value each holding at its latest close and weight it by total value.

    Positions without a price (or with a non-positive value) are dropped.
    Items are ordered by value, largest first.
    """

    valued: list[tuple[Holding, float, float]] = []
    for holding in holdings:
        close = latest_prices.get(holding.symbol) or 0.0
        currency = native.get(holding.symbol, default_currency)
        price = convert_amount(close, currency, target, matrix)
        value = holding.quantity * price
        if value > 0:
            valued.append((holding, price, value))

    total_value = sum(value for _, _, value in valued)
    items = [
        SnapshotItem(
            symbol=holding.symbol,
            quantity=holding.quantity,
            avg_cost=holding.avg_cost,
            price=price,
            value=value,
            weight=value / total_value if total_value > 0 else 0.0,
        )
        for holding, price, value in valued
    ]
    items.sort(key=lambda item: (-item.value, item.symbol))
    return Snapshot(currency=target, items=items, total_value=total_value)


__all__ = ["compose_snapshot"]
