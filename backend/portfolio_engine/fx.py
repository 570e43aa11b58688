"""FX matrix construction and currency conversion helpers."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from .models import Currency, FxRateRow

logger = logging.getLogger(__name__)

PIVOT_CURRENCY = Currency.USD


@dataclass(frozen=True)
class FxMatrix:
    """Any-to-any conversion table built once per request.

    ``rates[base][quote]`` converts one unit of ``base`` into ``quote``. Pairs
    absent from the table are resolved through ``pivot`` when both legs exist.
    """

    rates: Mapping[Currency, Mapping[Currency, float]]
    pivot: Currency = PIVOT_CURRENCY

    def direct(self, from_currency: Currency, to_currency: Currency) -> Optional[float]:
        return self.rates.get(from_currency, {}).get(to_currency)

    def rate(self, from_currency: Currency, to_currency: Currency) -> Optional[float]:
        """Return the rate from ``from_currency`` to ``to_currency`` or ``None``."""

        if from_currency == to_currency:
            return 1.0
        direct = self.direct(from_currency, to_currency)
        if direct is not None:
            return direct
        to_pivot = self.direct(from_currency, self.pivot)
        from_pivot = self.direct(self.pivot, to_currency)
        if to_pivot is not None and from_pivot is not None:
            return to_pivot * from_pivot
        return None

    def has_path(self, from_currency: Currency, to_currency: Currency) -> bool:
        return self.rate(from_currency, to_currency) is not None

    def as_table(self, *, include_derived: bool = True) -> dict[str, dict[str, float]]:
        """Render the matrix keyed by currency code.

        With ``include_derived`` the pivot-triangulated pairs are included, so
        the table answers every pair that :func:`convert_amount` can convert.
        """

        table: dict[str, dict[str, float]] = {}
        for base in Currency:
            row: dict[str, float] = {}
            for quote in Currency:
                value = self.rate(base, quote) if include_derived else self.direct(base, quote)
                if value is not None:
                    row[quote.value] = value
            table[base.value] = row
        return table


def build_fx_matrix(rows: Iterable[FxRateRow], *, pivot: Currency = PIVOT_CURRENCY) -> FxMatrix:
    """Build an :class:`FxMatrix` from stored directed rates.

    Stored rates are written first and reciprocals only fill pairs that have
    no stored rate, so a stored reverse quote always wins over an inferred
    one regardless of row order. Missing pairs are not an error.
    """

    table: Dict[Currency, Dict[Currency, float]] = {c: {c: 1.0} for c in Currency}
    stored: list[FxRateRow] = []
    for row in rows:
        if not math.isfinite(row.rate) or row.rate <= 0:
            logger.warning("Skipping FX rate %s->%s with invalid value %r", row.base, row.quote, row.rate)
            continue
        if row.base == row.quote:
            continue
        stored.append(row)

    for row in stored:
        table[row.base][row.quote] = row.rate
    explicit = {(row.base, row.quote) for row in stored}
    for row in stored:
        if (row.quote, row.base) not in explicit:
            table[row.quote][row.base] = 1.0 / row.rate

    frozen = {base: MappingProxyType(quotes) for base, quotes in table.items()}
    return FxMatrix(rates=MappingProxyType(frozen), pivot=pivot)


def convert_amount(
    amount: float,
    from_currency: Currency,
    to_currency: Currency,
    matrix: FxMatrix,
) -> float:
    """Convert ``amount`` between currencies.

    Uses the direct rate, then triangulation through the pivot currency. When
    no path exists the amount is returned unchanged; callers surface that gap
    through :func:`missing_fx_paths`.
    """

    if from_currency == to_currency:
        return amount
    rate = matrix.rate(from_currency, to_currency)
    if rate is None:
        return amount
    return amount * rate


def missing_fx_paths(
    currencies: Iterable[Currency],
    target: Currency,
    matrix: FxMatrix,
) -> list[str]:
    """Describe every currency in ``currencies`` that cannot reach ``target``."""

    warnings: list[str] = []
    for currency in sorted(set(currencies), key=lambda c: c.value):
        if not matrix.has_path(currency, target):
            message = (
                f"No FX rate path from {currency.value} to {target.value}; "
                f"{currency.value} amounts are reported unconverted"
            )
            logger.warning(message)
            warnings.append(message)
    return warnings


__all__ = [
    "PIVOT_CURRENCY",
    "FxMatrix",
    "build_fx_matrix",
    "convert_amount",
    "missing_fx_paths",
]
