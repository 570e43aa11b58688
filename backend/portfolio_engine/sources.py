"""Read-only store interfaces consumed by the valuation engine.

The engine never talks to a database directly; the service layer plugs in
SQL-backed implementations and the tests use the in-memory ones below.
"""
from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from .models import Currency, FxRateRow, PricePoint, Transaction, normalize_symbol


class StoreUnavailableError(RuntimeError):
    """Raised when a backing store cannot answer a query."""


class LedgerStore(Protocol):
    async def list_transactions(self, user_id: str) -> list[Transaction]:
        ...


class FxStore(Protocol):
    async def list_fx_rates(self) -> list[FxRateRow]:
        ...


class PriceStore(Protocol):
    async def list_daily_closes(
        self,
        symbols: Sequence[str],
        start: date,
        stop: date,
    ) -> list[PricePoint]:
        """Return raw closes with ``start <= day < stop``."""
        ...

    async def latest_closes(self, symbols: Sequence[str]) -> dict[str, Optional[float]]:
        ...


class SymbolStore(Protocol):
    async def trading_currency(self, symbol: str, user_id: str) -> Optional[Currency]:
        ...

    async def trading_currencies(
        self,
        symbols: Sequence[str],
        user_id: str,
    ) -> dict[str, Optional[Currency]]:
        """Batch form of :meth:`trading_currency`, keyed by every requested symbol."""
        ...


class InMemoryLedgerStore:
    """Simple ledger for tests and examples."""

    def __init__(self, transactions: Mapping[str, Iterable[Transaction]] | None = None):
        self._transactions = {user: list(txs) for user, txs in (transactions or {}).items()}

    async def list_transactions(self, user_id: str) -> list[Transaction]:
        return list(self._transactions.get(user_id, []))


class InMemoryFxStore:
    def __init__(self, rates: Iterable[FxRateRow] = ()):
        self._rates = list(rates)

    async def list_fx_rates(self) -> list[FxRateRow]:
        return list(self._rates)


class InMemoryPriceStore:
    """Daily closes keyed by symbol then day."""

    def __init__(self, closes: Mapping[str, Mapping[date, float]] | None = None):
        self._closes = {
            normalize_symbol(symbol): dict(days) for symbol, days in (closes or {}).items()
        }

    async def list_daily_closes(
        self,
        symbols: Sequence[str],
        start: date,
        stop: date,
    ) -> list[PricePoint]:
        points: list[PricePoint] = []
        for symbol in symbols:
            for day, close in sorted(self._closes.get(symbol, {}).items()):
                if start <= day < stop:
                    points.append(PricePoint(symbol=symbol, date=day, close=close))
        return points

    async def latest_closes(self, symbols: Sequence[str]) -> dict[str, Optional[float]]:
        latest: dict[str, Optional[float]] = {}
        for symbol in symbols:
            series = self._closes.get(symbol, {})
            latest[symbol] = series[max(series)] if series else None
        return latest


class InMemorySymbolStore:
    def __init__(self, currencies: Mapping[str, Currency] | None = None):
        self._currencies = {normalize_symbol(k): v for k, v in (currencies or {}).items()}

    async def trading_currency(self, symbol: str, user_id: str) -> Optional[Currency]:
        return self._currencies.get(symbol)

    async def trading_currencies(
        self,
        symbols: Sequence[str],
        user_id: str,
    ) -> dict[str, Optional[Currency]]:
        return {symbol: self._currencies.get(symbol) for symbol in symbols}


__all__ = [
    "StoreUnavailableError",
    "LedgerStore",
    "FxStore",
    "PriceStore",
    "SymbolStore",
    "InMemoryLedgerStore",
    "InMemoryFxStore",
    "InMemoryPriceStore",
    "InMemorySymbolStore",
]
