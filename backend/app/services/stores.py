"""SQLAlchemy-backed implementations of the valuation engine's stores."""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import Select, and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import DailyBar, FXRate, Transaction, WatchlistItem
from portfolio_engine.models import (
    Currency,
    FxRateRow,
    PricePoint,
    TransactionSide,
    normalize_symbol,
)
from portfolio_engine.models import Transaction as LedgerTransaction
from portfolio_engine.sources import StoreUnavailableError

logger = logging.getLogger(__name__)


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(Decimal(str(value)))


def _to_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


async def _fetch_all(session: AsyncSession, stmt: Select, what: str) -> list[Any]:
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise StoreUnavailableError(f"Failed to load {what}") from exc
    return list(result.scalars().all())


def _ledger_transaction(row: Transaction) -> LedgerTransaction:
    quantity = _to_float(row.quantity) or 0.0
    price = _to_float(row.price) or 0.0
    if quantity <= 0 or price <= 0:
        raise ValueError(f"non-positive quantity or price on transaction {row.id}")
    fee = _to_float(row.fee)
    if fee is not None and fee < 0:
        raise ValueError(f"negative fee on transaction {row.id}")
    fee_currency = Currency.parse(row.fee_currency) if row.fee_currency else None
    return LedgerTransaction(
        date=_to_date(row.date),
        symbol=normalize_symbol(row.symbol),
        side=TransactionSide(row.side),
        quantity=quantity,
        price=price,
        price_currency=Currency.parse(row.price_currency or Currency.USD),
        fee=fee,
        fee_currency=fee_currency,
    )


class SqlLedgerStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_transactions(self, user_id: str) -> list[LedgerTransaction]:
        stmt = (
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.date, Transaction.id)
        )
        rows = await _fetch_all(self.session, stmt, "transactions")
        transactions: list[LedgerTransaction] = []
        for row in rows:
            try:
                transactions.append(_ledger_transaction(row))
            except ValueError:
                logger.warning(
                    "Skipping transaction %s for user %s with invalid side, currency, quantity, price or fee",
                    row.id,
                    user_id,
                )
        return transactions


class SqlFxStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_fx_rates(self) -> list[FxRateRow]:
        stmt = select(FXRate).order_by(FXRate.base, FXRate.quote)
        rows = await _fetch_all(self.session, stmt, "FX rates")
        rates: list[FxRateRow] = []
        for row in rows:
            try:
                base = Currency.parse(row.base)
                quote = Currency.parse(row.quote)
            except ValueError:
                logger.warning("Skipping FX rate %s->%s with unsupported currency", row.base, row.quote)
                continue
            rates.append(
                FxRateRow(base=base, quote=quote, rate=_to_float(row.rate) or 0.0, fetched_at=row.fetched_at)
            )
        return rates


class SqlPriceStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_daily_closes(
        self,
        symbols: Sequence[str],
        start: date,
        stop: date,
    ) -> list[PricePoint]:
        if not symbols:
            return []
        stmt = (
            select(DailyBar)
            .where(
                DailyBar.symbol.in_(list(symbols)),
                DailyBar.date >= start,
                DailyBar.date < stop,
            )
            .order_by(DailyBar.symbol, DailyBar.date)
        )
        rows = await _fetch_all(self.session, stmt, "daily closes")
        return [
            PricePoint(symbol=normalize_symbol(row.symbol), date=row.date, close=_to_float(row.close) or 0.0)
            for row in rows
            if row.close is not None
        ]

    async def latest_closes(self, symbols: Sequence[str]) -> dict[str, Optional[float]]:
        latest: dict[str, Optional[float]] = {symbol: None for symbol in symbols}
        if not symbols:
            return latest
        last_day = (
            select(DailyBar.symbol, func.max(DailyBar.date).label("date"))
            .where(DailyBar.symbol.in_(list(symbols)))
            .group_by(DailyBar.symbol)
            .subquery()
        )
        stmt = select(DailyBar).join(
            last_day,
            and_(DailyBar.symbol == last_day.c.symbol, DailyBar.date == last_day.c.date),
        )
        for row in await _fetch_all(self.session, stmt, "latest closes"):
            latest[row.symbol] = _to_float(row.close)
        return latest


class SqlSymbolStore:
    """Reads the trading currency a user registered for a symbol."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def trading_currency(self, symbol: str, user_id: str) -> Optional[Currency]:
        stmt = select(WatchlistItem).where(
            WatchlistItem.user_id == user_id,
            WatchlistItem.symbol == symbol,
        )
        rows = await _fetch_all(self.session, stmt, f"metadata for {symbol}")
        if not rows or not rows[0].currency:
            return None
        try:
            return Currency.parse(rows[0].currency)
        except ValueError:
            logger.warning("Ignoring unsupported currency %r registered for %s", rows[0].currency, symbol)
            return None

    async def trading_currencies(
        self,
        symbols: Sequence[str],
        user_id: str,
    ) -> dict[str, Optional[Currency]]:
        currencies: dict[str, Optional[Currency]] = {symbol: None for symbol in symbols}
        if not symbols:
            return currencies
        stmt = select(WatchlistItem).where(
            WatchlistItem.user_id == user_id,
            WatchlistItem.symbol.in_(list(symbols)),
        )
        for row in await _fetch_all(self.session, stmt, "symbol metadata"):
            if not row.currency:
                continue
            try:
                currencies[row.symbol] = Currency.parse(row.currency)
            except ValueError:
                logger.warning("Ignoring unsupported currency %r registered for %s", row.currency, row.symbol)
        return currencies


__all__ = ["SqlLedgerStore", "SqlFxStore", "SqlPriceStore", "SqlSymbolStore"]
