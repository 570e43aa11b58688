"""Request-scoped orchestration of the valuation components."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, Sequence

from .fx import PIVOT_CURRENCY, FxMatrix, build_fx_matrix, missing_fx_paths
from .holdings import reconstruct_holdings
from .models import Currency, PerformanceResult, Snapshot, Transaction
from .nav import build_nav_series, native_currencies
from .prices import SEED_DAYS, build_price_series, seed_start
from .returns import chain_link, rebase_window, summarize
from .snapshot import compose_snapshot
from .sources import FxStore, LedgerStore, PriceStore, SymbolStore

logger = logging.getLogger(__name__)


class InvalidValuationRequest(ValueError):
    """Raised before any computation when request parameters are unusable."""


def parse_currency(value: str | Currency) -> Currency:
    try:
        return Currency.parse(value)
    except ValueError as exc:
        raise InvalidValuationRequest(f"Unsupported currency: {value}") from exc


class ValuationEngine:
    """Build holdings snapshots and TWR/MWR performance series for a user.

    All state lives for the duration of one call: the FX matrix and price
    series are rebuilt from the stores every time.
    """

    def __init__(
        self,
        ledger: LedgerStore,
        fx: FxStore,
        prices: PriceStore,
        symbols: SymbolStore,
        *,
        pivot_currency: Currency = PIVOT_CURRENCY,
        default_currency: Currency = Currency.USD,
        seed_days: int = SEED_DAYS,
    ):
        self.ledger = ledger
        self.fx = fx
        self.prices = prices
        self.symbols = symbols
        self.pivot_currency = pivot_currency
        self.default_currency = default_currency
        self.seed_days = seed_days

    async def get_snapshot(self, user_id: str, currency: str | Currency) -> Snapshot:
        target = parse_currency(currency)
        transactions = await self.ledger.list_transactions(user_id)
        if not transactions:
            return Snapshot(currency=target)

        matrix = await self._fx_matrix()
        holdings = reconstruct_holdings(transactions, target, matrix)
        held = [holding.symbol for holding in holdings]
        native = await self._native_currencies(held, user_id, transactions)
        latest = await self.prices.latest_closes(held) if held else {}

        snapshot = compose_snapshot(
            holdings,
            latest,
            native,
            target,
            matrix,
            default_currency=self.default_currency,
        )
        snapshot.warnings = missing_fx_paths(
            _source_currencies(transactions, native.values()), target, matrix
        )
        logger.info(
            "Snapshot for user %s in %s: %d positions, total %.2f",
            user_id,
            target.value,
            len(snapshot.items),
            snapshot.total_value,
        )
        return snapshot

    async def get_performance(
        self,
        user_id: str,
        currency: str | Currency,
        start: date,
        end: date,
    ) -> PerformanceResult:
        target = parse_currency(currency)
        if start > end:
            raise InvalidValuationRequest("from date must not be after to date")

        result = PerformanceResult(currency=target, start=start, end=end)
        transactions = await self.ledger.list_transactions(user_id)
        if not transactions:
            return result
        inception = min(tx.date for tx in transactions)
        if end < inception:
            logger.debug("Range ends %s before inception %s for user %s", end, inception, user_id)
            return result

        matrix = await self._fx_matrix()
        traded = sorted({tx.symbol for tx in transactions})
        native = await self._native_currencies(traded, user_id, transactions)
        raw_closes = await self.prices.list_daily_closes(
            traded,
            seed_start(inception, self.seed_days),
            end + timedelta(days=1),
        )

        series = build_price_series(raw_closes, inception, end)
        nav_days = build_nav_series(
            transactions,
            series,
            native,
            target,
            matrix,
            end=end,
            default_currency=self.default_currency,
        )
        chain = chain_link(nav_days)
        summary = summarize(chain)

        result.points = rebase_window(chain, start, end)
        result.total_return_twr = summary.total_return_twr
        result.total_return_mwr = summary.total_return_mwr
        result.prev_day_return_twr = summary.prev_day_return_twr
        result.prev_day_return_mwr = summary.prev_day_return_mwr
        result.warnings = missing_fx_paths(
            _source_currencies(transactions, native.values()), target, matrix
        )
        logger.info(
            "Performance for user %s in %s: %d chain days, %d displayed",
            user_id,
            target.value,
            len(chain),
            len(result.points),
        )
        return result

    async def fx_matrix(self) -> FxMatrix:
        return await self._fx_matrix()

    async def _fx_matrix(self) -> FxMatrix:
        rows = await self.fx.list_fx_rates()
        return build_fx_matrix(rows, pivot=self.pivot_currency)

    async def _native_currencies(
        self,
        symbols: Sequence[str],
        user_id: str,
        transactions: Sequence[Transaction],
    ) -> dict[str, Currency]:
        registered = await self.symbols.trading_currencies(symbols, user_id) if symbols else {}
        return native_currencies(symbols, registered, transactions, self.default_currency)


def _source_currencies(
    transactions: Iterable[Transaction],
    native: Iterable[Currency],
) -> set[Currency]:
    currencies = set(native)
    for tx in transactions:
        currencies.add(tx.price_currency)
        if tx.fee_amount:
            currencies.add(tx.effective_fee_currency)
    return currencies


__all__ = ["InvalidValuationRequest", "ValuationEngine", "parse_currency"]
