from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.db.init import init_database
from app.models import DailyBar, FXRate, Transaction, WatchlistItem
from app.services.stores import SqlFxStore, SqlLedgerStore, SqlPriceStore, SqlSymbolStore
from app.services.valuation import build_valuation_service
from app.config import get_settings
from portfolio_engine import Currency, StoreUnavailableError, TransactionSide

D1 = date(2024, 6, 3)
D2 = date(2024, 6, 4)


def _engine(tmp_path: Path):
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'valuation.db'}")


async def _seeded(tmp_path: Path):
    engine = _engine(tmp_path)
    await init_database(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        session.add_all(
            [
                Transaction(
                    user_id="u1",
                    date=datetime(2024, 6, 3, 14, 30, tzinfo=timezone.utc),
                    symbol="sap",
                    side="BUY",
                    quantity=10,
                    price=100,
                    price_currency="EUR",
                    fee=2,
                ),
                Transaction(
                    user_id="u1",
                    date=datetime(2024, 6, 4, tzinfo=timezone.utc),
                    symbol="SAP",
                    side="SELL",
                    quantity=4,
                    price=110,
                    price_currency="EUR",
                ),
                Transaction(
                    user_id="u1",
                    date=datetime(2024, 6, 4, tzinfo=timezone.utc),
                    symbol="ZZZ",
                    side="BUY",
                    quantity=1,
                    price=1,
                    price_currency="XXX",
                ),
                Transaction(
                    user_id="u1",
                    date=datetime(2024, 6, 4, tzinfo=timezone.utc),
                    symbol="SAP",
                    side="BUY",
                    quantity=0,
                    price=110,
                ),
                Transaction(
                    user_id="u1",
                    date=datetime(2024, 6, 4, tzinfo=timezone.utc),
                    symbol="SAP",
                    side="BUY",
                    quantity=1,
                    price=110,
                    fee=-5,
                ),
                Transaction(
                    user_id="u2",
                    date=datetime(2024, 6, 3, tzinfo=timezone.utc),
                    symbol="X",
                    side="BUY",
                    quantity=1,
                    price=1,
                ),
                WatchlistItem(user_id="u1", symbol="SAP", currency="EUR"),
                WatchlistItem(user_id="u1", symbol="ODD", currency="ABC"),
                DailyBar(symbol="SAP", date=D1, close=100),
                DailyBar(symbol="SAP", date=D2, close=110),
                DailyBar(symbol="MSFT", date=D2, close=400),
                FXRate(base="EUR", quote="USD", rate=1.1, fetched_at=datetime(2024, 6, 4, tzinfo=timezone.utc)),
                FXRate(base="EUR", quote="JPY", rate=160),
                FXRate(base="GBP", quote="USD", rate=1.27),
                FXRate(base="CHF", quote="USD", rate=1.12),
            ]
        )
        await session.commit()
    return engine, factory


async def test_ledger_rows_are_converted(tmp_path: Path):
    engine, factory = await _seeded(tmp_path)
    async with factory() as session:
        transactions = await SqlLedgerStore(session).list_transactions("u1")
    await engine.dispose()

    assert [(tx.date, tx.symbol, tx.side) for tx in transactions] == [
        (D1, "SAP", TransactionSide.BUY),
        (D2, "SAP", TransactionSide.SELL),
    ]
    assert transactions[0].price_currency is Currency.EUR
    assert transactions[0].fee == 2.0
    assert transactions[1].fee is None
    assert all(tx.fee is None or tx.fee >= 0 for tx in transactions)


async def test_fx_rows_skip_unsupported_currencies(tmp_path: Path):
    engine, factory = await _seeded(tmp_path)
    async with factory() as session:
        rates = await SqlFxStore(session).list_fx_rates()
    await engine.dispose()

    assert [(r.base, r.quote) for r in rates] == [
        (Currency.CHF, Currency.USD),
        (Currency.EUR, Currency.USD),
        (Currency.GBP, Currency.USD),
    ]
    assert rates[1].rate == pytest.approx(1.1)
    assert rates[1].fetched_at is not None


async def test_price_queries(tmp_path: Path):
    engine, factory = await _seeded(tmp_path)
    async with factory() as session:
        store = SqlPriceStore(session)
        closes = await store.list_daily_closes(["SAP", "MSFT"], D1, D2)
        latest = await store.latest_closes(["SAP", "MSFT", "NONE"])
    await engine.dispose()

    assert [(p.symbol, p.date, p.close) for p in closes] == [("SAP", D1, 100.0)]
    assert latest == {"SAP": 110.0, "MSFT": 400.0, "NONE": None}


async def test_trading_currency_lookup(tmp_path: Path):
    engine, factory = await _seeded(tmp_path)
    async with factory() as session:
        store = SqlSymbolStore(session)
        assert await store.trading_currency("SAP", "u1") is Currency.EUR
        assert await store.trading_currency("SAP", "u2") is None
        assert await store.trading_currency("ODD", "u1") is None
        assert await store.trading_currencies(["SAP", "ODD", "MSFT"], "u1") == {
            "SAP": Currency.EUR,
            "ODD": None,
            "MSFT": None,
        }
        assert await store.trading_currencies([], "u1") == {}
    await engine.dispose()


async def test_missing_tables_raise_store_unavailable(tmp_path: Path):
    engine = _engine(tmp_path)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        with pytest.raises(StoreUnavailableError):
            await SqlLedgerStore(session).list_transactions("u1")
    await engine.dispose()


async def test_service_over_sql_stores(tmp_path: Path):
    engine, factory = await _seeded(tmp_path)
    async with factory() as session:
        service = build_valuation_service(session, get_settings())
        snapshot = await service.snapshot("u1", "USD")
        result = await service.performance("u1", "EUR", D1, D2)
    await engine.dispose()

    [item] = snapshot.items
    assert item.symbol == "SAP"
    assert item.quantity == pytest.approx(6.0)
    assert item.value == pytest.approx(6 * 110 * 1.1)
    assert [p.net_assets for p in result.points] == [pytest.approx(1000.0), pytest.approx(660.0)]
