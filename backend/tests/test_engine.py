from __future__ import annotations

from datetime import date, timedelta

import pytest

from conftest import buy, sell
from portfolio_engine import (
    Currency,
    FxRateRow,
    InvalidValuationRequest,
    StoreUnavailableError,
    ValuationEngine,
)
from portfolio_engine.sources import (
    InMemoryFxStore,
    InMemoryLedgerStore,
    InMemoryPriceStore,
    InMemorySymbolStore,
)

D1 = date(2024, 4, 1)
D2 = D1 + timedelta(days=1)
D3 = D1 + timedelta(days=2)


def make_engine(ledger, closes=None, rates=(), symbols=None) -> ValuationEngine:
    return ValuationEngine(
        InMemoryLedgerStore({"u1": ledger}),
        InMemoryFxStore(rates),
        InMemoryPriceStore(closes or {}),
        InMemorySymbolStore(symbols or {}),
    )


class BrokenLedger:
    async def list_transactions(self, user_id):
        raise StoreUnavailableError("ledger offline")


async def test_single_buy_then_ten_percent_gain():
    engine = make_engine([buy(D1, "X", 10, 100)], {"X": {D1: 100.0, D2: 110.0}})
    result = await engine.get_performance("u1", "USD", D1, D2)

    assert [(p.date, p.net_assets) for p in result.points] == [(D1, 1000.0), (D2, 1100.0)]
    assert result.points[0].yield_twr == 0.0
    assert result.points[1].yield_twr == pytest.approx(10.0)
    assert result.points[1].yield_mwr == pytest.approx(10.0)
    assert result.total_return_twr == pytest.approx(10.0)
    assert result.prev_day_return_twr == pytest.approx(10.0)
    assert result.warnings == []


async def test_display_window_is_rebased_but_totals_are_not():
    engine = make_engine([buy(D1, "X", 1, 100)], {"X": {D1: 100.0, D2: 110.0, D3: 121.0}})
    result = await engine.get_performance("u1", Currency.USD, D2, D3)

    assert [p.date for p in result.points] == [D2, D3]
    assert result.points[0].yield_twr == 0.0
    assert result.points[1].yield_twr == pytest.approx(10.0)
    assert result.total_return_twr == pytest.approx(21.0)


async def test_price_seeded_from_before_inception():
    engine = make_engine([buy(D2, "X", 2, 50)], {"X": {D1 - timedelta(days=3): 48.0}})
    result = await engine.get_performance("u1", "usd", D2, D3)
    assert [p.net_assets for p in result.points] == [96.0, 96.0]


async def test_sold_out_symbol_is_valued_while_held():
    ledger = [buy(D1, "A", 1, 100), buy(D1, "B", 1, 50), sell(D2, "A", 1, 120)]
    closes = {"A": {D1: 100.0, D2: 120.0}, "B": {D1: 50.0}}
    result = await make_engine(ledger, closes).get_performance("u1", "USD", D1, D3)
    assert [p.net_assets for p in result.points] == [150.0, 50.0, 50.0]


async def test_snapshot_in_target_currency():
    ledger = [buy(D1, "SAP", 10, 100, Currency.EUR), buy(D1, "X", 5, 10)]
    engine = make_engine(
        ledger,
        {"SAP": {D1: 100.0, D2: 110.0}, "X": {D2: 12.0}},
        rates=[FxRateRow(Currency.EUR, Currency.USD, 1.1)],
        symbols={"SAP": Currency.EUR},
    )
    snapshot = await engine.get_snapshot("u1", "USD")

    assert [item.symbol for item in snapshot.items] == ["SAP", "X"]
    assert snapshot.items[0].value == pytest.approx(1210.0)
    assert snapshot.items[0].avg_cost == pytest.approx(110.0)
    assert snapshot.total_value == pytest.approx(1270.0)
    assert snapshot.warnings == []


async def test_unreachable_currency_is_passed_through_with_warning():
    engine = make_engine([buy(D1, "0700", 1, 300, Currency.HKD)], {"0700": {D1: 300.0}})
    snapshot = await engine.get_snapshot("u1", "EUR")

    assert snapshot.items[0].value == 300.0
    assert len(snapshot.warnings) == 1
    assert "HKD" in snapshot.warnings[0]


async def test_empty_ledger_gives_empty_results():
    engine = make_engine([])
    snapshot = await engine.get_snapshot("nobody", "USD")
    result = await engine.get_performance("nobody", "GBP", D1, D3)

    assert snapshot.items == [] and snapshot.total_value == 0
    assert result.points == []
    assert result.total_return_twr == result.total_return_mwr == 0.0
    assert (result.start, result.end) == (D1, D3)


async def test_range_before_inception_is_empty():
    engine = make_engine([buy(D3, "X", 1, 1)], {"X": {D3: 1.0}})
    result = await engine.get_performance("u1", "USD", D1, D2)
    assert result.points == []


async def test_round_trip_symbol_excluded_from_snapshot():
    engine = make_engine([buy(D1, "X", 10, 100), sell(D2, "X", 10, 100)], {"X": {D2: 100.0}})
    snapshot = await engine.get_snapshot("u1", "USD")
    assert snapshot.items == []


@pytest.mark.parametrize("currency", ["JPY", "", "dollars"])
async def test_unsupported_currency_is_rejected(currency):
    with pytest.raises(InvalidValuationRequest):
        await make_engine([]).get_snapshot("u1", currency)


async def test_inverted_range_is_rejected():
    with pytest.raises(InvalidValuationRequest):
        await make_engine([]).get_performance("u1", "USD", D3, D1)


async def test_store_failure_propagates():
    engine = ValuationEngine(
        BrokenLedger(),
        InMemoryFxStore(),
        InMemoryPriceStore(),
        InMemorySymbolStore(),
    )
    with pytest.raises(StoreUnavailableError):
        await engine.get_snapshot("u1", "USD")


async def test_ledger_symbols_are_normalized():
    ledger = [buy(D1, "aapl", 5, 10), buy(D1, " AAPL", 5, 10)]
    engine = make_engine(ledger, {"AAPL": {D1: 10.0}}, symbols={"aapl": Currency.USD})

    snapshot = await engine.get_snapshot("u1", "USD")
    result = await engine.get_performance("u1", "USD", D1, D1)

    [item] = snapshot.items
    assert (item.symbol, item.quantity, item.value) == ("AAPL", 10, 100.0)
    assert [p.net_assets for p in result.points] == [100.0]
