from __future__ import annotations

from datetime import date, timedelta

import pytest

from portfolio_engine.models import NavDay
from portfolio_engine.returns import (
    BASE_INDEX,
    chain_link,
    daily_mwr,
    daily_twr,
    rebase_window,
    summarize,
)

START = date(2024, 2, 1)


def nav_days(*values: tuple[float, float]) -> list[NavDay]:
    return [
        NavDay(date=START + timedelta(days=offset), nav=nav, external_flow=flow)
        for offset, (nav, flow) in enumerate(values)
    ]


def test_chain_starts_at_base_index():
    [first, *_] = chain_link(nav_days((1000, 1000), (1050, 0)))
    assert first.twr_index == first.mwr_index == BASE_INDEX


def test_unchanged_day_keeps_indices():
    chain = chain_link(nav_days((500, 500), (550, 0), (550, 0)))
    assert chain[2].twr_index == chain[1].twr_index
    assert chain[2].mwr_index == chain[1].mwr_index
    assert daily_twr(550, 550, 0) == 0.0
    assert daily_mwr(550, 550, 0) == 0.0


def test_ten_percent_gain_day():
    chain = chain_link(nav_days((1000, 1000), (1100, 0)))
    assert chain[1].twr_index == pytest.approx(110.0)
    assert chain[1].mwr_index == pytest.approx(110.0)


def test_flows_are_excluded_from_twr():
    # 1000 -> 1100 on market move, then 500 more invested with no price change
    chain = chain_link(nav_days((1000, 1000), (1100, 0), (1600, 500)))
    assert chain[2].twr_index == pytest.approx(110.0)


def test_modified_dietz_weights_flow_at_half():
    assert daily_mwr(1000, 1650, 500) == pytest.approx(150 / 1250)


def test_zero_previous_nav_uses_unit_divisor():
    assert daily_twr(0.0, 1000.0, 1000.0) == 0.0
    assert daily_twr(0.0, 1010.0, 1000.0) == pytest.approx(10.0)


def test_zero_dietz_denominator_gives_zero_return():
    assert daily_mwr(100.0, 0.0, -200.0) == 0.0


def test_window_rebases_to_zero_at_first_point():
    chain = chain_link(nav_days((1000, 1000), (1100, 0), (1210, 0), (1331, 0)))
    window = rebase_window(chain, START + timedelta(days=1), START + timedelta(days=3))
    assert window[0].yield_twr == 0.0
    assert window[0].yield_mwr == 0.0
    assert window[1].yield_twr == pytest.approx(10.0)
    assert window[2].yield_twr == pytest.approx(21.0)
    assert [p.net_assets for p in window] == [1100, 1210, 1331]


def test_window_outside_chain_is_empty():
    chain = chain_link(nav_days((1000, 1000)))
    assert rebase_window(chain, START + timedelta(days=5), START + timedelta(days=6)) == []


def test_summary_is_inception_to_date():
    chain = chain_link(nav_days((1000, 1000), (1100, 0), (1210, 0)))
    summary = summarize(chain)
    assert summary.total_return_twr == pytest.approx(21.0)
    assert summary.total_return_mwr == pytest.approx(21.0)
    assert summary.prev_day_return_twr == pytest.approx(10.0)


def test_summary_of_single_point():
    summary = summarize(chain_link(nav_days((1000, 1000))))
    assert summary.total_return_twr == 0.0
    assert summary.prev_day_return_twr == 0.0
    assert summarize([]).total_return_mwr == 0.0
