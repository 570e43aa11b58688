"""Compute a user's snapshot and performance summary from the configured database."""

from __future__ import annotations

import argparse
import asyncio
from datetime import date

from app.config import get_settings
from app.core.logging import setup_logging
from app.db.session import get_session_factory
from app.services.valuation import build_valuation_service
from portfolio_engine import Currency


async def _run(user_id: str, currency: str, start: date, end: date) -> None:
    settings = get_settings()
    async with get_session_factory()() as session:
        service = build_valuation_service(session, settings)
        snapshot = await service.snapshot(user_id, currency)
        result = await service.performance(user_id, currency, start, end)

    print(f"Snapshot ({snapshot.currency.value}): total {snapshot.total_value:.2f}")
    for item in snapshot.items:
        print(f"  {item.symbol:<10} qty {item.quantity:>12.4f}  value {item.value:>14.2f}  weight {item.weight:6.2%}")
    print(f"Performance {result.start} -> {result.end}: {len(result.points)} points")
    if result.points:
        last = result.points[-1]
        print(f"  net assets {last.net_assets:.2f}  window TWR {last.yield_twr:.2f}%  window MWR {last.yield_mwr:.2f}%")
    print(f"  total return TWR {result.total_return_twr:.2f}%  MWR {result.total_return_mwr:.2f}%")
    print(f"  previous day TWR {result.prev_day_return_twr:.2f}%  MWR {result.prev_day_return_mwr:.2f}%")
    for warning in {*snapshot.warnings, *result.warnings}:
        print(f"  warning: {warning}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute portfolio snapshot and returns for a user")
    parser.add_argument("--user", required=True)
    parser.add_argument("--currency", default=get_settings().base_currency.value, choices=[c.value for c in Currency])
    parser.add_argument("--from", dest="start", type=date.fromisoformat)
    parser.add_argument("--to", dest="end", type=date.fromisoformat)
    args = parser.parse_args()

    setup_logging()
    end = args.end or date.today()
    start = args.start or end.replace(day=1)
    asyncio.run(_run(args.user, args.currency, start, end))


if __name__ == "__main__":
    main()
