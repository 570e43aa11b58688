import asyncio
import inspect
import pathlib
import sys
from datetime import date

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.config import get_settings  # noqa: E402
from portfolio_engine.models import Currency, Transaction, TransactionSide  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        funcargs = {name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames}
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            loop.run_until_complete(test_function(**funcargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def buy(day: date, symbol: str, quantity: float, price: float, currency: Currency = Currency.USD, **kwargs) -> Transaction:
    return Transaction(
        date=day,
        symbol=symbol,
        side=TransactionSide.BUY,
        quantity=quantity,
        price=price,
        price_currency=currency,
        **kwargs,
    )


def sell(day: date, symbol: str, quantity: float, price: float, currency: Currency = Currency.USD, **kwargs) -> Transaction:
    return Transaction(
        date=day,
        symbol=symbol,
        side=TransactionSide.SELL,
        quantity=quantity,
        price=price,
        price_currency=currency,
        **kwargs,
    )
