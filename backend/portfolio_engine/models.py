"""Domain models used by the portfolio valuation engine."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


class Currency(str, enum.Enum):
    EUR = "EUR"
    USD = "USD"
    GBP = "GBP"
    HKD = "HKD"
    CHF = "CHF"
    RUB = "RUB"

    @classmethod
    def parse(cls, value: str | Currency) -> Currency:
        """Return the enum member for ``value`` (case-insensitive)."""

        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


class TransactionSide(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"

    @property
    def sign(self) -> int:
        return 1 if self is TransactionSide.BUY else -1


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


@dataclass(frozen=True)
class Transaction:
    """A single buy or sell booked in the user's ledger."""

    date: date
    symbol: str
    side: TransactionSide
    quantity: float
    price: float
    price_currency: Currency = Currency.USD
    fee: Optional[float] = None
    fee_currency: Optional[Currency] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbol", normalize_symbol(self.symbol))

    @property
    def trade_value(self) -> float:
        return self.quantity * self.price

    @property
    def fee_amount(self) -> float:
        return self.fee or 0.0

    @property
    def effective_fee_currency(self) -> Currency:
        """Fees without an explicit currency are charged in the trade currency."""

        return self.fee_currency or self.price_currency


@dataclass(frozen=True)
class FxRateRow:
    """A stored directed exchange rate ``1 base = rate quote``."""

    base: Currency
    quote: Currency
    rate: float
    fetched_at: Optional[datetime] = None


@dataclass(frozen=True)
class PricePoint:
    """A raw daily close as returned by the price store."""

    symbol: str
    date: date
    close: float


@dataclass(frozen=True)
class Holding:
    """Net position for a symbol with its running cost basis in the target currency."""

    symbol: str
    quantity: float
    total_cost: float

    @property
    def avg_cost(self) -> float:
        return self.total_cost / self.quantity if self.quantity else 0.0


@dataclass(frozen=True)
class NavDay:
    date: date
    nav: float
    external_flow: float


@dataclass(frozen=True)
class NavPoint:
    """One link of the inception-to-date return chain."""

    date: date
    nav: float
    external_flow: float
    twr_index: float
    mwr_index: float


@dataclass(frozen=True)
class PerformancePoint:
    date: date
    net_assets: float
    yield_twr: float
    yield_mwr: float


@dataclass
class PerformanceResult:
    currency: Currency
    start: date
    end: date
    points: list[PerformancePoint] = field(default_factory=list)
    total_return_twr: float = 0.0
    total_return_mwr: float = 0.0
    prev_day_return_twr: float = 0.0
    prev_day_return_mwr: float = 0.0
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SnapshotItem:
    symbol: str
    quantity: float
    avg_cost: float
    price: float
    value: float
    weight: float


@dataclass
class Snapshot:
    currency: Currency
    items: list[SnapshotItem] = field(default_factory=list)
    total_value: float = 0.0
    warnings: list[str] = field(default_factory=list)


__all__ = [
    "Currency",
    "TransactionSide",
    "Transaction",
    "FxRateRow",
    "PricePoint",
    "Holding",
    "NavDay",
    "NavPoint",
    "PerformancePoint",
    "PerformanceResult",
    "SnapshotItem",
    "Snapshot",
    "normalize_symbol",
]
