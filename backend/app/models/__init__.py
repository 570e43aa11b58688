"""Database model exports."""

from .daily import DailyBar, FXRate
from .portfolio import TRANSACTION_SIDES, Transaction, WatchlistItem

__all__ = [
    "Transaction",
    "WatchlistItem",
    "TRANSACTION_SIDES",
    "DailyBar",
    "FXRate",
]
