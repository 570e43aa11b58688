"""Replay a ledger into net positions and running cost bases."""
from __future__ import annotations

from typing import Dict, Iterable, List

from .fx import FxMatrix, convert_amount
from .models import Currency, Holding, Transaction, TransactionSide

QUANTITY_EPSILON = 1e-9


def trade_cash_flow(tx: Transaction, target: Currency, matrix: FxMatrix) -> float:
    """Signed cash put into (BUY) or taken out of (SELL) the portfolio by ``tx``.

    BUY contributes ``value + fee``, SELL withdraws ``value - fee``. Trade
    value and fee are converted from their own currencies.
    """

    value = convert_amount(tx.trade_value, tx.price_currency, target, matrix)
    fee = convert_amount(tx.fee_amount, tx.effective_fee_currency, target, matrix)
    if tx.side is TransactionSide.BUY:
        return value + fee
    return -(value - fee)


def net_quantities(transactions: Iterable[Transaction]) -> Dict[str, float]:
    """Return the signed net quantity per symbol, including flat symbols."""

    quantities: Dict[str, float] = {}
    for tx in transactions:
        quantities[tx.symbol] = quantities.get(tx.symbol, 0.0) + tx.side.sign * tx.quantity
    return quantities


def reconstruct_holdings(
    transactions: Iterable[Transaction],
    target: Currency,
    matrix: FxMatrix,
) -> List[Holding]:
    """Accumulate quantities and cost bases; keep long positions only.

    Cost basis is a running net adjustment (sale proceeds reduce it) rather
    than lot matching, so the result does not depend on transaction order.
    """

    quantities: Dict[str, float] = {}
    costs: Dict[str, float] = {}
    for tx in transactions:
        quantities[tx.symbol] = quantities.get(tx.symbol, 0.0) + tx.side.sign * tx.quantity
        costs[tx.symbol] = costs.get(tx.symbol, 0.0) + trade_cash_flow(tx, target, matrix)

    return [
        Holding(symbol=symbol, quantity=quantity, total_cost=costs[symbol])
        for symbol, quantity in sorted(quantities.items())
        if quantity > QUANTITY_EPSILON
    ]


__all__ = ["QUANTITY_EPSILON", "net_quantities", "reconstruct_holdings", "trade_cash_flow"]
