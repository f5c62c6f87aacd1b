"""Positions and P&L of a portfolio derived from its transactions."""

from __future__ import annotations

import datetime as dt
from typing import Optional, Sequence, Tuple

from finql.positions import Market, PortfolioPosition, Position, PositionError, PositionTotals
from finql.transactions import Transaction, TransactionKind

_ASSET_KINDS = frozenset(
    {TransactionKind.ASSET, TransactionKind.DIVIDEND, TransactionKind.INTEREST}
)


def _at_hour(date: dt.date, hour: int) -> dt.datetime:
    return dt.datetime.combine(date, dt.time(hour), tzinfo=dt.timezone.utc)


def _referenced_asset_id(
    transactions: Sequence[Transaction], transaction_ref: Optional[int]
) -> Optional[int]:
    """Asset id of the transaction that ``transaction_ref`` refers to, if any."""
    if transaction_ref is None:
        return None
    for trans in transactions:
        if trans.id == transaction_ref:
            return trans.asset_id if trans.kind in _ASSET_KINDS else None
    return None


def _asset_position(positions: PortfolioPosition, asset_id: int) -> Position:
    pos = positions.assets.get(asset_id)
    if pos is None:
        pos = Position(asset_id, positions.cash.currency)
        positions.assets[asset_id] = pos
    return pos


def _apply_asset_trade(pos: Position, position: float, amount: float) -> None:
    if pos.position * position >= 0.0:
        pos.position += position
        pos.purchase_value += amount
        return
    # reducing the position realizes part of the P&L
    eff_price = -pos.purchase_value / pos.position
    sell_price = -amount / position
    pnl = -position * (sell_price - eff_price)
    pos.trading_pnl += pnl
    pos.position += position
    pos.purchase_value += amount - pnl


def calc_delta_position(
    positions: PortfolioPosition,
    transactions: Sequence[Transaction],
    start: Optional[dt.date],
    end: Optional[dt.date],
    market: Market,
) -> None:
    """Apply the transactions dated in ``[start, end)`` to ``positions`` in place."""
    base_currency = positions.cash.currency
    for trans in transactions:
        flow = trans.cash_flow
        if start is not None and flow.date < start:
            continue
        if end is not None and flow.date >= end:
            continue
        if flow.currency != base_currency:
            factor = market.fx_rate(flow.currency, base_currency, _at_hour(flow.date, 20))
        else:
            factor = 1.0
        positions.cash.position += flow.amount * factor

        kind = trans.kind
        amount = flow.amount
        if kind is TransactionKind.CASH:
            continue
        if kind is TransactionKind.ASSET:
            assert trans.asset_id is not None and trans.position is not None
            if trans.asset_id in positions.assets:
                _apply_asset_trade(positions.assets[trans.asset_id], trans.position, amount)
            else:
                pos = _asset_position(positions, trans.asset_id)
                pos.position = trans.position
                pos.purchase_value = amount
        elif kind is TransactionKind.INTEREST:
            assert trans.asset_id is not None
            _asset_position(positions, trans.asset_id).interest += amount
        elif kind is TransactionKind.DIVIDEND:
            assert trans.asset_id is not None
            _asset_position(positions, trans.asset_id).dividend += amount
        else:
            asset_id = _referenced_asset_id(transactions, trans.transaction_ref)
            target = (
                positions.cash if asset_id is None else _asset_position(positions, asset_id)
            )
            if kind is TransactionKind.FEE:
                target.fees += amount
            else:
                target.tax += amount


def calc_position(
    base_currency: str,
    transactions: Sequence[Transaction],
    date: Optional[dt.date],
    market: Market,
) -> PortfolioPosition:
    """Position since inception from all transactions dated before ``date``."""
    positions = PortfolioPosition(base_currency)
    calc_delta_position(positions, transactions, None, date, market)
    return positions


def calculate_position_and_pnl(
    currency: str,
    transactions: Sequence[Transaction],
    date: Optional[dt.date],
    market: Market,
) -> Tuple[PortfolioPosition, PositionTotals]:
    """Position and P&L from transactions before ``date``, valued at midnight of ``date``.

    Without a date, all transactions count and positions are valued now.
    """
    position = calc_position(currency, transactions, date, market)
    position.assign_asset_names(market)
    if date is not None:
        valuation_time = _at_hour(date, 0)
    else:
        valuation_time = dt.datetime.now(dt.timezone.utc)
    position.add_quote(valuation_time, market)
    return position, position.calc_totals()


def calculate_position_for_period(
    currency: str,
    transactions: Sequence[Transaction],
    start: dt.date,
    end: dt.date,
    market: Market,
) -> Tuple[PortfolioPosition, PositionTotals]:
    """Position and P&L changes between ``start`` and ``end``.

    The initial position is valued with quotes before ``start``, the final
    one with quotes before the day after ``end``, so that P&L of adjacent
    periods adds up.
    """
    position, _ = calculate_position_and_pnl(currency, transactions, start, market)
    position.reset_pnl()
    calc_delta_position(position, transactions, start, end, market)
    position.assign_asset_names(market)
    try:
        next_day = end + dt.timedelta(days=1)
    except OverflowError:
        raise PositionError("Invalid date") from None
    position.add_quote(_at_hour(next_day, 0), market)
    return position, position.calc_totals()