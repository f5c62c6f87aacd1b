"""Asset and cash positions of a portfolio, their valuation and P&L totals."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from finql.quote_store import QuoteStore, QuoteStoreError


class PositionError(Exception):
    """Raised when positions cannot be calculated or valued."""


class Market:
    """Access to prices, exchange rates and names of assets kept in a quote store.

    ``currencies`` maps currency codes to the ids of their currency assets,
    ``asset_names`` maps the ids of other assets to their names.
    """

    def __init__(
        self,
        store: QuoteStore,
        currencies: Optional[Mapping[str, int]] = None,
        asset_names: Optional[Mapping[int, str]] = None,
    ) -> None:
        self.store = store
        self.currencies: Dict[str, int] = dict(currencies or {})
        self.asset_names: Dict[int, str] = dict(asset_names or {})

    def _last_price_in(
        self, asset_id: int, currency: str, time: dt.datetime
    ) -> Optional[float]:
        best = None
        for ticker in self.store.get_all_ticker_for_asset(asset_id):
            if ticker.currency != currency or ticker.id is None:
                continue
            for quote in self.store.get_all_quotes_for_ticker(ticker.id):
                if quote.time > time:
                    continue
                key = (quote.time, -ticker.priority)
                if best is None or key > best[0]:
                    best = (key, quote.price)
        return None if best is None else best[1]

    def fx_rate(
        self, from_currency: str, to_currency: str, time: dt.datetime
    ) -> float:
        """Factor converting an amount in ``from_currency`` into ``to_currency``."""
        if from_currency == to_currency:
            return 1.0
        from_id = self.currencies.get(from_currency)
        if from_id is not None:
            price = self._last_price_in(from_id, to_currency, time)
            if price is not None:
                return price
        to_id = self.currencies.get(to_currency)
        if to_id is not None:
            price = self._last_price_in(to_id, from_currency, time)
            if price:
                return 1.0 / price
        raise PositionError(
            f"Failed to convert currency: no rate from {from_currency} "
            f"to {to_currency} before {time}"
        )

    def asset_price(self, asset_id: int, currency: str, time: dt.datetime) -> float:
        """Latest price of the asset at or before ``time``, converted into ``currency``."""
        try:
            quote, quote_currency = self.store.get_last_quote_before_by_id(
                asset_id, time
            )
        except QuoteStoreError as err:
            raise PositionError("Failed to access market data") from err
        return quote.price * self.fx_rate(quote_currency, currency, time)

    def asset_name(self, asset_id: int) -> str:
        """Name of the asset; currency assets are named by their code."""
        for code, currency_id in self.currencies.items():
            if currency_id == asset_id:
                return code
        try:
            return self.asset_names[asset_id]
        except KeyError:
            raise PositionError(f"Failed to fetch position data: asset {asset_id}") from None


@dataclass
class Position:
    """Holding in one asset, or the cash account when ``asset_id`` is None."""

    asset_id: Optional[int]
    currency: str
    name: str = ""
    position: float = 0.0
    purchase_value: float = 0.0
    trading_pnl: float = 0.0
    interest: float = 0.0
    dividend: float = 0.0
    fees: float = 0.0
    tax: float = 0.0
    last_quote: Optional[float] = None
    last_quote_time: Optional[dt.datetime] = None

    def _quote_from_purchase(self) -> Optional[float]:
        if self.position == 0.0:
            return None
        return -self.purchase_value / self.position

    def add_quote(self, time: dt.datetime, market: Market) -> None:
        """Attach the latest quote; fall back to the purchase price if none is found."""
        if self.asset_id is None:
            self.last_quote = 1.0
            self.last_quote_time = dt.datetime.now(dt.timezone.utc)
            return
        try:
            price = market.asset_price(self.asset_id, self.currency, time)
        except PositionError:
            self.last_quote = self._quote_from_purchase()
            self.last_quote_time = None
        else:
            self.last_quote = price
            self.last_quote_time = time


@dataclass
class PositionTotals:
    """Totals over all positions of a portfolio."""

    value: float = 0.0
    trading_pnl: float = 0.0
    unrealized_pnl: float = 0.0
    dividend: float = 0.0
    interest: float = 0.0
    tax: float = 0.0
    fees: float = 0.0


@dataclass
class PortfolioPosition:
    """Cash position in the base currency and asset positions keyed by asset id."""

    base_currency: str
    assets: Dict[int, Position] = field(default_factory=dict)
    cash: Position = field(init=False)

    def __post_init__(self) -> None:
        self.cash = Position(None, self.base_currency)

    def assign_asset_names(self, market: Market) -> None:
        """Fill in the name of every asset position."""
        for asset_id, pos in self.assets.items():
            pos.name = market.asset_name(asset_id)

    def add_quote(self, time: dt.datetime, market: Market) -> None:
        """Attach quotes at ``time`` to every asset position."""
        for pos in self.assets.values():
            pos.add_quote(time, market)

    def calc_totals(self) -> PositionTotals:
        """Sum values and P&L figures of cash and all asset positions."""
        cash = self.cash
        totals = PositionTotals(
            value=cash.position,
            trading_pnl=cash.trading_pnl,
            dividend=cash.dividend,
            interest=cash.interest,
            tax=cash.tax,
            fees=cash.fees,
        )
        for _, pos in sorted(self.assets.items()):
            if pos.last_quote is not None:
                pos_value = pos.position * pos.last_quote
            else:
                pos_value = -pos.purchase_value
            totals.value += pos_value
            totals.trading_pnl += pos.trading_pnl
            totals.unrealized_pnl += pos_value + pos.purchase_value
            totals.dividend += pos.dividend
            totals.interest += pos.interest
            totals.tax += pos.tax
            totals.fees += pos.fees
        return totals

    def reset_pnl(self) -> None:
        """Drop zero positions, zero all P&L figures and revalue purchases at the last quote."""
        self.remove_zero_positions()
        for pos in (self.cash, *self.assets.values()):
            pos.trading_pnl = 0.0
            pos.dividend = 0.0
            pos.interest = 0.0
            pos.fees = 0.0
            pos.tax = 0.0
        for pos in self.assets.values():
            pos.purchase_value = -pos.position * (pos.last_quote or 0.0)

    def remove_zero_positions(self) -> None:
        """Remove asset positions whose quantity is zero."""
        self.assets = {
            asset_id: pos for asset_id, pos in self.assets.items() if pos.position != 0.0
        }