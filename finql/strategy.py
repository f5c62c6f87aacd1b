"""Investment strategies that turn dividends into transactions day by day."""

from __future__ import annotations

import datetime as dt
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from finql.positions import Market, PortfolioPosition
from finql.quote_store import QuoteStoreError
from finql.time_period import TimePeriod, TimePeriodError
from finql.transactions import CashFlow, Transaction, TransactionKind

logger = logging.getLogger(__name__)

_ONE_DAY = TimePeriod.parse("1D")


class StrategyError(Exception):
    """Raised when a strategy cannot be applied."""


@dataclass
class StockTransactionFee:
    """Proportional fee bounded below by ``min_fee`` and, optionally, above by ``max_fee``."""

    min_fee: float = 0.0
    max_fee: Optional[float] = None
    proportional_fee: float = 0.0

    def calc_fee(self, total_price: float) -> float:
        """Fee for a trade of the given total price."""
        fee = max(total_price * self.proportional_fee, self.min_fee)
        if self.max_fee is not None:
            fee = min(fee, self.max_fee)
        return fee


@dataclass
class StockTransactionCosts:
    """Fees and the tax rate applied to dividends."""

    fee: StockTransactionFee = field(default_factory=StockTransactionFee)
    tax_rate: float = 0.0


class Strategy(ABC):
    """A rule producing the transactions of a day from the current position."""

    @abstractmethod
    def apply(self, position: PortfolioPosition, date: dt.date) -> List[Transaction]:
        """Transactions the strategy makes on ``date``."""

    def next_day(self, date: dt.date) -> dt.date:
        """The day after ``date``."""
        try:
            return _ONE_DAY.add_to(date)
        except TimePeriodError as err:
            raise StrategyError("Failed to apply time period") from err


def _dividend_on(date: dt.date, dividends: Sequence[CashFlow]) -> Optional[CashFlow]:
    return next((cf for cf in dividends if cf.date == date), None)


def _dividend_and_tax(
    asset_id: int,
    dividend_per_share: CashFlow,
    position: PortfolioPosition,
    tax_rate: float,
) -> Tuple[List[Transaction], CashFlow, CashFlow]:
    try:
        shares = position.assets[asset_id].position
    except KeyError:
        raise StrategyError(f"no position in asset {asset_id}") from None
    dividend = replace(dividend_per_share, amount=dividend_per_share.amount * shares)
    tax = replace(dividend, amount=-tax_rate * dividend.amount)
    transactions = [
        Transaction(kind=TransactionKind.DIVIDEND, cash_flow=dividend, asset_id=asset_id)
    ]
    if tax.amount != 0.0:
        transactions.append(Transaction(kind=TransactionKind.TAX, cash_flow=tax))
    for trans in transactions:
        logger.debug("added transaction %r", trans)
    return transactions, dividend, tax


class StaticInSingleStock(Strategy):
    """Hold a single stock and keep its dividends as cash."""

    def __init__(
        self,
        asset_id: int,
        dividends: Sequence[CashFlow],
        costs: StockTransactionCosts,
    ) -> None:
        self.asset_id = asset_id
        self.dividends = list(dividends)
        self.costs = costs

    def apply(self, position: PortfolioPosition, date: dt.date) -> List[Transaction]:
        dividend_per_share = _dividend_on(date, self.dividends)
        if dividend_per_share is None:
            return []
        transactions, dividend, tax = _dividend_and_tax(
            self.asset_id, dividend_per_share, position, self.costs.tax_rate
        )
        logger.info(
            "StaticInSingleStock: dividend %s and tax %s at date %s",
            dividend.amount,
            -tax.amount,
            date,
        )
        return transactions

    def next_day(self, date: dt.date) -> dt.date:
        return super().next_day(date)


class ReInvestInSingleStock(Strategy):
    """Hold a single stock and reinvest dividends and spare cash in it.

    Prices are looked up in the market's quote store by ``ticker_id``.
    """

    def __init__(
        self,
        asset_id: int,
        ticker_id: int,
        market: Market,
        dividends: Sequence[CashFlow],
        costs: StockTransactionCosts,
    ) -> None:
        self.asset_id = asset_id
        self.ticker_id = ticker_id
        self.market = market
        self.dividends = list(dividends)
        self.costs = costs

    def apply(self, position: PortfolioPosition, date: dt.date) -> List[Transaction]:
        dividend_per_share = _dividend_on(date, self.dividends)
        if dividend_per_share is None:
            return []
        transactions, dividend, tax = _dividend_and_tax(
            self.asset_id, dividend_per_share, position, self.costs.tax_rate
        )
        available_cash = dividend.amount + tax.amount + position.cash.position

        time = dt.datetime.combine(date, dt.time(20), tzinfo=dt.timezone.utc)
        try:
            quote, _ = self.market.store.get_last_quote_before_by_id(self.ticker_id, time)
        except QuoteStoreError as err:
            raise StrategyError("Failed to retrieve data from database") from err
        price = quote.price

        additional, fee = self.calc_position_and_fee(available_cash, price)
        currency = position.cash.currency
        if additional > 0.0:
            buy = Transaction(
                kind=TransactionKind.ASSET,
                cash_flow=CashFlow(-additional * price, currency, date),
                asset_id=self.asset_id,
                position=additional,
            )
            logger.debug("added transaction %r", buy)
            transactions.append(buy)
            if fee != 0.0:
                fee_trans = Transaction(
                    kind=TransactionKind.FEE, cash_flow=CashFlow(-fee, currency, date)
                )
                logger.debug("added transaction %r", fee_trans)
                transactions.append(fee_trans)
        logger.info(
            "ReInvestInSingleStock: dividend %s, tax %s, buying %s shares with fee %s "
            "from available cash %s at price %s on %s",
            dividend.amount,
            -tax.amount,
            additional,
            fee,
            available_cash,
            price,
            date,
        )
        return transactions

    def next_day(self, date: dt.date) -> dt.date:
        return super().next_day(date)

    def calc_position_and_fee(self, cash: float, price: float) -> Tuple[float, float]:
        """Number of whole shares to buy from ``cash`` at ``price`` and the fee of that trade."""
        max_position = float(math.floor(cash / price))
        fee = self.costs.fee.calc_fee(max_position * price)
        while max_position > 0.0 and max_position * price - fee < 0.0:
            max_position -= 1.0
            fee = self.costs.fee.calc_fee(max_position * price)
        return max_position, fee