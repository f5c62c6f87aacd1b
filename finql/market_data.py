"""Market data sources, quote providers and storing fetched quotes."""

from __future__ import annotations

import datetime as dt
from abc import ABC, abstractmethod
from dataclasses import replace
from enum import Enum
from typing import List

from finql.quote_store import Quote, QuoteStore, QuoteStoreError, Ticker
from finql.transactions import CashFlow


class MarketQuoteError(Exception):
    """Raised when quotes cannot be fetched from a provider or stored."""


class MarketDataSourceError(ValueError):
    """Raised when a market data source name is unknown."""


class MarketDataSource(str, Enum):
    """Known sources of market data, valued by their names."""

    MANUAL = "manual"
    YAHOO = "yahoo"
    GURU_FOCUS = "gurufocus"
    EOD_HIST_DATA = "eodhistdata"
    ALPHA_VANTAGE = "alpha_vantage"

    @classmethod
    def parse(cls, text: str) -> "MarketDataSource":
        """Source with the given name."""
        try:
            return cls(text)
        except ValueError:
            raise MarketDataSourceError("Parsing market data source failed") from None

    @classmethod
    def extern_sources(cls) -> List[str]:
        """Names of the external sources quotes can be fetched from."""
        return ["yahoo", "gurufocus", "eodhistdata", "alpha_vantage", "comdirect"]

    def __str__(self) -> str:
        return self.value


class MarketQuoteProvider(ABC):
    """Interface of a provider of market quotes."""

    @abstractmethod
    def fetch_latest_quote(self, ticker: Ticker) -> Quote:
        """Fetch the latest quote of the ticker."""

    @abstractmethod
    def fetch_quote_history(
        self, ticker: Ticker, start: dt.datetime, end: dt.datetime
    ) -> List[Quote]:
        """Fetch historic quotes between ``start`` and ``end``."""

    @abstractmethod
    def fetch_dividend_history(
        self, ticker: Ticker, start: dt.datetime, end: dt.datetime
    ) -> List[CashFlow]:
        """Fetch historic dividends, each a payment per single share."""


def _store_quote(store: QuoteStore, quote: Quote, factor: float) -> None:
    try:
        store.insert_quote(replace(quote, price=quote.price * factor))
    except QuoteStoreError as err:
        raise MarketQuoteError("Storing quote in database failed") from err


def update_ticker(
    provider: MarketQuoteProvider, ticker: Ticker, store: QuoteStore
) -> None:
    """Fetch the latest quote of the ticker, scale it by its factor and store it."""
    quote = provider.fetch_latest_quote(ticker)
    _store_quote(store, quote, ticker.factor)


def update_ticker_history(
    provider: MarketQuoteProvider,
    ticker: Ticker,
    store: QuoteStore,
    start: dt.datetime,
    end: dt.datetime,
) -> None:
    """Fetch quotes of the ticker between ``start`` and ``end``, scale and store them."""
    for quote in provider.fetch_quote_history(ticker, start, end):
        _store_quote(store, quote, ticker.factor)