"""In-memory storage of tickers and the market quotes recorded for them."""

from __future__ import annotations

import datetime as dt
import itertools
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple


class QuoteStoreError(Exception):
    """Raised when a ticker or quote is missing or cannot be stored."""


@dataclass
class Quote:
    """A price of a ticker at a time; ``time`` must carry a time zone."""

    ticker: int
    price: float
    time: dt.datetime
    volume: Optional[float] = None
    id: Optional[int] = None

    def __post_init__(self) -> None:
        if self.time.tzinfo is None or self.time.utcoffset() is None:
            raise QuoteStoreError("quote time must carry a time zone")


@dataclass
class Ticker:
    """A symbol under which a data source quotes an asset in a currency."""

    name: str
    asset: int
    source: str
    priority: int
    currency: str
    factor: float = 1.0
    tz: Optional[str] = None
    cal: Optional[str] = None
    id: Optional[int] = None


class QuoteStore:
    """Keeps tickers and quotes; returned objects are copies of what is stored."""

    def __init__(self) -> None:
        self._tickers: Dict[int, Ticker] = {}
        self._quotes: Dict[int, Quote] = {}
        self._ticker_ids = itertools.count(1)
        self._quote_ids = itertools.count(1)

    # tickers

    def insert_ticker(self, ticker: Ticker) -> int:
        """Store a new ticker and return its freshly assigned id."""
        ticker_id = next(self._ticker_ids)
        self._tickers[ticker_id] = replace(ticker, id=ticker_id)
        return ticker_id

    def get_ticker_id(self, name: str) -> Optional[int]:
        """Id of the first ticker with this name, or None."""
        return next(
            (tid for tid, ticker in self._tickers.items() if ticker.name == name),
            None,
        )

    def insert_if_new_ticker(self, ticker: Ticker) -> int:
        """Id of the ticker with the same name, inserting the ticker if there is none."""
        existing = self.get_ticker_id(ticker.name)
        if existing is not None:
            return existing
        return self.insert_ticker(ticker)

    def get_ticker_by_id(self, ticker_id: int) -> Ticker:
        try:
            return replace(self._tickers[ticker_id])
        except KeyError:
            raise QuoteStoreError(f"no ticker with id={ticker_id}") from None

    def get_all_ticker(self) -> List[Ticker]:
        return [replace(ticker) for ticker in self._tickers.values()]

    def get_all_ticker_for_source(self, source: str) -> List[Ticker]:
        return [replace(t) for t in self._tickers.values() if t.source == source]

    def get_all_ticker_for_asset(self, asset_id: int) -> List[Ticker]:
        return [replace(t) for t in self._tickers.values() if t.asset == asset_id]

    def update_ticker(self, ticker: Ticker) -> None:
        """Overwrite a stored ticker; unknown ids are left alone."""
        if ticker.id is None:
            raise QuoteStoreError("not yet stored to database")
        if ticker.id in self._tickers:
            self._tickers[ticker.id] = replace(ticker)

    def delete_ticker(self, ticker_id: int) -> None:
        """Remove a ticker; a ticker that still has quotes cannot be removed."""
        if any(q.ticker == ticker_id for q in self._quotes.values()):
            raise QuoteStoreError(f"ticker with id={ticker_id} still has quotes")
        self._tickers.pop(ticker_id, None)

    # quotes

    def _require_ticker(self, ticker_id: int) -> Ticker:
        ticker = self._tickers.get(ticker_id)
        if ticker is None:
            raise QuoteStoreError(f"no ticker with id={ticker_id}")
        return ticker

    def insert_quote(self, quote: Quote) -> int:
        """Store a new quote for an existing ticker and return its id."""
        self._require_ticker(quote.ticker)
        quote_id = next(self._quote_ids)
        self._quotes[quote_id] = replace(quote, id=quote_id)
        return quote_id

    def _quotes_for_asset(self, asset_id: int) -> List[Tuple[Quote, Ticker]]:
        pairs = [
            (quote, self._tickers[quote.ticker])
            for quote in self._quotes.values()
            if self._tickers[quote.ticker].asset == asset_id
        ]
        # latest first; among equal times, the highest priority (lowest number) first
        pairs.sort(key=lambda pair: pair[1].priority)
        pairs.sort(key=lambda pair: pair[0].time, reverse=True)
        return pairs

    def get_last_quote_before_by_id(
        self, asset_id: int, time: dt.datetime
    ) -> Tuple[Quote, str]:
        """Latest quote of the asset at or before ``time``, with its currency."""
        for quote, ticker in self._quotes_for_asset(asset_id):
            if quote.time <= time:
                return replace(quote), ticker.currency
        raise QuoteStoreError(f"no quote for asset id={asset_id} before {time}")

    def get_quotes_in_range_by_id(
        self, asset_id: int, start: dt.datetime, end: dt.datetime
    ) -> List[Tuple[Quote, str]]:
        """Quotes of the asset within ``[start, end]``, latest first, with currencies."""
        return [
            (replace(quote), ticker.currency)
            for quote, ticker in self._quotes_for_asset(asset_id)
            if start <= quote.time <= end
        ]

    def get_all_quotes_for_ticker(self, ticker_id: int) -> List[Quote]:
        """All quotes of a ticker in chronological order."""
        quotes = [q for q in self._quotes.values() if q.ticker == ticker_id]
        quotes.sort(key=lambda q: q.time)
        return [replace(q) for q in quotes]

    def update_quote(self, quote: Quote) -> None:
        """Overwrite a stored quote; unknown ids are left alone."""
        if quote.id is None:
            raise QuoteStoreError("not yet stored to database")
        self._require_ticker(quote.ticker)
        if quote.id in self._quotes:
            self._quotes[quote.id] = replace(quote)

    def delete_quote(self, quote_id: int) -> None:
        self._quotes.pop(quote_id, None)

    def remove_duplicates(self) -> None:
        """Drop quotes repeating an older quote's ticker, time and price."""
        seen = set()
        for quote_id in sorted(self._quotes):
            quote = self._quotes[quote_id]
            key = (quote.ticker, quote.time, quote.price)
            if key in seen:
                del self._quotes[quote_id]
            else:
                seen.add(key)