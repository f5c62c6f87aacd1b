import datetime as dt
import math
import random

import pytest

from finql.market_data import (
    MarketDataSource,
    MarketDataSourceError,
    MarketQuoteError,
    MarketQuoteProvider,
    update_ticker,
    update_ticker_history,
)
from finql.quote_store import Quote, QuoteStore, Ticker

UTC = dt.timezone.utc


class DummyProvider(MarketQuoteProvider):
    def fetch_latest_quote(self, ticker):
        return Quote(
            ticker=ticker.id, price=1.23, time=dt.datetime(2020, 1, 1, tzinfo=UTC)
        )

    def fetch_quote_history(self, ticker, start, end):
        rng = random.Random(0)
        quotes = []
        time = start
        price = 1.23
        while time < end:
            quotes.append(Quote(ticker=ticker.id, price=price, time=time))
            time += dt.timedelta(days=1)
            price *= math.exp(0.0001 + 0.2 * rng.random())
        return quotes

    def fetch_dividend_history(self, ticker, start, end):
        return []


def prepare_store(factor=1.0):
    store = QuoteStore()
    ticker = Ticker(
        name="TestTicker",
        asset=1,
        source="manual",
        priority=1,
        currency="EUR",
        factor=factor,
    )
    ticker.id = store.insert_ticker(ticker)
    return store, ticker


@pytest.mark.parametrize(
    "name, source",
    [
        ("manual", MarketDataSource.MANUAL),
        ("yahoo", MarketDataSource.YAHOO),
        ("gurufocus", MarketDataSource.GURU_FOCUS),
        ("eodhistdata", MarketDataSource.EOD_HIST_DATA),
        ("alpha_vantage", MarketDataSource.ALPHA_VANTAGE),
    ],
)
def test_parse_and_display(name, source):
    assert MarketDataSource.parse(name) is source
    assert str(source) == name


def test_parse_unknown_source():
    with pytest.raises(MarketDataSourceError):
        MarketDataSource.parse("comdirect")


def test_extern_sources():
    assert MarketDataSource.extern_sources() == [
        "yahoo",
        "gurufocus",
        "eodhistdata",
        "alpha_vantage",
        "comdirect",
    ]


def test_provider_is_abstract():
    with pytest.raises(TypeError):
        MarketQuoteProvider()


def test_fetch_latest_quote():
    store, ticker = prepare_store()
    update_ticker(DummyProvider(), ticker, store)
    quotes = store.get_all_quotes_for_ticker(ticker.id)
    assert len(quotes) == 1
    assert quotes[0].price == pytest.approx(1.23, abs=1e-6)


def test_fetch_latest_quote_applies_factor():
    store, ticker = prepare_store(factor=0.01)
    update_ticker(DummyProvider(), ticker, store)
    quotes = store.get_all_quotes_for_ticker(ticker.id)
    assert quotes[0].price == pytest.approx(1.23 * 0.01)


def test_fetch_quote_history():
    store, ticker = prepare_store()
    start = dt.datetime(2020, 1, 1, 0, 0, 0, tzinfo=UTC)
    end = dt.datetime(2020, 1, 31, 23, 59, 59, tzinfo=UTC)
    update_ticker_history(DummyProvider(), ticker, store, start, end)
    quotes = store.get_all_quotes_for_ticker(ticker.id)
    assert len(quotes) == 31
    assert quotes[0].price == pytest.approx(1.23, abs=1e-6)
    assert [q.time for q in quotes] == sorted(q.time for q in quotes)


def test_storing_for_unknown_ticker_fails():
    store = QuoteStore()
    ticker = Ticker(
        name="Ghost", asset=1, source="manual", priority=1, currency="EUR", id=42
    )
    with pytest.raises(MarketQuoteError):
        update_ticker(DummyProvider(), ticker, store)