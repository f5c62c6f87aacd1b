# finql

A small quantitative finance toolbox for tracking and valuing investments.
It needs nothing beyond the Python standard library.

## Modules

- **`finql.time_period`**: `TimePeriod.parse` reads periods such as `"3M"`,
  `"-1Y"`, `"1W"`, `"1D"` or `"2B"` (business days). A period can be added to
  or subtracted from a date with `add_to` / `sub_from`, or with `date + period`
  and `date - period` (which leave the date unchanged if the result is
  invalid). Monthly periods clip the day to the end of the target month.
  `frequency()` gives the number of periods per year for 1, 3, 6 and 12 months
  and for one year, and raises `TimePeriodError` otherwise.
  `BusinessCalendar` holds holidays and weekend days (Saturday and Sunday by
  default) and offers `is_business_day`, `next_bday` and `prev_bday`; business
  daily periods need one.
- **`finql.period_date`**: `PeriodDate` is a symbolic period start or end date
  (`Inception`, `Today`, `FirstOfMonth`, `FirstOfYear` or `FixedDate`), built
  with `PeriodDate.parse` and resolved with `date` or `date_from_trades`, which
  takes the earliest cash flow date of the given transactions as inception.
  "Today" is the current UTC date.
- **`finql.rates`**: `FlatRate` discounts cash flows with `SIMPLE`, `ANNUAL`,
  `SEMI_ANNUAL`, `QUARTERLY`, `MONTHLY` or `CONTINUOUS` `Compounding`, counting
  actual days over 365 unless another `year_fraction` function is given.
  `discount_cash_flow` and `discount_cash_flow_stream` raise `DiscountError` for
  cash flows in another currency.
- **`finql.transactions`**: `Transaction` of a `TransactionKind` (cash, asset,
  dividend, interest, tax, fee) with its `CashFlow`, and `TransactionRecord`,
  its flat form with one-letter type codes, convertible both ways.
- **`finql.quote_store`**: `QuoteStore`, an in-memory store of `Ticker` and
  `Quote` objects with ids assigned on insert, lookups by name, source and
  asset, the latest quote of an asset at or before a time (ties broken by
  ticker priority), quotes in a time range, and `remove_duplicates`.
- **`finql.time_series`**: `TimeSeries` of `TimeValue` entries with `min_max`
  and `find_gaps`, which lists business-day ranges without an entry between the
  first entry and today.
- **`finql.positions`**: `Market` reads prices, exchange rates and asset names
  from a `QuoteStore`; `Position`, `PortfolioPosition` and `PositionTotals`
  hold and sum up holdings, trading P&L, dividends, interest, fees and taxes.
- **`finql.portfolio`**: `calc_position`, `calc_delta_position`,
  `calculate_position_and_pnl` and `calculate_position_for_period` build
  positions from transactions and value them.
- **`finql.market_data`**: `MarketDataSource` names, the abstract
  `MarketQuoteProvider`, and `update_ticker` / `update_ticker_history`, which
  fetch quotes from a provider, scale them by the ticker's factor and store
  them.
- **`finql.strategy`**: `StockTransactionFee`, `StockTransactionCosts` and the
  strategies `StaticInSingleStock` (keep dividends as cash) and
  `ReInvestInSingleStock` (buy whole shares from dividends and cash, after
  fees), which turn a day's dividend into transactions.

## Examples

```python
import datetime as dt
from finql.time_period import TimePeriod

start = dt.date(2019, 11, 30)
print(start + TimePeriod.parse("3M"))       # 2020-02-29
print(TimePeriod.parse("6M").frequency())   # 2
```

```python
import datetime as dt
from finql.portfolio import calc_position
from finql.positions import Market
from finql.quote_store import QuoteStore
from finql.transactions import CashFlow, Transaction, TransactionKind

market = Market(QuoteStore())
transactions = [
    Transaction(TransactionKind.CASH, CashFlow(10000.0, "EUR", dt.date(2020, 1, 1)), id=1),
    Transaction(TransactionKind.ASSET, CashFlow(-104.0, "EUR", dt.date(2020, 1, 2)),
                id=2, asset_id=1, position=100.0),
    Transaction(TransactionKind.FEE, CashFlow(-5.0, "EUR", dt.date(2020, 1, 2)),
                id=3, transaction_ref=2),
]
positions = calc_position("EUR", transactions, None, market)
print(positions.cash.position)          # 9891.0
print(positions.assets[1].position)     # 100.0
print(positions.assets[1].fees)         # -5.0
```

Exchange rates are read from quotes of currency assets: pass
`currencies={"USD": <asset id>}` to `Market`, and store quotes of that asset
in a ticker whose currency is the target currency.

## What it does not do

- Quotes and tickers live only in memory in `QuoteStore`; there is no database
  or file storage of assets, tickers, quotes or transactions.
- `MarketQuoteProvider` is only an interface: no provider that fetches quotes
  from an online service is included, and `MarketDataSource` merely names
  sources.
- There is no command-line program; everything is used as a library.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```