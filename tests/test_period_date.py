import datetime as dt

import pytest

from finql.period_date import PeriodDate, PeriodDateError, PeriodDateKind
from finql.transactions import CashFlow, Transaction, TransactionKind


def utc_today():
    return dt.datetime.now(dt.timezone.utc).date()


@pytest.mark.parametrize(
    "name", ["Inception", "Today", "FirstOfMonth", "FirstOfYear"]
)
def test_parse_round_trips_name(name):
    assert str(PeriodDate.parse(name, None)) == name


def test_parse_fixed_date():
    fixed = dt.date(2020, 1, 15)
    period_date = PeriodDate.parse("FixedDate", fixed)
    assert str(period_date) == "FixedDate"
    assert period_date.date(None) == fixed


def test_parse_fixed_date_without_date():
    with pytest.raises(PeriodDateError, match="no date is given"):
        PeriodDate.parse("FixedDate", None)


def test_parse_unknown_type():
    with pytest.raises(PeriodDateError, match="Unknown"):
        PeriodDate.parse("Yesterday", None)


def test_default_is_today():
    assert PeriodDate().kind is PeriodDateKind.TODAY
    assert PeriodDate().date(None) == utc_today()


def test_first_of_month_and_year():
    today = utc_today()
    first_of_month = PeriodDate.parse("FirstOfMonth", None).date(None)
    first_of_year = PeriodDate.parse("FirstOfYear", None).date(None)
    assert first_of_month == today.replace(day=1)
    assert first_of_year == today.replace(month=1, day=1)
    assert first_of_year <= first_of_month <= today


def test_inception_uses_given_date():
    inception = dt.date(2019, 3, 4)
    assert PeriodDate.parse("Inception", None).date(inception) == inception


def test_inception_missing():
    with pytest.raises(PeriodDateError, match="inception"):
        PeriodDate(PeriodDateKind.INCEPTION).date(None)


def _trade(day):
    return Transaction(
        kind=TransactionKind.CASH,
        cash_flow=CashFlow(100.0, "EUR", day),
    )


def test_date_from_trades_takes_earliest():
    days = [dt.date(2020, 2, 1), dt.date(2019, 12, 31), dt.date(2020, 1, 15)]
    trades = [_trade(day) for day in days]
    result = PeriodDate(PeriodDateKind.INCEPTION).date_from_trades(trades)
    assert result == min(days)


def test_date_from_no_trades_fails_for_inception():
    with pytest.raises(PeriodDateError):
        PeriodDate(PeriodDateKind.INCEPTION).date_from_trades([])


def test_date_from_trades_ignores_trades_for_fixed():
    fixed = dt.date(2021, 6, 30)
    trades = [_trade(dt.date(2020, 1, 1))]
    assert PeriodDate.parse("FixedDate", fixed).date_from_trades(trades) == fixed