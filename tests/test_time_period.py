import datetime as dt
import json

import pytest

from finql.time_period import (
    BusinessCalendar,
    TimePeriod,
    TimePeriodError,
    TimePeriodUnit,
)


def d(y, m, day):
    return dt.date(y, m, day)


@pytest.mark.parametrize(
    "period, start, expected",
    [
        ("3M", d(2019, 11, 18), d(2020, 2, 18)),
        ("1Y", d(2019, 11, 18), d(2020, 11, 18)),
        ("6M", d(2019, 11, 18), d(2020, 5, 18)),
        ("1W", d(2019, 11, 18), d(2019, 11, 25)),
        ("3M", d(2019, 11, 30), d(2020, 2, 29)),
        ("1Y", d(2019, 11, 30), d(2020, 11, 30)),
        ("6M", d(2019, 11, 30), d(2020, 5, 30)),
        ("1W", d(2019, 11, 30), d(2019, 12, 7)),
    ],
)
def test_standard_periods(period, start, expected):
    assert TimePeriod.parse(period).add_to(start, None) == expected


@pytest.mark.parametrize(
    "period, start, expected",
    [
        ("-3M", d(2020, 2, 18), d(2019, 11, 18)),
        ("-1Y", d(2020, 11, 18), d(2019, 11, 18)),
        ("-1W", d(2019, 11, 25), d(2019, 11, 18)),
        ("-3M", d(2020, 2, 29), d(2019, 11, 29)),
        ("-1Y", d(2020, 11, 30), d(2019, 11, 30)),
        ("-1W", d(2019, 12, 7), d(2019, 11, 30)),
    ],
)
def test_negative_periods(period, start, expected):
    assert TimePeriod.parse(period).add_to(start, None) == expected


@pytest.mark.parametrize(
    "text", ["3M", "6M", "1Y", "1W", "1D", "-3M", "-1Y", "-1W", "-1D"]
)
def test_display_periods(text):
    assert str(TimePeriod.parse(text)) == text


@pytest.fixture
def calendar():
    return BusinessCalendar(holidays=[d(2019, 11, 21)], weekend=[5, 6])


def test_parse_business_daily(calendar):
    bdaily1 = TimePeriod.parse("1B")
    bdaily2 = TimePeriod.parse("2B")
    bdaily_1 = TimePeriod.parse("-1B")

    assert str(bdaily1) == "1B"
    assert str(bdaily2) == "2B"
    assert str(bdaily_1) == "-1B"

    date = d(2019, 11, 20)
    assert bdaily1.add_to(date, calendar) == d(2019, 11, 22)
    assert bdaily2.add_to(date, calendar) == d(2019, 11, 25)
    assert bdaily_1.add_to(date, calendar) == d(2019, 11, 19)

    date = d(2019, 11, 25)
    assert bdaily1.add_to(date, calendar) == d(2019, 11, 26)
    assert bdaily2.add_to(date, calendar) == d(2019, 11, 27)
    assert bdaily_1.add_to(date, calendar) == d(2019, 11, 22)


def test_business_daily_needs_calendar():
    with pytest.raises(TimePeriodError):
        TimePeriod.parse("1B").add_to(d(2019, 11, 20), None)


def test_calendar_business_days(calendar):
    assert calendar.is_business_day(d(2019, 11, 20)) is True
    assert calendar.is_business_day(d(2019, 11, 21)) is False
    assert calendar.is_business_day(d(2019, 11, 23)) is False
    assert calendar.prev_bday(d(2019, 11, 25)) == d(2019, 11, 22)


def test_calendar_rejects_all_days_weekend():
    with pytest.raises(TimePeriodError):
        BusinessCalendar(weekend=range(7))


def test_deserialize_time_period():
    tp = TimePeriod.parse(json.loads('"6M"'))
    assert tp.num == 6
    assert tp.unit is TimePeriodUnit.MONTHLY
    assert tp == TimePeriod(6, TimePeriodUnit.MONTHLY)


def test_serialize_time_period():
    tp = TimePeriod(-2, TimePeriodUnit.ANNUAL)
    assert json.dumps(str(tp)) == '"-2Y"'


def test_operator_add_period():
    period_6m = TimePeriod.parse("6M")
    start = d(2019, 12, 16)
    end = d(2020, 6, 16)
    assert start + period_6m == end
    assert end - period_6m == start
    minus_period_6m = -period_6m
    assert end + minus_period_6m == start
    assert start - minus_period_6m == end
    new_start = d(2019, 12, 16)
    new_start += period_6m
    assert new_start == end
    new_end = d(2020, 6, 16)
    new_end -= period_6m
    assert new_end == start


def test_operator_keeps_date_on_failure():
    leap_day = d(2020, 2, 29)
    assert leap_day + TimePeriod.parse("1Y") == leap_day


def test_annual_from_leap_day_raises():
    with pytest.raises(TimePeriodError):
        TimePeriod.parse("1Y").add_to(d(2020, 2, 29), None)


@pytest.mark.parametrize("text", ["", "M", "3"])
def test_parse_too_short(text):
    with pytest.raises(TimePeriodError, match="too short"):
        TimePeriod.parse(text)


@pytest.mark.parametrize("text", ["3X", "3m", "12"])
def test_parse_invalid_unit(text):
    with pytest.raises(TimePeriodError, match="unit"):
        TimePeriod.parse(text)


@pytest.mark.parametrize("text", ["xM", "1.5Y", " 3M", "--1D", "99999999999D"])
def test_parse_invalid_number(text):
    with pytest.raises(TimePeriodError, match="number of periods"):
        TimePeriod.parse(text)


def test_parse_accepts_plus_sign():
    assert TimePeriod.parse("+3M") == TimePeriod.parse("3M")


@pytest.mark.parametrize(
    "text, expected",
    [("1M", 12), ("3M", 4), ("6M", 2), ("12M", 1), ("1Y", 1), ("-3M", 4)],
)
def test_frequency(text, expected):
    assert TimePeriod.parse(text).frequency() == expected


@pytest.mark.parametrize("text", ["1D", "1B", "1W", "2M", "2Y"])
def test_no_frequency(text):
    with pytest.raises(TimePeriodError):
        TimePeriod.parse(text).frequency()


def test_sub_from_and_inverse():
    period = TimePeriod.parse("3M")
    assert period.inverse() == TimePeriod.parse("-3M")
    assert period.sub_from(d(2020, 2, 18), None) == d(2019, 11, 18)


def test_month_round_trip_for_early_days():
    period = TimePeriod.parse("14M")
    start = d(2019, 11, 18)
    assert period.sub_from(period.add_to(start)) == start