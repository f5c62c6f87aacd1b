"""Time periods of days, business days, weeks, months or years added to dates."""

from __future__ import annotations

import calendar as _calendar
import datetime as dt
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_NUMBER = re.compile(r"[+-]?[0-9]+")


class TimePeriodError(ValueError):
    """Raised when a time period cannot be parsed or applied."""


@dataclass(frozen=True)
class BusinessCalendar:
    """Calendar of business days: every day that is neither a weekend day nor a holiday.

    ``weekend`` holds weekday numbers as returned by ``date.weekday()``
    (Monday is 0, Sunday is 6).
    """

    holidays: FrozenSet[dt.date] = field(default_factory=frozenset)
    weekend: FrozenSet[int] = frozenset({5, 6})

    def __init__(
        self, holidays: Iterable[dt.date] = (), weekend: Iterable[int] = (5, 6)
    ) -> None:
        weekend_days = frozenset(weekend)
        if not weekend_days <= set(range(7)):
            raise TimePeriodError("calendar error")
        if len(weekend_days) == 7:
            raise TimePeriodError("calendar error")
        object.__setattr__(self, "holidays", frozenset(holidays))
        object.__setattr__(self, "weekend", weekend_days)

    def is_business_day(self, date: dt.date) -> bool:
        """Whether ``date`` is a business day."""
        return date.weekday() not in self.weekend and date not in self.holidays

    def _step(self, date: dt.date, days: int) -> dt.date:
        one = dt.timedelta(days=days)
        try:
            date += one
            while not self.is_business_day(date):
                date += one
        except OverflowError:
            raise TimePeriodError("calendar error") from None
        return date

    def next_bday(self, date: dt.date) -> dt.date:
        """First business day strictly after ``date``."""
        return self._step(date, 1)

    def prev_bday(self, date: dt.date) -> dt.date:
        """Last business day strictly before ``date``."""
        return self._step(date, -1)


class TimePeriodUnit(str, Enum):
    """Unit of a time period, valued by its one-letter code."""

    DAILY = "D"
    BUSINESS_DAILY = "B"
    WEEKLY = "W"
    MONTHLY = "M"
    ANNUAL = "Y"


@dataclass(frozen=True)
class TimePeriod:
    """A signed number of time units, such as ``3M`` or ``-1Y``."""

    num: int
    unit: TimePeriodUnit

    @classmethod
    def parse(cls, text: str) -> "TimePeriod":
        """Parse a period of the form ``[+|-]<int><unit>``."""
        if len(text) < 2:
            raise TimePeriodError("couldn't parse time period, string is too short")
        try:
            unit = TimePeriodUnit(text[-1])
        except ValueError:
            raise TimePeriodError(
                "invalid time period unit, use one of 'D', 'B', 'W', 'M', or 'Y'"
            ) from None
        digits = text[:-1]
        if not _NUMBER.fullmatch(digits):
            raise TimePeriodError("parsing number of periods for time period failed")
        num = int(digits)
        if not _I32_MIN <= num <= _I32_MAX:
            raise TimePeriodError("parsing number of periods for time period failed")
        return cls(num, unit)

    def add_to(
        self, date: dt.date, calendar: Optional[BusinessCalendar] = None
    ) -> dt.date:
        """Add the period to ``date``.

        Monthly periods move a day beyond the end of the target month to its
        last day, so they are not always undone by the inverse period.
        Business daily periods need a calendar.
        """
        unit = self.unit
        try:
            if unit is TimePeriodUnit.DAILY:
                return date + dt.timedelta(days=self.num)
            if unit is TimePeriodUnit.WEEKLY:
                return date + dt.timedelta(days=7 * self.num)
        except OverflowError:
            raise TimePeriodError("invalid date") from None
        if unit is TimePeriodUnit.BUSINESS_DAILY:
            if calendar is None:
                raise TimePeriodError("business daily periods need a calendar")
            step = calendar.prev_bday if self.num < 0 else calendar.next_bday
            for _ in range(abs(self.num)):
                date = step(date)
            return date
        if unit is TimePeriodUnit.MONTHLY:
            return self._add_months(date)
        try:
            return date.replace(year=date.year + self.num)
        except (ValueError, OverflowError):
            raise TimePeriodError("invalid date") from None

    def _add_months(self, date: dt.date) -> dt.date:
        sign = -1 if self.num < 0 else 1
        years, months = divmod(abs(self.num), 12)
        year = date.year + sign * years
        month = date.month + sign * months
        if month < 1:
            year -= 1
            month += 12
        elif month > 12:
            year += 1
            month -= 12
        day = date.day
        try:
            if day > 28:
                day = min(day, _calendar.monthrange(year, month)[1])
            return dt.date(year, month, day)
        except (ValueError, OverflowError):
            raise TimePeriodError("invalid date") from None

    def sub_from(
        self, date: dt.date, calendar: Optional[BusinessCalendar] = None
    ) -> dt.date:
        """Subtract the period from ``date``."""
        return self.inverse().add_to(date, calendar)

    def inverse(self) -> "TimePeriod":
        """The same period with the opposite sign."""
        return TimePeriod(-self.num, self.unit)

    def frequency(self) -> int:
        """Number of periods per year, if the period divides a year evenly."""
        count = abs(self.num)
        if self.unit is TimePeriodUnit.MONTHLY:
            per_year = {1: 12, 3: 4, 6: 2, 12: 1}.get(count)
            if per_year is not None:
                return per_year
        elif self.unit is TimePeriodUnit.ANNUAL and count == 1:
            return 1
        raise TimePeriodError("the time period can't be converted to frequency")

    def __str__(self) -> str:
        return f"{self.num}{self.unit.value}"

    def __neg__(self) -> "TimePeriod":
        return self.inverse()

    def __radd__(self, other: dt.date) -> dt.date:
        if not isinstance(other, dt.date):
            return NotImplemented
        try:
            return self.add_to(other)
        except TimePeriodError:
            return other

    def __rsub__(self, other: dt.date) -> dt.date:
        if not isinstance(other, dt.date):
            return NotImplemented
        try:
            return self.sub_from(other)
        except TimePeriodError:
            return other