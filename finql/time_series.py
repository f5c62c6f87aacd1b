"""Time series of values and detection of gaps in their business-day coverage."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from finql.time_period import BusinessCalendar, TimePeriodError


class TimeSeriesError(ValueError):
    """Raised when a time series cannot be evaluated."""


@dataclass
class TimeValue:
    """A value observed at a point in time."""

    time: dt.datetime
    value: float


@dataclass
class TimeSeries:
    """A titled series of time values, kept in chronological order."""

    title: str
    series: List[TimeValue] = field(default_factory=list)

    def min_max(self) -> Tuple[dt.date, dt.date, float, float]:
        """Dates of the first and last entry and the smallest and largest value."""
        if not self.series:
            raise TimeSeriesError("Time series is empty.")
        values = [entry.value for entry in self.series]
        return (
            self.series[0].time.date(),
            self.series[-1].time.date(),
            min(values),
            max(values),
        )

    def find_gaps(
        self,
        calendar: BusinessCalendar,
        min_size: int = 1,
        today: Optional[dt.date] = None,
    ) -> List[Tuple[dt.date, dt.date]]:
        """Ranges of business days without an entry, from the first entry up to ``today``.

        Gaps shorter than ``min_size`` business days are skipped, except an open
        gap that reaches ``today``, which is always reported. ``today`` defaults
        to the current UTC date.
        """
        min_date, _, _, _ = self.min_max()
        if today is None:
            today = dt.datetime.now(dt.timezone.utc).date()
        dates = {entry.time.date() for entry in self.series}
        gaps: List[Tuple[dt.date, dt.date]] = []
        gap_begin: Optional[dt.date] = None
        gap_size = 0
        date = min_date
        try:
            while date <= today:
                if gap_begin is None:
                    if date not in dates:
                        gap_begin = date
                        gap_size = 1
                elif date in dates:
                    if gap_size >= min_size:
                        gaps.append((gap_begin, calendar.prev_bday(date)))
                    gap_begin = None
                else:
                    gap_size += 1
                date = calendar.next_bday(date)
        except TimePeriodError as err:
            raise TimeSeriesError("Calendar error") from err
        if gap_begin is not None:
            gaps.append((gap_begin, today))
        return gaps