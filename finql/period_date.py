"""Symbolic start and end dates of reporting periods."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from finql.transactions import Transaction


class PeriodDateError(ValueError):
    """Raised when a period date is unknown or cannot be resolved."""


class PeriodDateKind(str, Enum):
    """The kinds of period dates."""

    INCEPTION = "Inception"
    TODAY = "Today"
    FIRST_OF_MONTH = "FirstOfMonth"
    FIRST_OF_YEAR = "FirstOfYear"
    FIXED_DATE = "FixedDate"


@dataclass(frozen=True)
class PeriodDate:
    """A period start or end date; a fixed date carries its value."""

    kind: PeriodDateKind = PeriodDateKind.TODAY
    fixed_date: Optional[dt.date] = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "kind", PeriodDateKind(self.kind))
        except ValueError:
            raise PeriodDateError("Unknown period date type") from None
        if self.kind is PeriodDateKind.FIXED_DATE and self.fixed_date is None:
            raise PeriodDateError("Fixed date is chosen but no date is given")

    @classmethod
    def parse(
        cls, date_type: str, date: Optional[dt.date] = None
    ) -> "PeriodDate":
        """Build a period date from its type name and, for fixed dates, the date."""
        try:
            kind = PeriodDateKind(date_type)
        except ValueError:
            raise PeriodDateError("Unknown period date type") from None
        if kind is PeriodDateKind.FIXED_DATE:
            return cls(kind, date)
        return cls(kind)

    def date(self, inception: Optional[dt.date] = None) -> dt.date:
        """Resolve to a calendar date; ``inception`` is needed for inception dates."""
        if self.kind is PeriodDateKind.FIXED_DATE:
            assert self.fixed_date is not None
            return self.fixed_date
        if self.kind is PeriodDateKind.INCEPTION:
            if inception is None:
                raise PeriodDateError("Cannot deduce inception date")
            return inception
        today = dt.datetime.now(dt.timezone.utc).date()
        if self.kind is PeriodDateKind.FIRST_OF_MONTH:
            return today.replace(day=1)
        if self.kind is PeriodDateKind.FIRST_OF_YEAR:
            return today.replace(month=1, day=1)
        return today

    def date_from_trades(self, trades: Iterable[Transaction]) -> dt.date:
        """Resolve, taking the earliest cash flow date of ``trades`` as inception."""
        inception = min((t.cash_flow.date for t in trades), default=None)
        return self.date(inception)

    def __str__(self) -> str:
        return self.kind.value