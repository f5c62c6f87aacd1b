"""Interest rate compounding and discounting of cash flows."""

from __future__ import annotations

import datetime as dt
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

from finql.transactions import CashFlow


class Compounding(str, Enum):
    """Methods for compounding interest rates."""

    SIMPLE = "simple"
    ANNUAL = "annual"
    SEMI_ANNUAL = "semi-annual"
    QUARTERLY = "quarterly"
    MONTHLY = "monthly"
    CONTINUOUS = "continuous"


class DiscountError(ValueError):
    """Raised when a cash flow's currency differs from the discounter's."""

    def __init__(self) -> None:
        super().__init__(
            "discount error: the cash flow currency does not match the "
            "discounter currency"
        )


def _act365(start: dt.date, end: dt.date) -> float:
    return (end - start).days / 365.0


class Discounter(ABC):
    """Something that discounts cash flows in its own currency."""

    currency: str

    @abstractmethod
    def discount_factor(self, today: dt.date, pay_date: dt.date) -> float:
        """Factor that discounts a payment at ``pay_date`` to ``today``."""

    def discount_cash_flow(self, cash_flow: CashFlow, today: dt.date) -> CashFlow:
        """Present value of a cash flow, as a cash flow on ``today``."""
        if cash_flow.currency != self.currency:
            raise DiscountError()
        amount = self.discount_factor(today, cash_flow.date) * cash_flow.amount
        return CashFlow(amount, cash_flow.currency, today)

    def discount_cash_flow_stream(
        self, cash_flows: Iterable[CashFlow], today: dt.date
    ) -> CashFlow:
        """Summed present value of several cash flows, as a cash flow on ``today``."""
        total = 0.0
        for cash_flow in cash_flows:
            if cash_flow.currency != self.currency:
                raise DiscountError()
            total += self.discount_factor(today, cash_flow.date) * cash_flow.amount
        return CashFlow(total, self.currency, today)


@dataclass(frozen=True)
class FlatRate(Discounter):
    """A single rate applied to every maturity.

    ``year_fraction`` maps two dates to the year fraction between them;
    the default counts actual days over 365.
    """

    rate: float
    compounding: Compounding
    currency: str
    year_fraction: Callable[[dt.date, dt.date], float] = field(
        default=_act365, compare=False
    )

    def discount_factor(self, today: dt.date, pay_date: dt.date) -> float:
        yf = self.year_fraction(today, pay_date)
        rate = self.rate
        compounding = Compounding(self.compounding)
        if compounding is Compounding.SIMPLE:
            return 1.0 / (1.0 + rate * yf)
        if compounding is Compounding.ANNUAL:
            return (1.0 + rate) ** (-yf)
        if compounding is Compounding.SEMI_ANNUAL:
            return (1.0 + 0.5 * rate) ** (-2.0 * yf)
        if compounding is Compounding.QUARTERLY:
            return (1.0 + 0.25 * rate) ** (-4.0 * yf)
        if compounding is Compounding.MONTHLY:
            return (1.0 + rate / 12.0) ** (-12.0 * yf)
        return math.exp(-rate * yf)