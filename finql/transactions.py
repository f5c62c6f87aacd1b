"""Transactions, cash flows and their flat storage records."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TransactionError(ValueError):
    """Raised when a transaction is inconsistent or cannot be decoded."""


class TransactionKind(str, Enum):
    """Kind of a transaction, valued by its storage code."""

    CASH = "c"
    ASSET = "a"
    DIVIDEND = "d"
    INTEREST = "i"
    TAX = "t"
    FEE = "f"


_NEEDS_ASSET = frozenset(
    {TransactionKind.ASSET, TransactionKind.DIVIDEND, TransactionKind.INTEREST}
)
_HAS_REFERENCE = frozenset({TransactionKind.TAX, TransactionKind.FEE})


@dataclass(frozen=True)
class CashFlow:
    """An amount in a currency paid on a given date."""

    amount: float
    currency: str
    date: dt.date


@dataclass
class Transaction:
    """A booked transaction.

    ``asset_id`` belongs to asset, dividend and interest transactions,
    ``position`` to asset transactions and ``transaction_ref`` to tax and
    fee transactions, which may refer to the transaction they belong to.
    """

    kind: TransactionKind
    cash_flow: CashFlow
    id: Optional[int] = None
    asset_id: Optional[int] = None
    position: Optional[float] = None
    transaction_ref: Optional[int] = None
    note: Optional[str] = None

    def __post_init__(self) -> None:
        try:
            self.kind = TransactionKind(self.kind)
        except ValueError:
            raise TransactionError(str(self.kind)) from None
        if self.kind in _NEEDS_ASSET and self.asset_id is None:
            raise TransactionError("missing asset id")
        if self.kind is TransactionKind.ASSET and self.position is None:
            raise TransactionError("missing position value")


@dataclass
class TransactionRecord:
    """Flat representation of a transaction as kept in a table row."""

    trans_type: str
    cash_amount: float
    cash_currency: str
    cash_date: dt.date
    id: Optional[int] = None
    asset: Optional[int] = None
    related_trans: Optional[int] = None
    position: Optional[float] = None
    note: Optional[str] = None

    def to_transaction(self) -> Transaction:
        """Decode the record; raise TransactionError if it is inconsistent."""
        try:
            kind = TransactionKind(self.trans_type)
        except ValueError:
            raise TransactionError(self.trans_type) from None

        cash_flow = CashFlow(self.cash_amount, self.cash_currency, self.cash_date)
        fields: dict = {}
        if kind in _NEEDS_ASSET:
            if self.asset is None:
                raise TransactionError("missing asset id")
            fields["asset_id"] = self.asset
        if kind is TransactionKind.ASSET:
            if self.position is None:
                raise TransactionError("missing position value")
            fields["position"] = self.position
        if kind in _HAS_REFERENCE:
            fields["transaction_ref"] = self.related_trans
        return Transaction(
            kind=kind, cash_flow=cash_flow, id=self.id, note=self.note, **fields
        )

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionRecord":
        """Flatten a transaction, keeping only the fields its kind uses."""
        kind = transaction.kind
        flow = transaction.cash_flow
        return cls(
            trans_type=kind.value,
            cash_amount=flow.amount,
            cash_currency=flow.currency,
            cash_date=flow.date,
            id=transaction.id,
            asset=transaction.asset_id if kind in _NEEDS_ASSET else None,
            related_trans=(
                transaction.transaction_ref if kind in _HAS_REFERENCE else None
            ),
            position=transaction.position if kind is TransactionKind.ASSET else None,
            note=transaction.note,
        )