"""Move records and the undo stack."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

from klondike.cards import Card
from klondike.piles import Cards, PileRef


@dataclass(frozen=True)
class DealFromStock:
    """One card turned from the stock onto the waste."""

    card: Card


@dataclass(frozen=True)
class Recycle:
    """The whole waste turned back over to form a new stock."""

    count: int


@dataclass(frozen=True)
class CardMove:
    """Cards moved from one pile to another.

    ``cards`` are stored as they were while moving (face-up). When
    ``flipped_source`` is set the move exposed a face-down card on the
    source pile and turned it over.
    """

    source: PileRef
    target: PileRef
    cards: Cards
    flipped_source: bool = False


Record = Union[DealFromStock, Recycle, CardMove]


class History:
    """
    Immutable LIFO of move records. ``push`` and ``pop`` return a new
    History; the engine is the only caller of either.
    """

    __slots__ = ("_records",)

    def __init__(self, records: Tuple[Record, ...] = ()):
        self._records = tuple(records)

    def push(self, record: Record) -> History:
        return History(self._records + (record,))

    def pop(self) -> Tuple[History, Record]:
        if not self._records:
            raise IndexError("pop from empty history")
        return History(self._records[:-1]), self._records[-1]

    def can_undo(self) -> bool:
        return len(self._records) > 0

    def last(self) -> Optional[Record]:
        return self._records[-1] if self._records else None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, History):
            return NotImplemented
        return self._records == other._records

    def __hash__(self) -> int:
        return hash(self._records)

    def __repr__(self) -> str:
        return f"History({len(self._records)} records)"
