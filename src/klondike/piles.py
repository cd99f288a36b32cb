"""Pile references and per-kind pile helpers.

A pile reference names one pile of the table. The four kinds form a closed
set, so a Stock can never carry an index and a Tableau always has one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from klondike.cards import ACE, Card

FOUNDATION_COUNT = 4
TABLEAU_COUNT = 7

Cards = Tuple[Card, ...]


@dataclass(frozen=True)
class Stock:
    def __str__(self) -> str:
        return "stock"


@dataclass(frozen=True)
class Waste:
    def __str__(self) -> str:
        return "waste"


@dataclass(frozen=True)
class Foundation:
    index: int

    def __str__(self) -> str:
        return f"foundation[{self.index}]"


@dataclass(frozen=True)
class Tableau:
    index: int

    def __str__(self) -> str:
        return f"tableau[{self.index}]"


PileRef = Union[Stock, Waste, Foundation, Tableau]

STOCK = Stock()
WASTE = Waste()
FOUNDATIONS = tuple(Foundation(i) for i in range(FOUNDATION_COUNT))
TABLEAUS = tuple(Tableau(i) for i in range(TABLEAU_COUNT))


def is_valid_ref(ref: object) -> bool:
    """True if ``ref`` names a pile that exists on the table."""
    if isinstance(ref, (Stock, Waste)):
        return True
    if isinstance(ref, Foundation):
        return isinstance(ref.index, int) and 0 <= ref.index < FOUNDATION_COUNT
    if isinstance(ref, Tableau):
        return isinstance(ref.index, int) and 0 <= ref.index < TABLEAU_COUNT
    return False


def face_up_start(cards: Sequence[Card]) -> int:
    """Index of the first card of the face-up run at the top of a tableau pile.

    Returns ``len(cards)`` when the pile is empty or its top card is face-down.
    """
    i = len(cards)
    while i > 0 and cards[i - 1].face_up:
        i -= 1
    return i


def is_foundation_sequence(cards: Sequence[Card]) -> bool:
    if not cards:
        return True
    suit = cards[0].suit
    return all(c.suit == suit and c.rank == ACE + n for n, c in enumerate(cards))


def is_tableau_sequence(cards: Sequence[Card]) -> bool:
    """Alternating colors, ranks going down by one toward the top."""
    for lower, upper in zip(cards, cards[1:]):
        if lower.color == upper.color or upper.rank != lower.rank - 1:
            return False
    return True
