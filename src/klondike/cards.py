"""Card values and deck construction for Klondike."""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import List, Optional

SUITS = ["♠", "♥", "♣", "♦"]  # 0..3
RED_SUITS = (1, 3)  # hearts, diamonds
NUM_PER_SUIT = 13
DECK_SIZE = len(SUITS) * NUM_PER_SUIT

ACE = 1
KING = 13

RANK_TO_TEXT = {1: "A", 11: "J", 12: "Q", 13: "K"}
for _r in range(2, 11):
    RANK_TO_TEXT[_r] = str(_r)


def is_red(suit: int) -> bool:
    return suit in RED_SUITS


@dataclass(frozen=True)
class Card:
    """One playing card.

    ``color`` and ``id`` are derived from suit and rank when the card is
    built and never change; flipping returns a new value with the same id.
    """

    suit: int  # 0..3
    rank: int  # 1..13
    face_up: bool = False
    color: str = field(init=False, compare=False)
    id: int = field(init=False)

    def __post_init__(self) -> None:
        if not 0 <= self.suit < len(SUITS):
            raise ValueError(f"suit out of range: {self.suit}")
        if not ACE <= self.rank <= KING:
            raise ValueError(f"rank out of range: {self.rank}")
        object.__setattr__(self, "color", "red" if is_red(self.suit) else "black")
        object.__setattr__(self, "id", self.suit * NUM_PER_SUIT + self.rank - 1)

    def flipped(self, face_up: bool) -> Card:
        if face_up == self.face_up:
            return self
        return replace(self, face_up=face_up)

    def __repr__(self) -> str:
        return f"{RANK_TO_TEXT[self.rank]}{SUITS[self.suit]}{'↑' if self.face_up else '↓'}"


def card_from_id(card_id: int, face_up: bool = False) -> Card:
    return Card(card_id // NUM_PER_SUIT, card_id % NUM_PER_SUIT + 1, face_up)


def make_deck() -> List[Card]:
    """Return the 52 cards in suit-major order, all face-down."""
    return [Card(suit, rank, False) for suit in range(len(SUITS)) for rank in range(ACE, KING + 1)]


def shuffled_deck(rng: Optional[random.Random] = None, seed: Optional[int] = None) -> List[Card]:
    """Return a uniformly shuffled deck.

    ``random.Random.shuffle`` is a Fisher-Yates permutation, so every one of
    the 52! orderings is equally likely. Pass ``seed`` for a repeatable deal.
    """
    if rng is None:
        rng = random.Random(seed)
    deck = make_deck()
    rng.shuffle(deck)
    return deck
