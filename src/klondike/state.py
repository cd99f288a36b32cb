"""The GameState value passed into and out of every engine operation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator, Optional, Tuple

from klondike.cards import Card
from klondike.history import History
from klondike.piles import (
    FOUNDATION_COUNT,
    TABLEAU_COUNT,
    Cards,
    Foundation,
    PileRef,
    Stock,
    Tableau,
    Waste,
)


@dataclass(frozen=True)
class GameState:
    stock: Cards = ()
    waste: Cards = ()
    foundations: Tuple[Cards, ...] = ((),) * FOUNDATION_COUNT
    tableau: Tuple[Cards, ...] = ((),) * TABLEAU_COUNT
    history: History = field(default_factory=History)
    hint_card_id: Optional[int] = None
    stock_cycles: Optional[int] = None  # None: recycle the waste without limit
    recycles_used: int = 0

    def pile(self, ref: PileRef) -> Cards:
        if isinstance(ref, Stock):
            return self.stock
        if isinstance(ref, Waste):
            return self.waste
        if isinstance(ref, Foundation):
            return self.foundations[ref.index]
        if isinstance(ref, Tableau):
            return self.tableau[ref.index]
        raise TypeError(f"not a pile reference: {ref!r}")

    def with_pile(self, ref: PileRef, cards: Cards) -> GameState:
        cards = tuple(cards)
        if isinstance(ref, Stock):
            return replace(self, stock=cards)
        if isinstance(ref, Waste):
            return replace(self, waste=cards)
        if isinstance(ref, Foundation):
            foundations = list(self.foundations)
            foundations[ref.index] = cards
            return replace(self, foundations=tuple(foundations))
        if isinstance(ref, Tableau):
            tableau = list(self.tableau)
            tableau[ref.index] = cards
            return replace(self, tableau=tuple(tableau))
        raise TypeError(f"not a pile reference: {ref!r}")

    def all_cards(self) -> Iterator[Card]:
        yield from self.stock
        yield from self.waste
        for f in self.foundations:
            yield from f
        for t in self.tableau:
            yield from t
