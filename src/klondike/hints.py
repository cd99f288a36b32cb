"""Greedy search for a single legal move."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from klondike.cards import Card
from klondike.piles import FOUNDATIONS, TABLEAUS, WASTE, PileRef, face_up_start
from klondike.rules import is_legal
from klondike.state import GameState


@dataclass(frozen=True)
class SuggestedMove:
    source: PileRef
    card_index: int
    target: PileRef
    card: Card


def find_move(state: GameState) -> Optional[SuggestedMove]:
    """Return the first legal move in a fixed search order, or None.

    The waste top is tried first against the foundations and then the
    tableau. Next each tableau pile is scanned from the bottom of its
    face-up run upward; a candidate is tried on every other tableau pile
    and, if it is the pile's top card, on every foundation.
    """
    if state.waste:
        card = state.waste[-1]
        for target in FOUNDATIONS + TABLEAUS:
            if is_legal((card,), target, state):
                return SuggestedMove(WASTE, len(state.waste) - 1, target, card)

    for source in TABLEAUS:
        pile = state.tableau[source.index]
        for i in range(face_up_start(pile), len(pile)):
            moving = pile[i:]
            for target in TABLEAUS:
                if target == source:
                    continue
                if is_legal(moving, target, state):
                    return SuggestedMove(source, i, target, pile[i])
            if i == len(pile) - 1:
                for target in FOUNDATIONS:
                    if is_legal(moving, target, state):
                        return SuggestedMove(source, i, target, pile[i])
    return None


def can_auto_finish(state: GameState) -> bool:
    """Eligible when stock and waste are empty and all tableau cards are face-up."""
    if state.stock or state.waste:
        return False
    return all(c.face_up for pile in state.tableau for c in pile)


def find_auto_finish_move(state: GameState) -> Optional[SuggestedMove]:
    """Find the next tableau->foundation move, or None."""
    for source in TABLEAUS:
        pile = state.tableau[source.index]
        if not pile:
            continue
        card = pile[-1]
        for target in FOUNDATIONS:
            if is_legal((card,), target, state):
                return SuggestedMove(source, len(pile) - 1, target, card)
    return None
