"""Move legality: which cards may be picked up and where they may go."""

from __future__ import annotations

from typing import Optional, Sequence

from klondike.cards import ACE, KING, Card
from klondike.piles import Cards, Foundation, PileRef, Tableau, Waste, face_up_start, is_valid_ref
from klondike.state import GameState


def can_stack_tableau(upper: Card, lower: Card) -> bool:
    return lower.face_up and upper.color != lower.color and upper.rank == lower.rank - 1


def can_move_to_empty_tableau(card: Card) -> bool:
    return card.rank == KING


def can_move_to_foundation(card: Card, foundation: Sequence[Card]) -> bool:
    if not foundation:
        return card.rank == ACE
    top = foundation[-1]
    return card.suit == top.suit and card.rank == top.rank + 1


def is_legal(moving_cards: Sequence[Card], target: PileRef, state: GameState) -> bool:
    """Return True if ``moving_cards`` may be dropped on ``target``.

    Only the bottom card of the moving segment is checked against the
    target; the segment itself is a picked-up unit (see ``pick_up``).
    """
    if not moving_cards or not is_valid_ref(target):
        return False
    bottom = moving_cards[0]
    if isinstance(target, Tableau):
        pile = state.tableau[target.index]
        if not pile:
            return can_move_to_empty_tableau(bottom)
        return can_stack_tableau(bottom, pile[-1])
    if isinstance(target, Foundation):
        if len(moving_cards) != 1:
            return False
        return can_move_to_foundation(bottom, state.foundations[target.index])
    return False


def pick_up(state: GameState, source: PileRef, card_index: Optional[int] = None) -> Optional[Cards]:
    """Cards that would be lifted from ``source`` starting at ``card_index``.

    ``card_index`` defaults to the top card. Returns None when the pick is
    not allowed: empty pile, a face-down card, a card other than the top of
    the waste, or a pile that is not a forward move source.
    """
    if not is_valid_ref(source):
        return None
    if not isinstance(source, (Tableau, Waste)):
        return None
    pile = state.pile(source)
    if not pile:
        return None
    if card_index is None:
        card_index = len(pile) - 1
    if not isinstance(card_index, int) or not 0 <= card_index < len(pile):
        return None
    if isinstance(source, Waste):
        if card_index != len(pile) - 1:
            return None
        return (pile[-1],)
    if card_index < face_up_start(pile):
        return None
    return tuple(pile[card_index:])
