"""Klondike rules engine.

Every operation takes the current GameState and returns the next one; the
engine keeps no state of its own. Failures come back as values on
MoveResult, never as exceptions.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from klondike.cards import DECK_SIZE, Card, shuffled_deck
from klondike.hints import can_auto_finish, find_auto_finish_move, find_move
from klondike.history import CardMove, DealFromStock, Recycle
from klondike.piles import (
    FOUNDATION_COUNT,
    TABLEAU_COUNT,
    PileRef,
    Tableau,
    face_up_start,
    is_foundation_sequence,
    is_tableau_sequence,
    is_valid_ref,
)
from klondike.rules import is_legal, pick_up
from klondike.state import GameState

logger = logging.getLogger(__name__)

INVALID_MOVE = "invalid-move"
NOTHING_TO_UNDO = "nothing-to-undo"
NO_HINT_AVAILABLE = "no-hint-available"
EMPTY_SOURCE = "empty-source"

__all__ = [
    "INVALID_MOVE",
    "NOTHING_TO_UNDO",
    "NO_HINT_AVAILABLE",
    "EMPTY_SOURCE",
    "MoveResult",
    "auto_finish",
    "auto_finish_step",
    "can_auto_finish",
    "can_deal",
    "deal_from_stock",
    "deal_layout",
    "execute",
    "hint",
    "invariant_violations",
    "is_won",
    "new_game",
    "propose_move",
    "restart",
    "show_hint",
    "undo",
]


@dataclass(frozen=True)
class MoveResult:
    state: GameState
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def won(self) -> bool:
        return is_won(self.state)


# ---------- Dealing ----------

def deal_layout(deck: Sequence[Card], stock_cycles: Optional[int] = None) -> GameState:
    """Lay a 52-card sequence out as the opening Klondike table.

    Cards are dealt row by row across the piles: row ``i`` gives one card
    to each of piles ``i..6``, face-up only on pile ``i``. Pile ``i`` ends
    with ``i+1`` cards and the 24 left over become the stock.
    """
    if len(deck) != DECK_SIZE:
        raise ValueError(f"expected {DECK_SIZE} cards, got {len(deck)}")
    tableau: List[List[Card]] = [[] for _ in range(TABLEAU_COUNT)]
    pos = 0
    for row in range(TABLEAU_COUNT):
        for col in range(row, TABLEAU_COUNT):
            tableau[col].append(deck[pos].flipped(col == row))
            pos += 1
    stock = tuple(c.flipped(False) for c in deck[pos:])
    return GameState(
        stock=stock,
        tableau=tuple(tuple(p) for p in tableau),
        stock_cycles=stock_cycles,
    )


def new_game(
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    stock_cycles: Optional[int] = None,
) -> GameState:
    state = deal_layout(shuffled_deck(rng=rng, seed=seed), stock_cycles=stock_cycles)
    logger.info("New game (seed=%s, stock_cycles=%s)", seed, stock_cycles)
    return state


# ---------- Stock / waste ----------

def can_deal(state: GameState) -> bool:
    if state.stock:
        return True
    if not state.waste:
        return False
    return state.stock_cycles is None or state.recycles_used < state.stock_cycles


def deal_from_stock(state: GameState) -> GameState:
    """Turn the stock top onto the waste, or recycle the waste when the stock is empty.

    Returns ``state`` unchanged when both piles are empty or the recycle
    limit has been used up.
    """
    if state.stock:
        card = state.stock[-1].flipped(True)
        logger.debug("Deal %r from stock", card)
        return replace(
            state,
            stock=state.stock[:-1],
            waste=state.waste + (card,),
            history=state.history.push(DealFromStock(card)),
            hint_card_id=None,
        )
    if not can_deal(state):
        logger.debug("Nothing to deal (stock empty, waste=%d)", len(state.waste))
        return state
    stock = tuple(c.flipped(False) for c in reversed(state.waste))
    logger.debug("Recycle %d waste cards into stock", len(stock))
    return replace(
        state,
        stock=stock,
        waste=(),
        history=state.history.push(Recycle(len(stock))),
        hint_card_id=None,
        recycles_used=state.recycles_used + 1,
    )


# ---------- Moves ----------

def execute(state: GameState, source: PileRef, target: PileRef, cards: Sequence[Card]) -> GameState:
    """Apply an already validated move and record it.

    The moving segment is taken off the top of ``source``; a face-down
    tableau card left on top is turned face-up. The cards are then
    appended to ``target`` in their original order.
    """
    cards = tuple(cards)
    remaining = state.pile(source)[: len(state.pile(source)) - len(cards)]
    flipped = False
    if isinstance(source, Tableau) and remaining and not remaining[-1].face_up:
        remaining = remaining[:-1] + (remaining[-1].flipped(True),)
        flipped = True
    state = state.with_pile(source, remaining)
    state = state.with_pile(target, state.pile(target) + cards)
    logger.debug("Move %r from %s to %s%s", cards, source, target, " (flip)" if flipped else "")
    return replace(
        state,
        history=state.history.push(CardMove(source, target, cards, flipped)),
        hint_card_id=None,
    )


def propose_move(
    state: GameState,
    source: PileRef,
    target: PileRef,
    card_index: Optional[int] = None,
) -> MoveResult:
    """Validate and execute a player move.

    ``card_index`` picks the bottom card of the moving segment in the
    source pile and defaults to the top card. Any rejection returns the
    untouched state with ``INVALID_MOVE``.
    """
    if not is_valid_ref(source) or not is_valid_ref(target) or source == target:
        logger.debug("Rejected move %s -> %s: bad pile reference", source, target)
        return MoveResult(state, INVALID_MOVE)
    cards = pick_up(state, source, card_index)
    if cards is None:
        reason = EMPTY_SOURCE if not state.pile(source) else "bad pick"
        logger.debug("Rejected move %s[%s] -> %s: %s", source, card_index, target, reason)
        return MoveResult(state, INVALID_MOVE)
    if not is_legal(cards, target, state):
        logger.debug("Rejected move %r -> %s", cards, target)
        return MoveResult(state, INVALID_MOVE)
    result = MoveResult(execute(state, source, target, cards))
    if result.won:
        logger.info("Game won in %d moves", len(result.state.history))
    return result


# ---------- Undo ----------

def undo(state: GameState) -> MoveResult:
    """Pop the last record and apply its inverse without re-validating."""
    if not state.history.can_undo():
        return MoveResult(state, NOTHING_TO_UNDO)
    history, record = state.history.pop()
    state = replace(state, history=history, hint_card_id=None)

    if isinstance(record, DealFromStock):
        card = state.waste[-1].flipped(False)
        state = replace(state, waste=state.waste[:-1], stock=state.stock + (card,))
    elif isinstance(record, Recycle):
        waste = tuple(c.flipped(True) for c in reversed(state.stock))
        state = replace(state, stock=(), waste=waste, recycles_used=state.recycles_used - 1)
    elif isinstance(record, CardMove):
        n = len(record.cards)
        target_pile = state.pile(record.target)
        moved = target_pile[len(target_pile) - n:]
        source_pile = state.pile(record.source)
        if record.flipped_source:
            source_pile = source_pile[:-1] + (source_pile[-1].flipped(False),)
        state = state.with_pile(record.target, target_pile[: len(target_pile) - n])
        state = state.with_pile(record.source, source_pile + moved)
    else:
        raise TypeError(f"unknown history record: {record!r}")

    logger.debug("Undid %s", type(record).__name__)
    return MoveResult(state)


def restart(state: GameState) -> GameState:
    """Undo every recorded operation, back to the opening deal."""
    while state.history.can_undo():
        state = undo(state).state
    return state


# ---------- Hints / auto-finish ----------

def hint(state: GameState) -> Optional[int]:
    move = find_move(state)
    return move.card.id if move is not None else None


def show_hint(state: GameState) -> MoveResult:
    """Return the state with ``hint_card_id`` set to the suggested card."""
    card_id = hint(state)
    if card_id is None:
        return MoveResult(replace(state, hint_card_id=None), NO_HINT_AVAILABLE)
    return MoveResult(replace(state, hint_card_id=card_id))


def auto_finish_step(state: GameState) -> Optional[GameState]:
    """Play one tableau card to a foundation; None when no such move is left."""
    move = find_auto_finish_move(state)
    if move is None:
        return None
    return execute(state, move.source, move.target, (move.card,))


def auto_finish(state: GameState) -> GameState:
    """Play every remaining card to the foundations, one recorded move at a time."""
    if not can_auto_finish(state):
        return state
    while True:
        nxt = auto_finish_step(state)
        if nxt is None:
            break
        state = nxt
    if is_won(state):
        logger.info("Game won by auto-finish in %d moves", len(state.history))
    return state


# ---------- Win / invariants ----------

def is_won(state: GameState) -> bool:
    return all(len(f) == 13 for f in state.foundations)


def invariant_violations(state: GameState) -> List[str]:
    """Describe every broken table invariant; an empty list means the table is sound."""
    problems = []
    cards = list(state.all_cards())
    counts = Counter(c.id for c in cards)
    if len(cards) != DECK_SIZE or len(counts) != DECK_SIZE:
        dupes = sorted(cid for cid, n in counts.items() if n > 1)
        problems.append(f"expected {DECK_SIZE} distinct cards, got {len(cards)} (duplicates: {dupes})")
    if len(state.foundations) != FOUNDATION_COUNT or len(state.tableau) != TABLEAU_COUNT:
        problems.append("wrong number of piles")
    if any(c.face_up for c in state.stock):
        problems.append("face-up card in stock")
    if any(not c.face_up for c in state.waste):
        problems.append("face-down card in waste")
    for i, f in enumerate(state.foundations):
        if not is_foundation_sequence(f) or any(not c.face_up for c in f):
            problems.append(f"foundation {i} out of order")
    for i, pile in enumerate(state.tableau):
        if pile and not pile[-1].face_up:
            problems.append(f"tableau {i} has a face-down top card")
        start = face_up_start(pile)
        if any(c.face_up for c in pile[:start]):
            problems.append(f"tableau {i} has a face-up card under a face-down one")
        if not is_tableau_sequence(pile[start:]):
            problems.append(f"tableau {i} face-up run is not a descending alternating sequence")
    return problems
