from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from .cards import Card
from .models import (
    DECK_SIZE,
    GameState,
    GameStatus,
    Location,
    Move,
    MoveResult,
    Pile,
    PileKind,
)
from .rules import (
    is_valid_run,
    is_valid_tableau_to_tableau_move,
    is_valid_to_foundation_move,
    is_valid_waste_move,
    pile_at,
)

# Pure transitions only. A rejected request hands back the very object it was
# given, so callers may compare with ``is`` as well as read MoveResult.applied.


def is_win_state(state: GameState) -> bool:
    return all(len(foundation) == 13 for foundation in state.foundations)


def all_cards(state: GameState) -> List[Card]:
    return [card for pile in state.piles() for card in pile]


def card_count(state: GameState) -> int:
    return sum(len(pile) for pile in state.piles())


def _with_status(state: GameState) -> GameState:
    status = GameStatus.WON if is_win_state(state) else GameStatus.IN_PROGRESS
    if status == state.status:
        return state
    return replace(state, status=status)


def _counted(state: GameState) -> GameState:
    return _with_status(replace(state, move_count=state.move_count + 1))


def _kind_name(kind: object) -> str:
    return kind.value if isinstance(kind, PileKind) else str(kind)


def _reveal_top(pile: Pile) -> Pile:
    top = pile.top
    if top is None or top.face_up:
        return pile
    return pile.with_cards(pile.cards[:-1] + (top.flipped(True),))


def _move_tableau_run(state: GameState, move: Move) -> MoveResult:
    from_idx = move.source.pile_index
    card_index = move.source.card_index
    to_idx = move.target.pile_index
    source = pile_at(state.tableau, from_idx)
    if source is None or not isinstance(card_index, int) or not 0 <= card_index < len(source):
        return MoveResult.rejected(state, "Tableau moves need a source card and a destination pile")
    if not is_valid_run(source.cards[card_index:]):
        return MoveResult.rejected(state, "Selected cards are not a face-up run")

    run_length = len(source) - card_index
    count = run_length if move.count is None else move.count
    if not isinstance(count, int) or count < 1 or count > run_length:
        return MoveResult.rejected(state, "Count does not fit the selected run")
    # A shorter carry lifts the top of the run; its own bottom card must fit.
    start = len(source) - count
    if not is_valid_tableau_to_tableau_move(state, from_idx, start, to_idx):
        return MoveResult.rejected(state, "Run cannot be placed there")

    moving = source.cards[start:]
    destination = state.tableau[to_idx]
    next_state = state.with_tableau(from_idx, _reveal_top(source.with_cards(source.cards[:start])))
    next_state = next_state.with_tableau(to_idx, destination.with_cards(destination.cards + moving))
    return MoveResult.accepted(_counted(next_state))


def _move_to_foundation(state: GameState, move: Move) -> MoveResult:
    f_idx = move.target.pile_index
    if f_idx is None:
        return MoveResult.rejected(state, "Foundation index required")
    if not is_valid_to_foundation_move(state, move.source, f_idx):
        return MoveResult.rejected(state, "Card cannot go to that foundation")

    if move.source.pile_kind == PileKind.TABLEAU:
        t_idx = move.source.pile_index
        pile = state.tableau[t_idx]
        card = pile.cards[-1]
        next_state = state.with_tableau(t_idx, _reveal_top(pile.with_cards(pile.cards[:-1])))
    else:
        card = state.waste.cards[-1]
        next_state = replace(state, waste=state.waste.with_cards(state.waste.cards[:-1]))

    foundation = next_state.foundations[f_idx]
    next_state = next_state.with_foundation(f_idx, foundation.with_cards(foundation.cards + (card,)))
    return MoveResult.accepted(_counted(next_state))


def _move_waste_to_tableau(state: GameState, move: Move) -> MoveResult:
    to_idx = move.target.pile_index
    if to_idx is None:
        return MoveResult.rejected(state, "Tableau index required")
    if not is_valid_waste_move(state, move.target):
        return MoveResult.rejected(state, "Waste card cannot be placed there")

    card = state.waste.cards[-1]
    destination = state.tableau[to_idx]
    next_state = replace(state, waste=state.waste.with_cards(state.waste.cards[:-1]))
    next_state = next_state.with_tableau(to_idx, destination.with_cards(destination.cards + (card,)))
    return MoveResult.accepted(_counted(next_state))


def try_move(state: GameState, move: Move) -> MoveResult:
    source_kind = move.source.pile_kind
    target_kind = move.target.pile_kind

    if source_kind == PileKind.TABLEAU and target_kind == PileKind.TABLEAU:
        return _move_tableau_run(state, move)
    if source_kind in (PileKind.TABLEAU, PileKind.WASTE) and target_kind == PileKind.FOUNDATION:
        return _move_to_foundation(state, move)
    if source_kind == PileKind.WASTE and target_kind == PileKind.TABLEAU:
        return _move_waste_to_tableau(state, move)
    return MoveResult.rejected(state, f"Cannot move from {_kind_name(source_kind)} to {_kind_name(target_kind)}")


def apply_move(state: GameState, move: Move) -> GameState:
    return try_move(state, move).state


def draw_from_stock(state: GameState) -> GameState:
    if state.stock.is_empty:
        return state
    card = state.stock.cards[-1]
    next_state = replace(
        state,
        stock=state.stock.with_cards(state.stock.cards[:-1]),
        waste=state.waste.with_cards(state.waste.cards + (card.flipped(True),)),
    )
    return _with_status(next_state)


def recycle_waste_to_stock(state: GameState) -> GameState:
    if not state.stock.is_empty or state.waste.is_empty:
        return state
    # Last drawn card goes back on top of the stock, so it is drawn first again.
    rebuilt = tuple(card.flipped(False) for card in reversed(state.waste.cards))
    next_state = replace(
        state,
        stock=state.stock.with_cards(rebuilt),
        waste=state.waste.with_cards(()),
    )
    return _with_status(next_state)


def draw_or_recycle(state: GameState) -> GameState:
    if state.stock.is_empty:
        return recycle_waste_to_stock(state)
    return draw_from_stock(state)


def auto_move_to_foundation(state: GameState, source: Location) -> MoveResult:
    for f_idx in range(len(state.foundations)):
        if is_valid_to_foundation_move(state, source, f_idx):
            return try_move(state, Move(source, Location.foundation(f_idx)))
    return MoveResult.rejected(state, "No foundation accepts that card")


def find_duplicate_or_missing(state: GameState) -> Optional[str]:
    """Describe the first conservation problem in ``state``, or None when all 52 cards are present once."""
    seen = set()
    for card in all_cards(state):
        if card.id in seen:
            return f"duplicate card {card.id}"
        seen.add(card.id)
    if len(seen) != DECK_SIZE:
        return f"expected {DECK_SIZE} cards, found {len(seen)}"
    return None
