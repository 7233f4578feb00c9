"""Move legality for Klondike.

Every predicate here is total: malformed locations (missing or out-of-range
indices) make the move illegal instead of raising.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .cards import ACE, KING, Card
from .models import GameState, Location, Move, Pile, PileKind


def pile_at(piles: Sequence[Pile], index: Optional[int]) -> Optional[Pile]:
    if not isinstance(index, int) or isinstance(index, bool):
        return None
    if index < 0 or index >= len(piles):
        return None
    return piles[index]


def is_alternating_color(a: Card, b: Card) -> bool:
    return a.is_red != b.is_red


def is_descending_by_one(upper: Card, lower: Card) -> bool:
    return upper.rank == lower.rank + 1


def can_stack_on(base: Card, card: Card) -> bool:
    return is_alternating_color(base, card) and is_descending_by_one(base, card)


def is_valid_run(cards: Sequence[Card]) -> bool:
    if not cards:
        return False
    if not all(card.face_up for card in cards):
        return False
    return all(can_stack_on(cards[i], cards[i + 1]) for i in range(len(cards) - 1))


def can_place_on_tableau(card: Card, pile: Pile) -> bool:
    top = pile.top
    if top is None:
        return card.rank == KING
    return can_stack_on(top, card)


def can_place_on_foundation(card: Card, pile: Pile) -> bool:
    top = pile.top
    if top is None:
        return card.rank == ACE
    return top.suit == card.suit and card.rank == top.rank + 1


def movable_run_start(pile: Pile) -> Optional[int]:
    for index, card in enumerate(pile.cards):
        if card.face_up:
            return index
    return None


def is_valid_tableau_to_tableau_move(
    state: GameState,
    from_pile_index: int,
    card_index: int,
    to_pile_index: int,
) -> bool:
    if from_pile_index == to_pile_index:
        return False
    source = pile_at(state.tableau, from_pile_index)
    destination = pile_at(state.tableau, to_pile_index)
    if source is None or destination is None:
        return False
    if not isinstance(card_index, int) or card_index < 0:
        return False

    moving = source.cards[card_index:]
    if not is_valid_run(moving):
        return False
    return can_place_on_tableau(moving[0], destination)


def is_valid_to_foundation_move(state: GameState, source: Location, foundation_index: int) -> bool:
    foundation = pile_at(state.foundations, foundation_index)
    if foundation is None:
        return False

    if source.pile_kind == PileKind.TABLEAU:
        pile = pile_at(state.tableau, source.pile_index)
        if pile is None or not isinstance(source.card_index, int):
            return False
        # Only the exposed card may go up, never a card from inside a run.
        if source.card_index != len(pile) - 1:
            return False
        card = pile.top
        if card is None or not card.face_up:
            return False
        return can_place_on_foundation(card, foundation)

    if source.pile_kind == PileKind.WASTE:
        card = state.waste.top
        if card is None:
            return False
        return can_place_on_foundation(card, foundation)

    return False


def is_valid_waste_move(state: GameState, target: Location) -> bool:
    card = state.waste.top
    if card is None:
        return False

    if target.pile_kind == PileKind.TABLEAU:
        destination = pile_at(state.tableau, target.pile_index)
        if destination is None:
            return False
        return can_place_on_tableau(card, destination)

    if target.pile_kind == PileKind.FOUNDATION:
        return is_valid_to_foundation_move(state, Location.waste(), target.pile_index)

    return False


def legal_moves(state: GameState) -> List[Move]:
    """All legal moves: foundation moves first, then tableau runs, then waste to tableau."""
    moves: List[Move] = []
    waste = Location.waste()
    foundation_range = range(len(state.foundations))

    for f_idx in foundation_range:
        if is_valid_to_foundation_move(state, waste, f_idx):
            moves.append(Move(waste, Location.foundation(f_idx)))

    for t_idx, pile in enumerate(state.tableau):
        if pile.is_empty:
            continue
        source = Location.tableau(t_idx, len(pile) - 1)
        for f_idx in foundation_range:
            if is_valid_to_foundation_move(state, source, f_idx):
                moves.append(Move(source, Location.foundation(f_idx)))

    for t_idx, pile in enumerate(state.tableau):
        start = movable_run_start(pile)
        if start is None:
            continue
        for card_index in range(start, len(pile)):
            for dest_idx in range(len(state.tableau)):
                if is_valid_tableau_to_tableau_move(state, t_idx, card_index, dest_idx):
                    moves.append(Move(Location.tableau(t_idx, card_index), Location.tableau(dest_idx)))

    for dest_idx in range(len(state.tableau)):
        target = Location.tableau(dest_idx)
        if is_valid_waste_move(state, target):
            moves.append(Move(waste, target))

    return moves
