from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence

from klondike.cards import SUITS, Card, make_card, parse_label
from klondike.models import GameState, Location, Move, Pile, PileKind


def card(label: str, face_up: bool = True) -> Card:
    """Build a card from a short label such as ``"8c"`` or ``"Th"``."""
    return parse_label(label, face_up)


def down(label: str) -> Card:
    return parse_label(label, face_up=False)


def rig(
    *,
    tableau: Optional[Dict[int, Sequence[Card]]] = None,
    foundations: Optional[Dict[int, Sequence[Card]]] = None,
    stock: Iterable[Card] = (),
    waste: Iterable[Card] = (),
    move_count: int = 0,
) -> GameState:
    """Start from an empty board and place the given cards (bottom to top)."""
    state = GameState.empty()
    for idx, cards in (tableau or {}).items():
        state = state.with_tableau(idx, Pile(PileKind.TABLEAU, tuple(cards)))
    for idx, cards in (foundations or {}).items():
        state = state.with_foundation(idx, Pile(PileKind.FOUNDATION, tuple(cards)))
    return GameState(
        tableau=state.tableau,
        foundations=state.foundations,
        stock=Pile(PileKind.STOCK, tuple(stock)),
        waste=Pile(PileKind.WASTE, tuple(waste)),
        move_count=move_count,
    )


def full_suit(suit: str, upto: int = 13) -> list[Card]:
    return [make_card(suit, rank, face_up=True) for rank in range(1, upto + 1)]


def complete_foundations() -> Dict[int, list[Card]]:
    return {idx: full_suit(suit) for idx, suit in enumerate(SUITS)}


def t2t(from_pile: int, card_index: int, to_pile: int, count: Optional[int] = None) -> Move:
    return Move(Location.tableau(from_pile, card_index), Location.tableau(to_pile), count)


def ranks(pile: Pile) -> list[int]:
    return [c.rank for c in pile]
