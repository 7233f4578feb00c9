from __future__ import annotations

from typing import Optional, Sequence

from .cards import Card, build_deck
from .models import DECK_SIZE, TABLEAU_PILES, GameState, GameStatus, Pile, PileKind


def deal_initial_board(deck: Sequence[Card]) -> GameState:
    """Lay out a fresh game from ``deck``, dealing columns of 1..7 cards from the front."""
    if len(deck) != DECK_SIZE or len({card.id for card in deck}) != DECK_SIZE:
        raise ValueError(f"Deck must hold {DECK_SIZE} unique cards")

    cards = [card.flipped(False) for card in deck]
    tableau = []
    next_index = 0
    for column_size in range(1, TABLEAU_PILES + 1):
        column = cards[next_index:next_index + column_size]
        next_index += column_size
        column[-1] = column[-1].flipped(True)
        tableau.append(Pile(PileKind.TABLEAU, tuple(column)))

    empty = GameState.empty()
    return GameState(
        tableau=tuple(tableau),
        foundations=empty.foundations,
        stock=Pile(PileKind.STOCK, tuple(cards[next_index:])),
        waste=empty.waste,
        move_count=0,
        status=GameStatus.IN_PROGRESS,
    )


def new_game(seed: Optional[int] = None) -> GameState:
    return deal_initial_board(build_deck(seed))
