"""Klondike engine primitives reused by the host server and scripts."""

from .cards import Card, RANKS, SUITS, build_deck, create_deck, parse_label, shuffle_deck
from .deal import deal_initial_board, new_game
from .engine import (
    apply_move,
    auto_move_to_foundation,
    draw_from_stock,
    draw_or_recycle,
    is_win_state,
    recycle_waste_to_stock,
    try_move,
)
from .models import GameConfig, GameState, GameStatus, Location, Move, MoveResult, Pile, PileKind
from .rules import (
    is_valid_tableau_to_tableau_move,
    is_valid_to_foundation_move,
    is_valid_waste_move,
    legal_moves,
)
from .session import GameSession

__all__ = [
    "Card",
    "RANKS",
    "SUITS",
    "build_deck",
    "create_deck",
    "parse_label",
    "shuffle_deck",
    "deal_initial_board",
    "new_game",
    "apply_move",
    "auto_move_to_foundation",
    "draw_from_stock",
    "draw_or_recycle",
    "is_win_state",
    "recycle_waste_to_stock",
    "try_move",
    "GameConfig",
    "GameState",
    "GameStatus",
    "Location",
    "Move",
    "MoveResult",
    "Pile",
    "PileKind",
    "is_valid_tableau_to_tableau_move",
    "is_valid_to_foundation_move",
    "is_valid_waste_move",
    "legal_moves",
    "GameSession",
]
