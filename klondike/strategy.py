from __future__ import annotations

from typing import Optional

from .engine import draw_or_recycle, try_move
from .models import GameState, GameStatus, Move, PileKind
from .rules import legal_moves, movable_run_start


def _reveals_card(state: GameState, move: Move) -> bool:
    source = move.source
    if source.pile_kind != PileKind.TABLEAU or source.card_index is None:
        return False
    pile = state.tableau[source.pile_index]
    return source.card_index > 0 and source.card_index == movable_run_start(pile)


def baseline_move(state: GameState) -> Optional[Move]:
    """House strategy: foundations first, then runs that uncover a card, then the waste.

    Returns None when only a stock click is left. Every move it picks makes
    progress, so repeated calls cannot shuffle a run back and forth.
    """
    moves = legal_moves(state)
    for move in moves:
        if move.target.pile_kind == PileKind.FOUNDATION:
            return move
    for move in moves:
        if move.target.pile_kind == PileKind.TABLEAU and _reveals_card(state, move):
            return move
    for move in moves:
        if move.source.pile_kind == PileKind.WASTE:
            return move
    return None


def play_out(state: GameState, max_steps: int = 5_000) -> GameState:
    """Drive ``state`` with the baseline strategy until it wins or stalls."""
    idle_clicks = 0
    for _ in range(max_steps):
        if state.status == GameStatus.WON:
            break
        move = baseline_move(state)
        if move is not None:
            state = try_move(state, move).state
            idle_clicks = 0
            continue
        # A full pass through stock and waste without a move means we're stuck.
        if idle_clicks > len(state.stock) + len(state.waste):
            break
        next_state = draw_or_recycle(state)
        if next_state is state:
            break
        state = next_state
        idle_clicks += 1
    return state
