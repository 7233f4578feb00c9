from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .deal import new_game
from .engine import auto_move_to_foundation, draw_or_recycle, try_move
from .models import GameConfig, GameState, GameStatus, Location, Move, MoveResult
from .strategy import baseline_move

LOGGER = logging.getLogger(__name__)


class GameSession:
    """Single-player game store.

    Holds the current snapshot and the history of every distinct snapshot
    since the deal. Requests go through the pure engine; the store only keeps
    the latest result and appends it to history.
    """

    def __init__(self, config: Optional[GameConfig] = None, state: Optional[GameState] = None) -> None:
        self.config = config or GameConfig()
        self.state: GameState = state if state is not None else new_game(self.config.seed)
        self.history: List[GameState] = [self.state]
        self.replayed = False

    @classmethod
    def start(cls, seed: Optional[int] = None, config: Optional[GameConfig] = None) -> "GameSession":
        config = config or GameConfig()
        return cls(config, state=new_game(config.seed if seed is None else seed))

    def new_game(self, seed: Optional[int] = None) -> GameState:
        if seed is None:
            seed = self.config.seed
        self.state = new_game(seed)
        self.history = [self.state]
        self.replayed = False
        LOGGER.debug("New game dealt (seed=%s)", seed)
        return self.state

    def _record(self, result: MoveResult) -> MoveResult:
        if not result.applied:
            LOGGER.debug("Rejected request: %s", result.reason)
            return result
        self.state = result.state
        self.history.append(result.state)
        # Frame 0 is the deal and the last frame is the current state; both stay.
        limit = max(self.config.history_limit, 2)
        if len(self.history) > limit:
            del self.history[1:len(self.history) - limit + 1]
        LOGGER.debug("Applied request; move_count=%s status=%s", self.state.move_count, self.state.status.value)
        return result

    def move(self, move: Move) -> MoveResult:
        return self._record(try_move(self.state, move))

    def stock_click(self) -> MoveResult:
        next_state = draw_or_recycle(self.state)
        if next_state is self.state:
            return self._record(MoveResult.rejected(self.state, "Stock and waste are both empty"))
        return self._record(MoveResult.accepted(next_state))

    def auto_foundation(self, source: Location) -> MoveResult:
        return self._record(auto_move_to_foundation(self.state, source))

    def hint(self) -> Optional[Move]:
        return baseline_move(self.state)

    @property
    def is_won(self) -> bool:
        return self.state.status == GameStatus.WON

    def needs_replay(self) -> bool:
        return self.is_won and not self.replayed

    def mark_replayed(self) -> None:
        self.replayed = True

    def replay_frames(self) -> Tuple[GameState, ...]:
        return tuple(self.history)
