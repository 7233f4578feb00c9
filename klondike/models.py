from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Optional, Tuple

from .cards import Card

TABLEAU_PILES = 7
FOUNDATION_PILES = 4
DECK_SIZE = 52


class PileKind(str, Enum):
    TABLEAU = "tableau"
    FOUNDATION = "foundation"
    STOCK = "stock"
    WASTE = "waste"


class GameStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"


@dataclass
class GameConfig:
    seed: Optional[int] = None
    replay_step_ms: int = 140
    auto_replay: bool = True
    history_limit: int = 2_000


@dataclass(frozen=True)
class Pile:
    kind: PileKind
    cards: Tuple[Card, ...] = ()

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    @property
    def top(self) -> Optional[Card]:
        return self.cards[-1] if self.cards else None

    @property
    def is_empty(self) -> bool:
        return not self.cards

    def with_cards(self, cards: Tuple[Card, ...]) -> Pile:
        return Pile(self.kind, tuple(cards))


def empty_pile(kind: PileKind) -> Pile:
    return Pile(kind, ())


@dataclass(frozen=True)
class GameState:
    """One immutable snapshot of the board.

    Engine functions never modify a GameState; they build a new one with
    ``replace`` or hand the same object back when nothing changed.
    """

    tableau: Tuple[Pile, ...]
    foundations: Tuple[Pile, ...]
    stock: Pile
    waste: Pile
    move_count: int = 0
    status: GameStatus = GameStatus.IN_PROGRESS

    @classmethod
    def empty(cls) -> GameState:
        return cls(
            tableau=tuple(empty_pile(PileKind.TABLEAU) for _ in range(TABLEAU_PILES)),
            foundations=tuple(empty_pile(PileKind.FOUNDATION) for _ in range(FOUNDATION_PILES)),
            stock=empty_pile(PileKind.STOCK),
            waste=empty_pile(PileKind.WASTE),
        )

    def piles(self) -> Iterator[Pile]:
        yield from self.tableau
        yield from self.foundations
        yield self.stock
        yield self.waste

    def with_tableau(self, index: int, pile: Pile) -> GameState:
        tableau = self.tableau[:index] + (pile,) + self.tableau[index + 1:]
        return replace(self, tableau=tableau)

    def with_foundation(self, index: int, pile: Pile) -> GameState:
        foundations = self.foundations[:index] + (pile,) + self.foundations[index + 1:]
        return replace(self, foundations=foundations)


@dataclass(frozen=True)
class Location:
    pile_kind: PileKind
    pile_index: Optional[int] = None
    card_index: Optional[int] = None

    @classmethod
    def tableau(cls, pile_index: int, card_index: Optional[int] = None) -> Location:
        return cls(PileKind.TABLEAU, pile_index, card_index)

    @classmethod
    def foundation(cls, pile_index: int) -> Location:
        return cls(PileKind.FOUNDATION, pile_index)

    @classmethod
    def waste(cls) -> Location:
        return cls(PileKind.WASTE)

    @classmethod
    def stock(cls) -> Location:
        return cls(PileKind.STOCK)


@dataclass(frozen=True)
class Move:
    source: Location
    target: Location
    count: Optional[int] = None


@dataclass(frozen=True)
class MoveResult:
    applied: bool
    state: GameState
    reason: Optional[str] = None

    @classmethod
    def accepted(cls, state: GameState) -> MoveResult:
        return cls(applied=True, state=state)

    @classmethod
    def rejected(cls, state: GameState, reason: str) -> MoveResult:
        return cls(applied=False, state=state, reason=reason)
