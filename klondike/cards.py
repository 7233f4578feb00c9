from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence

SUITS = ("clubs", "diamonds", "hearts", "spades")
RED_SUITS = frozenset({"hearts", "diamonds"})
RANKS = tuple(range(1, 14))
RANK_LABELS = "A23456789TJQK"

ACE = 1
KING = 13


@dataclass(frozen=True)
class Card:
    id: str
    suit: str = field(compare=False)
    rank: int = field(compare=False)
    face_up: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")

    @property
    def is_red(self) -> bool:
        return self.suit in RED_SUITS

    @property
    def color(self) -> str:
        return "red" if self.is_red else "black"

    @property
    def label(self) -> str:
        return f"{RANK_LABELS[self.rank - 1]}{self.suit[0]}"

    def flipped(self, face_up: bool) -> Card:
        if self.face_up == face_up:
            return self
        return replace(self, face_up=face_up)


def card_id(suit: str, rank: int) -> str:
    return f"{suit}-{rank}"


def make_card(suit: str, rank: int, face_up: bool = False) -> Card:
    return Card(card_id(suit, rank), suit, rank, face_up)


def create_deck() -> List[Card]:
    return [make_card(suit, rank) for suit in SUITS for rank in RANKS]


def shuffle_deck(deck: Sequence[Card], rng: Callable[[], float] = random.random) -> List[Card]:
    """Fisher-Yates over a copy of ``deck``; ``rng`` returns floats in [0, 1)."""
    shuffled = list(deck)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def build_deck(seed: Optional[int] = None) -> List[Card]:
    rng = random.Random(seed)
    return shuffle_deck(create_deck(), rng.random)


def cards_to_labels(cards: Sequence[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str, face_up: bool = True) -> Card:
    if len(label) != 2:
        raise ValueError(f"Invalid card label: {label}")
    rank_char, suit_char = label[0].upper(), label[1].lower()
    if rank_char not in RANK_LABELS:
        raise ValueError(f"Invalid card label: {label}")
    suit = next((name for name in SUITS if name[0] == suit_char), None)
    if suit is None:
        raise ValueError(f"Invalid card label: {label}")
    return make_card(suit, RANK_LABELS.index(rank_char) + 1, face_up)
