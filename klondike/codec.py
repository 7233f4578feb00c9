"""Plain-data encoding of snapshots and moves.

Field names follow the wire format the browser client used (``faceUp``,
``moveCount``, ``pileKind`` ...), so saved replays stay readable by it.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .cards import Card
from .models import (
    DECK_SIZE,
    FOUNDATION_PILES,
    TABLEAU_PILES,
    GameState,
    GameStatus,
    Location,
    Move,
    Pile,
    PileKind,
)


def card_to_dict(card: Card) -> Dict[str, Any]:
    return {"id": card.id, "suit": card.suit, "rank": card.rank, "faceUp": card.face_up}


def card_from_dict(data: Mapping[str, Any]) -> Card:
    if not isinstance(data, Mapping):
        raise ValueError(f"Malformed card: {data!r}")
    rank = data.get("rank")
    if not isinstance(rank, int) or isinstance(rank, bool):
        raise ValueError(f"Invalid rank: {rank!r}")
    face_up = data.get("faceUp", False)
    if not isinstance(face_up, bool):
        raise ValueError(f"faceUp must be a boolean, got {face_up!r}")
    try:
        return Card(id=str(data["id"]), suit=data["suit"], rank=rank, face_up=face_up)
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed card: {data!r}") from exc


def pile_to_dict(pile: Pile) -> Dict[str, Any]:
    return {"kind": pile.kind.value, "cards": [card_to_dict(card) for card in pile]}


def pile_from_dict(data: Mapping[str, Any], kind: PileKind) -> Pile:
    if not isinstance(data, Mapping):
        raise ValueError(f"Malformed {kind.value} pile")
    if data.get("kind", kind.value) != kind.value:
        raise ValueError(f"Expected {kind.value} pile, got {data.get('kind')!r}")
    cards = data.get("cards", [])
    if not isinstance(cards, list):
        raise ValueError(f"Malformed {kind.value} pile")
    return Pile(kind, tuple(card_from_dict(card) for card in cards))


def state_to_dict(state: GameState) -> Dict[str, Any]:
    return {
        "tableau": [pile_to_dict(pile) for pile in state.tableau],
        "foundations": [pile_to_dict(pile) for pile in state.foundations],
        "stock": pile_to_dict(state.stock),
        "waste": pile_to_dict(state.waste),
        "moveCount": state.move_count,
        "status": state.status.value,
    }


def _pile_list(data: Mapping[str, Any], key: str, kind: PileKind, expected: int) -> tuple:
    piles = data.get(key)
    if not isinstance(piles, list) or len(piles) != expected:
        raise ValueError(f"Expected {expected} {key} piles")
    return tuple(pile_from_dict(pile, kind) for pile in piles)


def state_from_dict(data: Mapping[str, Any]) -> GameState:
    if not isinstance(data, Mapping):
        raise ValueError("Game state must be an object")
    try:
        status = GameStatus(data.get("status", GameStatus.IN_PROGRESS.value))
    except ValueError as exc:
        raise ValueError(f"Unknown status: {data.get('status')!r}") from exc
    move_count = data.get("moveCount", 0)
    if not isinstance(move_count, int) or move_count < 0:
        raise ValueError(f"Invalid moveCount: {move_count!r}")

    state = GameState(
        tableau=_pile_list(data, "tableau", PileKind.TABLEAU, TABLEAU_PILES),
        foundations=_pile_list(data, "foundations", PileKind.FOUNDATION, FOUNDATION_PILES),
        stock=pile_from_dict(data.get("stock", {}), PileKind.STOCK),
        waste=pile_from_dict(data.get("waste", {}), PileKind.WASTE),
        move_count=move_count,
        status=status,
    )
    ids = [card.id for pile in state.piles() for card in pile]
    if len(ids) != DECK_SIZE or len(set(ids)) != DECK_SIZE:
        raise ValueError(f"Game state must hold {DECK_SIZE} unique cards")
    return state


def location_to_dict(location: Location) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"pileKind": location.pile_kind.value}
    if location.pile_index is not None:
        payload["pileIndex"] = location.pile_index
    if location.card_index is not None:
        payload["cardIndex"] = location.card_index
    return payload


def _optional_int(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{key} must be an integer")
    return value


def location_from_dict(data: Any) -> Location:
    if not isinstance(data, Mapping):
        raise ValueError("Location must be an object")
    try:
        kind = PileKind(data.get("pileKind"))
    except ValueError as exc:
        raise ValueError(f"Unknown pileKind: {data.get('pileKind')!r}") from exc
    return Location(kind, _optional_int(data, "pileIndex"), _optional_int(data, "cardIndex"))


def move_to_dict(move: Move) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "from": location_to_dict(move.source),
        "to": location_to_dict(move.target),
    }
    if move.count is not None:
        payload["count"] = move.count
    return payload


def move_from_dict(data: Any) -> Move:
    if not isinstance(data, Mapping):
        raise ValueError("Move must be an object")
    return Move(
        source=location_from_dict(data.get("from")),
        target=location_from_dict(data.get("to")),
        count=_optional_int(data, "count"),
    )


def dump_snapshots(states: Sequence[GameState]) -> str:
    return json.dumps([state_to_dict(state) for state in states])


def load_snapshots(text: str) -> List[GameState]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError("Snapshot data is not valid JSON") from exc
    if not isinstance(raw, list):
        raise ValueError("Snapshot data must be a list")
    return [state_from_dict(item) for item in raw]
