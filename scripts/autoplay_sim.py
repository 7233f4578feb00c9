#!/usr/bin/env python3
"""Play many Klondike deals with the baseline strategy.

By default games run in-process against the engine. With ``--url`` each game
is played through a running host instead, asking it for hints and sending
the suggested moves back, which exercises the whole message loop.

Example:
    python scripts/autoplay_sim.py --games 200 --seed 1000
    python scripts/autoplay_sim.py --games 5 --url ws://localhost:8765
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, Optional

import websockets

from klondike.deal import new_game
from klondike.engine import find_duplicate_or_missing
from klondike.models import GameStatus
from klondike.strategy import play_out

LOGGER = logging.getLogger("autoplay_sim")


def run_local(games: int, first_seed: int, max_steps: int) -> int:
    wins = 0
    for seed in range(first_seed, first_seed + games):
        final = play_out(new_game(seed), max_steps=max_steps)
        problem = find_duplicate_or_missing(final)
        if problem:
            raise RuntimeError(f"Seed {seed} broke card conservation: {problem}")
        if final.status == GameStatus.WON:
            wins += 1
        LOGGER.debug("seed=%s status=%s moves=%s", seed, final.status.value, final.move_count)
    return wins


async def _recv_until(ws: Any, *types: str) -> Dict[str, Any]:
    while True:
        message = json.loads(await ws.recv())
        if message.get("type") in types:
            return message


async def play_remote(url: str, seed: int, max_steps: int) -> bool:
    """Play one game against the host; True when the host reports a win."""
    async with websockets.connect(url) as ws:
        await ws.send(json.dumps({"type": "hello", "v": 1, "seed": seed}))
        await _recv_until(ws, "snapshot")

        idle_draws = 0
        snapshot: Optional[Dict[str, Any]] = None
        for _ in range(max_steps):
            await ws.send(json.dumps({"type": "hint"}))
            hint = await _recv_until(ws, "hint")
            if hint.get("move"):
                await ws.send(json.dumps({"type": "move", "move": hint["move"]}))
                idle_draws = 0
            else:
                await ws.send(json.dumps({"type": "draw"}))
                idle_draws += 1
            reply = await _recv_until(ws, "snapshot", "error")
            if reply["type"] == "error":
                LOGGER.info("seed=%s stopped: %s", seed, reply.get("msg"))
                return False
            snapshot = reply["state"]
            if snapshot["status"] == GameStatus.WON.value:
                return True
            if idle_draws > len(snapshot["stock"]["cards"]) + len(snapshot["waste"]["cards"]):
                return False
    return False


async def run_remote(url: str, games: int, first_seed: int, max_steps: int) -> int:
    wins = 0
    for seed in range(first_seed, first_seed + games):
        if await play_remote(url, seed, max_steps):
            wins += 1
    return wins


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless Klondike auto-play")
    parser.add_argument("--games", type=int, default=100)
    parser.add_argument("--seed", type=int, default=0, help="First seed; games use consecutive seeds")
    parser.add_argument("--max-steps", type=int, default=5_000)
    parser.add_argument("--url", default=None, help="Play through a running host instead of in-process")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper())

    if args.url:
        wins = asyncio.run(run_remote(args.url, args.games, args.seed, args.max_steps))
    else:
        wins = run_local(args.games, args.seed, args.max_steps)
    LOGGER.info("Won %s of %s games (%.1f%%)", wins, args.games, 100.0 * wins / max(args.games, 1))


if __name__ == "__main__":
    main()
