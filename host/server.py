from __future__ import annotations

import asyncio
import itertools
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional

import websockets
from websockets.asyncio.server import ServerConnection, serve

from klondike.codec import location_from_dict, move_from_dict, move_to_dict, state_to_dict
from klondike.deal import new_game
from klondike.models import GameConfig
from klondike.session import GameSession

LOGGER = logging.getLogger("klondike_host")

# HostServer glues the Klondike engine to WebSocket clients (renderers).
# Every network concern lives here; the engine stays pure.


@dataclass
class ClientSession:
    client_id: int
    websocket: ServerConnection
    game: GameSession


class HostServer:
    def __init__(self, config: GameConfig) -> None:
        self.config = config
        self.sessions: Dict[int, ClientSession] = {}
        self._ids = itertools.count(1)
        self._handlers: Dict[str, Callable[[ClientSession, Dict[str, object]], Awaitable[None]]] = {
            "move": self._handle_move,
            "draw": self._handle_draw,
            "auto_foundation": self._handle_auto_foundation,
            "hint": self._handle_hint,
            "new_game": self._handle_new_game,
            "replay": self._handle_replay,
        }

    async def start(self, host: str = "0.0.0.0", port: int = 8765) -> None:
        # serve keeps accepting clients until the process stops.
        async with serve(self._handle_connection, host, port):
            LOGGER.info("Klondike host listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        # First message must be "hello"; it may pin the deal with a seed.
        hello = await self._read_message(websocket)
        if hello is None or hello.get("type") != "hello":
            await self._send_error(websocket, code="BAD_HELLO", msg="Expected hello")
            await websocket.close()
            return
        seed = hello.get("seed", self.config.seed)
        if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
            await self._send_error(websocket, code="BAD_HELLO", msg="seed must be an integer")
            await websocket.close()
            return

        session = self.open_session(websocket, seed)
        LOGGER.info("Client %s connected (seed=%s)", session.client_id, seed)

        await self._send_json(websocket, "welcome", {
            "client_id": session.client_id,
            "config": {
                "replay_step_ms": self.config.replay_step_ms,
                "auto_replay": self.config.auto_replay,
            },
        })
        await self._send_snapshot(session)

        try:
            async for raw in websocket:
                await self.handle_message(session, self._decode(raw))
        except websockets.ConnectionClosed:
            pass
        finally:
            self.sessions.pop(session.client_id, None)
        LOGGER.info("Client %s disconnected", session.client_id)

    def open_session(self, websocket: ServerConnection, seed: Optional[int] = None) -> ClientSession:
        game = GameSession(self.config, state=new_game(seed))
        session = ClientSession(client_id=next(self._ids), websocket=websocket, game=game)
        self.sessions[session.client_id] = session
        return session

    async def handle_message(self, session: ClientSession, message: Dict[str, object]) -> None:
        msg_type = message.get("type")
        handler = self._handlers.get(msg_type) if isinstance(msg_type, str) else None
        if handler is None:
            await self._send_error(session.websocket, code="UNKNOWN_TYPE", msg="Unsupported message type")
            return
        await handler(session, message)

    async def _handle_move(self, session: ClientSession, message: Dict[str, object]) -> None:
        try:
            move = move_from_dict(message.get("move"))
        except ValueError as exc:
            await self._send_error(session.websocket, code="BAD_SCHEMA", msg=str(exc))
            return

        result = session.game.move(move)
        if not result.applied:
            LOGGER.debug(
                "Rejected move client=%s move=%s reason=%s",
                session.client_id,
                move_to_dict(move),
                result.reason,
            )
            await self._send_error(session.websocket, code="INVALID_MOVE", msg=result.reason or "Invalid move.")
            return
        await self._after_change(session)

    async def _handle_draw(self, session: ClientSession, message: Dict[str, object]) -> None:
        result = session.game.stock_click()
        if not result.applied:
            await self._send_error(session.websocket, code="NO_MOVE", msg=result.reason or "Nothing to draw")
            return
        await self._after_change(session)

    async def _handle_auto_foundation(self, session: ClientSession, message: Dict[str, object]) -> None:
        try:
            source = location_from_dict(message.get("from"))
        except ValueError as exc:
            await self._send_error(session.websocket, code="BAD_SCHEMA", msg=str(exc))
            return

        result = session.game.auto_foundation(source)
        if not result.applied:
            await self._send_error(session.websocket, code="NO_MOVE", msg=result.reason or "No foundation move")
            return
        await self._after_change(session)

    async def _handle_hint(self, session: ClientSession, message: Dict[str, object]) -> None:
        move = session.game.hint()
        await self._send_json(session.websocket, "hint", {"move": move_to_dict(move) if move else None})

    async def _handle_new_game(self, session: ClientSession, message: Dict[str, object]) -> None:
        seed = message.get("seed")
        if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
            await self._send_error(session.websocket, code="BAD_SCHEMA", msg="seed must be an integer")
            return
        session.game.new_game(seed)
        LOGGER.info("Client %s started a new game (seed=%s)", session.client_id, seed)
        await self._send_snapshot(session)

    async def _handle_replay(self, session: ClientSession, message: Dict[str, object]) -> None:
        if len(session.game.history) < 2:
            await self._send_error(session.websocket, code="REPLAY_UNAVAILABLE", msg="Nothing to replay yet")
            return
        await self._stream_replay(session)

    async def _after_change(self, session: ClientSession) -> None:
        await self._send_snapshot(session)
        if not session.game.needs_replay():
            return
        session.game.mark_replayed()
        LOGGER.info(
            "Client %s won in %s moves",
            session.client_id,
            session.game.state.move_count,
        )
        await self._send_json(session.websocket, "won", {"move_count": session.game.state.move_count})
        if self.config.auto_replay:
            await self._stream_replay(session)

    async def _stream_replay(self, session: ClientSession) -> None:
        # Frames are copied up front; later moves cannot change what is streamed.
        frames = session.game.replay_frames()
        delay = max(self.config.replay_step_ms, 0) / 1000
        await self._send_json(session.websocket, "replay/start", {"frames": len(frames)})
        for index, frame in enumerate(frames):
            await self._send_json(session.websocket, "replay/frame", {"index": index, "state": state_to_dict(frame)})
            if delay:
                await asyncio.sleep(delay)
        await self._send_json(session.websocket, "replay/end", {"frames": len(frames)})

    async def _send_snapshot(self, session: ClientSession) -> None:
        await self._send_json(session.websocket, "snapshot", {
            "state": state_to_dict(session.game.state),
            "history_length": len(session.game.history),
        })

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        LOGGER.warning("Client error %s: %s", code, msg)
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    async def _read_message(self, websocket: ServerConnection) -> Optional[Dict[str, object]]:
        try:
            raw = await asyncio.wait_for(websocket.recv(), timeout=5)
        except (asyncio.TimeoutError, websockets.ConnectionClosed):
            return None
        return self._decode(raw)

    def _decode(self, raw: str) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return message if isinstance(message, dict) else {}
