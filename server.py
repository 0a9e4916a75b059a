"""
WebSocket game server for the arena.

Every connection starts as a spectator. JOIN_GAME turns it into a player
while the lobby has room. All engine calls go through one lock, so each
request is applied and broadcast before the next one is looked at.
"""

import os
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")

import websockets
from websockets.exceptions import ConnectionClosed

from arena import GameEngine, Phase, Reason, ValidationError, load_config
from arena.protocol import (
    ActionRequest, JoinRequest, MessageType, ResetRequest, encode, parse_message,
)

logger = logging.getLogger(__name__)

DATA_PATH = Path(__file__).parent / "data"
MAX_MESSAGE_SIZE = 64 * 1024

SPECTATOR_MESSAGE = "Game full or in progress, you are a spectator."
RESET_MESSAGE = "New game available. Join the lobby."


class Role(Enum):
    SPECTATOR = "spectator"
    PLAYER = "player"


@dataclass
class Client:
    """Connection metadata."""
    role: Role = Role.SPECTATOR
    player_id: Optional[str] = None


class GameServer:
    """Transport around a single GameEngine."""

    def __init__(self, engine: GameEngine):
        self.engine = engine
        self.clients: dict[Any, Client] = {}
        self.lock = asyncio.Lock()

    async def handler(self, websocket):
        """Handle a single WebSocket connection."""
        self.clients[websocket] = Client()
        logger.info(f"Client connected ({len(self.clients)} online)")
        try:
            await self.send(websocket, MessageType.GAME_STATE_UPDATE, self.engine.get_snapshot().to_dict())
            async for raw in websocket:
                await self.handle_message(websocket, raw)
        except ConnectionClosed:
            logger.info("Client connection closed")
        finally:
            await self.disconnect(websocket)

    async def handle_message(self, websocket, raw):
        try:
            message = parse_message(raw)
        except ValidationError as e:
            await self.reject(websocket, e)
            return

        async with self.lock:
            if isinstance(message, JoinRequest):
                await self.handle_join(websocket, message)
            elif isinstance(message, ActionRequest):
                await self.handle_action(websocket, message)
            elif isinstance(message, ResetRequest):
                await self.handle_reset(websocket)

    async def handle_join(self, websocket, request: JoinRequest):
        client = self.clients[websocket]
        if client.role == Role.PLAYER:
            await self.reject(websocket, ValidationError(Reason.ALREADY_JOINED))
            return

        if not self.engine.can_join():
            await self.send(websocket, MessageType.JOINED_AS_SPECTATOR, {"message": SPECTATOR_MESSAGE})
            return

        try:
            player = self.engine.add_player(request.pseudo, request.color, request.grid_size)
        except ValidationError as e:
            await self.reject(websocket, e)
            return

        client.role = Role.PLAYER
        client.player_id = player.id
        await self.send(websocket, MessageType.JOINED_AS_PLAYER, {"playerId": player.id})
        await self.broadcast_state()

    async def handle_action(self, websocket, request: ActionRequest):
        client = self.clients[websocket]
        if client.role != Role.PLAYER:
            await self.reject(websocket, ValidationError(Reason.SPECTATOR_ACTION))
            return

        try:
            outcome = self.engine.dispatch(client.player_id, request)
        except ValidationError as e:
            await self.reject(websocket, e)
            return

        logger.info(
            f"{outcome.action.value} by {outcome.actor_id} at "
            f"({outcome.target.x}, {outcome.target.y})"
            + (" destroyed target" if outcome.destroyed else "")
        )
        await self.broadcast_state()

    async def handle_reset(self, websocket):
        try:
            self.engine.reset_game()
        except ValidationError as e:
            await self.reject(websocket, e)
            return

        for client in self.clients.values():
            client.role = Role.SPECTATOR
            client.player_id = None
        await self.broadcast(MessageType.GAME_RESET, {"message": RESET_MESSAGE})
        await self.broadcast_state()

    async def disconnect(self, websocket):
        client = self.clients.pop(websocket, None)
        logger.info(f"Client disconnected ({len(self.clients)} online)")
        if client is None or client.role != Role.PLAYER:
            return

        async with self.lock:
            self.engine.remove_player(client.player_id)
            await self.broadcast_state()

    async def broadcast_state(self):
        snapshot = self.engine.get_snapshot()
        await self.broadcast(MessageType.GAME_STATE_UPDATE, snapshot.to_dict())
        if snapshot.phase == Phase.FINISHED:
            await self.broadcast(MessageType.GAME_OVER, {"winnerPseudo": snapshot.winner_pseudo})

    async def broadcast(self, msg_type: MessageType, payload: dict):
        await asyncio.gather(*(self.send(ws, msg_type, payload) for ws in list(self.clients)))

    async def reject(self, websocket, error: ValidationError):
        await self.send(websocket, MessageType.ACTION_INVALID, {"message": error.message})

    async def send(self, websocket, msg_type: MessageType, payload: dict):
        try:
            await websocket.send(encode(msg_type, payload))
        except ConnectionClosed:
            logger.debug(f"Dropped {msg_type.value} for a closed connection")


async def main():
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "3000"))
    rules_path = os.environ.get("ARENA_RULES", str(DATA_PATH / "rules.yaml"))

    engine = GameEngine(load_config(rules_path))
    server = GameServer(engine)

    logger.info(f"Starting server on ws://{host}:{port}")

    async with websockets.serve(
        server.handler,
        host,
        port,
        max_size=MAX_MESSAGE_SIZE,
    ):
        await asyncio.Future()  # run forever


def run():
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())


if __name__ == "__main__":
    run()
