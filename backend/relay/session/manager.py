"""Session coordinator: room creation/joining, position and chat fan-out, teardown."""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from relay.messaging.types import (
    CodeContent,
    ErrorCode,
    ErrorContent,
    ErrorMessage,
    JoinedServerMessage,
    NewChatMessage,
    NewChatMessageContent,
    PlayerContent,
    PlayerDisconnectedMessage,
    PlayersContent,
    RoomCreatedMessage,
    RoomJoinedMessage,
    SpawnLocalPlayerMessage,
    SpawnNetworkPlayersMessage,
    SpawnNewPlayerMessage,
    StartGameMessage,
    UpdatePositionContent,
    UpdatePositionMessage,
    UuidContent,
)
from relay.session.codes import generate_room_code
from relay.session.connections import DEFAULT_MAX_PENDING, ConnectionRegistry
from relay.session.exceptions import AlreadyInRoomError, RoomCodeExhaustedError, RoomNotFoundError
from relay.session.players import PlayerRegistry
from relay.session.rooms import RoomTable

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from pydantic import BaseModel

    from relay.messaging.protocol import ConnectionProtocol
    from relay.session.players import Player
    from relay.session.rooms import Room, RoomInfo

logger = structlog.get_logger()

MIN_PLAYERS_TO_START = 2


class ConnectionState(StrEnum):
    UNBOUND = "unbound"
    BOUND = "bound"


class SessionManager:
    """Own the room table and player registry and apply client events to them.

    Every operation that reads or mutates the registries runs under one
    asyncio.Lock, so create/join/leave are atomic with respect to each other.
    Outbound messages are queued (never awaited) while the lock is held.
    """

    def __init__(
        self,
        *,
        max_pending_messages: int = DEFAULT_MAX_PENDING,
        generate_code: Callable[[], str] = generate_room_code,
    ) -> None:
        self._connections = ConnectionRegistry(max_pending=max_pending_messages)
        self._players = PlayerRegistry()
        self._rooms = RoomTable()
        self._generate_code = generate_code
        self._lock = asyncio.Lock()

    # --- Queries ---

    @property
    def room_count(self) -> int:
        return self._rooms.count

    @property
    def player_count(self) -> int:
        return self._players.count

    @property
    def connection_count(self) -> int:
        return self._connections.count

    def get_room(self, code: str) -> Room | None:
        return self._rooms.get(code)

    def get_player(self, connection_id: str) -> Player | None:
        return self._players.get(connection_id)

    def get_rooms_info(self) -> list[RoomInfo]:
        return [room.to_info() for room in self._rooms.rooms()]

    def state_of(self, connection_id: str) -> ConnectionState:
        if self._players.get(connection_id) is None:
            return ConnectionState.UNBOUND
        return ConnectionState.BOUND

    # --- Connection lifecycle ---

    async def register_connection(self, connection: ConnectionProtocol) -> None:
        async with self._lock:
            self._connections.register(connection)
            self._send(
                connection.connection_id,
                JoinedServerMessage(content=UuidContent(uuid=connection.connection_id)),
            )

    async def disconnect(self, connection_id: str) -> None:
        """Remove the player, leave its room, and drop the connection handle. Idempotent."""
        async with self._lock:
            player = self._players.remove(connection_id)
            if player is not None:
                room = self._rooms.leave(player.room_code, connection_id)
                if room is None:
                    logger.info("room empty, removed", room_code=player.room_code)
                else:
                    logger.info("player left room", room_code=room.code, connection_id=connection_id)
                    self._broadcast(
                        room.members,
                        PlayerDisconnectedMessage(content=UuidContent(uuid=connection_id)),
                    )
        await self._connections.unregister(connection_id)

    # --- Room lifecycle ---

    async def create_room(self, connection_id: str) -> None:
        async with self._lock:
            try:
                self._require_unbound(connection_id)
                room = self._rooms.create_unique(connection_id, self._generate_code)
            except AlreadyInRoomError:
                self._send_error(connection_id, ErrorCode.ALREADY_IN_ROOM, "You are already in a room")
                return
            except RoomCodeExhaustedError:
                logger.exception("could not allocate a room code")
                self._send_error(connection_id, ErrorCode.ROOM_UNAVAILABLE, "Could not create a room, try again")
                return

            player = self._players.add(connection_id, room.code)
            logger.info("room created", room_code=room.code, connection_id=connection_id)

            self._send(connection_id, RoomCreatedMessage(content=CodeContent(code=room.code)))
            self._send(connection_id, SpawnLocalPlayerMessage(content=PlayerContent(player=player.to_info())))

    async def join_room(self, connection_id: str, code: str) -> None:
        async with self._lock:
            try:
                self._require_unbound(connection_id)
                room = self._rooms.join(code, connection_id)
            except AlreadyInRoomError:
                self._send_error(connection_id, ErrorCode.ALREADY_IN_ROOM, "You are already in a room")
                return
            except RoomNotFoundError:
                logger.info("join rejected", room_code=code, reason=ErrorCode.ROOM_NOT_FOUND)
                self._send_error(connection_id, ErrorCode.ROOM_NOT_FOUND, "Room not found.")
                return

            player = self._players.add(connection_id, room.code)
            others = [p for p in self._players.get_by_room(room.code) if p.id != connection_id]
            logger.info("player joined room", room_code=room.code, player_count=room.member_count)

            self._send(connection_id, RoomJoinedMessage(content=CodeContent(code=room.code)))
            self._send(connection_id, SpawnLocalPlayerMessage(content=PlayerContent(player=player.to_info())))
            self._send(
                connection_id,
                SpawnNetworkPlayersMessage(content=PlayersContent(players=[p.to_info() for p in others])),
            )
            self._broadcast(
                self._rooms.members_of(room.code, exclude=connection_id),
                SpawnNewPlayerMessage(content=PlayerContent(player=player.to_info())),
            )

            if room.member_count >= MIN_PLAYERS_TO_START and not room.started:
                room.started = True
                logger.info("game starting", room_code=room.code, player_count=room.member_count)
                self._broadcast(room.members, StartGameMessage())

    # --- In-room events ---

    async def update_position(self, connection_id: str, x: float, y: float) -> None:
        async with self._lock:
            player = self._players.get(connection_id)
            if player is None:
                return
            self._players.update(connection_id, x, y)
            if self._rooms.get(player.room_code) is None:
                return
            self._broadcast(
                self._rooms.members_of(player.room_code, exclude=connection_id),
                UpdatePositionMessage(content=UpdatePositionContent(uuid=connection_id, x=x, y=y)),
            )

    async def broadcast_chat(self, connection_id: str, msg: str) -> None:
        async with self._lock:
            player = self._players.get(connection_id)
            if player is None:
                return
            self._broadcast(
                self._rooms.members_of(player.room_code),
                NewChatMessage(content=NewChatMessageContent(uuid=connection_id, msg=msg)),
            )

    # --- Shutdown / test support ---

    async def flush(self) -> None:
        """Wait for every queued outbound message to be written."""
        await self._connections.flush()

    async def shutdown(self) -> None:
        await self._connections.close_all()

    # --- Internal helpers ---

    def _require_unbound(self, connection_id: str) -> None:
        if self.state_of(connection_id) is ConnectionState.BOUND:
            raise AlreadyInRoomError(f"connection {connection_id} is already in a room")

    def _send(self, connection_id: str, message: BaseModel) -> None:
        self._connections.send(connection_id, message.model_dump())

    def _broadcast(self, connection_ids: Iterable[str], message: BaseModel) -> None:
        self._connections.broadcast(list(connection_ids), message.model_dump())

    def _send_error(self, connection_id: str, code: ErrorCode, msg: str) -> None:
        self._send(connection_id, ErrorMessage(content=ErrorContent(msg=msg, code=code)))
