"""Shared helpers for driving a SessionManager with mock connections."""

from __future__ import annotations

from typing import TYPE_CHECKING

from relay.messaging.types import ServerCommand
from relay.tests.mocks import MockConnection

if TYPE_CHECKING:
    from relay.session.manager import SessionManager


async def connect(manager: SessionManager) -> MockConnection:
    """Register a fresh connection and wait for its joined_server message."""
    conn = MockConnection()
    await manager.register_connection(conn)
    await manager.flush()
    return conn


async def create_room(manager: SessionManager) -> tuple[MockConnection, str]:
    """Connect a client, have it create a room, and return (connection, room code)."""
    conn = await connect(manager)
    await manager.create_room(conn.connection_id)
    await manager.flush()
    code = conn.messages_of(ServerCommand.ROOM_CREATED)[0]["content"]["code"]
    return conn, code


async def join_room(manager: SessionManager, code: str) -> MockConnection:
    conn = await connect(manager)
    await manager.join_room(conn.connection_id, code)
    await manager.flush()
    return conn


async def create_two_player_room(manager: SessionManager) -> tuple[MockConnection, MockConnection, str]:
    """Create a room with a host and one joiner, clearing message history afterwards."""
    host, code = await create_room(manager)
    guest = await join_room(manager, code)
    for conn in (host, guest):
        conn._outbox.clear()
    return host, guest, code
