from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from relay.messaging.types import (
    ChatMessage,
    CreateRoomMessage,
    JoinRoomMessage,
    PositionMessage,
    is_client_command,
    parse_client_message,
)

if TYPE_CHECKING:
    from relay.messaging.protocol import ConnectionProtocol
    from relay.session.manager import SessionManager

logger = logging.getLogger(__name__)


class MessageRouter:
    """
    Routes incoming messages to SessionManager operations.

    Malformed messages and unknown commands are dropped without a reply.
    This class contains pure business logic and can be tested
    without real WebSocket connections.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    async def handle_message(
        self,
        connection: ConnectionProtocol,
        raw_message: dict[str, Any],
    ) -> None:
        cmd = raw_message.get("cmd")
        if not is_client_command(cmd):
            logger.debug("ignoring unknown command %r from %s", cmd, connection.connection_id)
            return

        try:
            message = parse_client_message(raw_message)
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            logger.warning("invalid message from %s: %s", connection.connection_id, e)
            return

        try:
            await self._dispatch(connection.connection_id, message)
        except Exception:
            logger.exception("error handling %s from %s", cmd, connection.connection_id)

    async def _dispatch(
        self,
        connection_id: str,
        message: CreateRoomMessage | JoinRoomMessage | PositionMessage | ChatMessage,
    ) -> None:
        if isinstance(message, CreateRoomMessage):
            await self._session_manager.create_room(connection_id)
        elif isinstance(message, JoinRoomMessage):
            await self._session_manager.join_room(connection_id, message.content.code)
        elif isinstance(message, PositionMessage):
            await self._session_manager.update_position(connection_id, message.content.x, message.content.y)
        elif isinstance(message, ChatMessage):
            await self._session_manager.broadcast_chat(connection_id, message.content.msg)

    async def handle_connect(self, connection: ConnectionProtocol) -> None:
        await self._session_manager.register_connection(connection)

    async def handle_disconnect(self, connection: ConnectionProtocol) -> None:
        await self._session_manager.disconnect(connection.connection_id)
