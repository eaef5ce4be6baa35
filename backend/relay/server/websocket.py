from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

import structlog
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from relay.messaging.encoder import DecodeError
from relay.messaging.protocol import ConnectionProtocol
from relay.server.rate_limit import TokenBucket
from relay.session.identity import issue_connection_id

if TYPE_CHECKING:
    from relay.messaging.router import MessageRouter
    from relay.server.settings import RelayServerSettings

logger = structlog.get_logger()


class WebSocketConnection(ConnectionProtocol):
    def __init__(self, websocket: WebSocket, connection_id: str | None = None) -> None:
        self._websocket = websocket
        self._connection_id = connection_id or issue_connection_id()
        self._closed = False

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self._websocket.application_state == WebSocketState.CONNECTED
            and self._websocket.client_state == WebSocketState.CONNECTED
        )

    async def send_text(self, data: str) -> None:
        try:
            await self._websocket.send_text(data)
        except WebSocketDisconnect:
            self._closed = True
            raise ConnectionError("WebSocket already disconnected") from None

    async def receive_text(self) -> str:
        message = await self._websocket.receive()
        if message["type"] == "websocket.disconnect":
            self._closed = True
            raise ConnectionError("WebSocket already disconnected")
        text = message.get("text")
        if text is not None:
            return text
        # binary frames are accepted if they carry UTF-8 JSON
        try:
            return (message.get("bytes") or b"").decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"binary frame is not UTF-8: {e}") from e

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self._closed = True
        with contextlib.suppress(WebSocketDisconnect, RuntimeError):
            await self._websocket.close(code=code, reason=reason)


async def websocket_endpoint(
    websocket: WebSocket,
    router: MessageRouter,
    settings: RelayServerSettings,
) -> None:
    await websocket.accept()

    connection = WebSocketConnection(websocket)
    structlog.contextvars.bind_contextvars(connection_id=connection.connection_id)
    logger.info("websocket connected")
    await router.handle_connect(connection)

    bucket = TokenBucket(rate=settings.message_rate, burst=settings.message_burst)

    try:
        while True:
            try:
                data = await connection.receive_message()
            except DecodeError as e:
                logger.warning("decode error, message dropped", error=str(e))
                continue

            if not bucket.consume():
                logger.debug("rate limited, message dropped", cmd=data.get("cmd"))
                continue
            await router.handle_message(connection, data)
    except (WebSocketDisconnect, RuntimeError, ConnectionError):
        pass
    finally:
        logger.info("websocket disconnected")
        await router.handle_disconnect(connection)
        structlog.contextvars.clear_contextvars()
