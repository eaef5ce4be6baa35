"""Connection handles and best-effort outbound fan-out.

Each registered connection gets a bounded outbox drained by its own writer
task. Enqueueing never blocks, so callers may send while holding the session
lock and a slow or dead peer cannot stall anyone else.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterable

    from relay.messaging.protocol import ConnectionProtocol

logger = structlog.get_logger()

DEFAULT_MAX_PENDING = 256


class _Outbox:
    """Bounded send queue plus the task that writes it to one connection."""

    def __init__(self, connection: ConnectionProtocol, max_pending: int) -> None:
        self.connection = connection
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=max_pending)
        self.task = asyncio.create_task(self._drain(), name=f"outbox-{connection.connection_id}")

    async def _drain(self) -> None:
        while True:
            message = await self.queue.get()
            try:
                if self.connection.is_open:
                    await self.connection.send_message(message)
            except (ConnectionError, RuntimeError, OSError) as e:
                logger.debug("send failed", connection_id=self.connection.connection_id, error=str(e))
            finally:
                self.queue.task_done()


class ConnectionRegistry:
    """Live connections keyed by connection id.

    The transport owns the connection objects; rooms and players refer to
    them only by id and reach them through this registry.
    """

    def __init__(self, max_pending: int = DEFAULT_MAX_PENDING) -> None:
        self._max_pending = max_pending
        self._outboxes: dict[str, _Outbox] = {}

    @property
    def count(self) -> int:
        return len(self._outboxes)

    def register(self, connection: ConnectionProtocol) -> None:
        if connection.connection_id in self._outboxes:
            return
        self._outboxes[connection.connection_id] = _Outbox(connection, self._max_pending)

    async def unregister(self, connection_id: str) -> None:
        """Drop a connection, discarding anything still queued for it."""
        outbox = self._outboxes.pop(connection_id, None)
        if outbox is None:
            return
        outbox.task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await outbox.task

    def send(self, connection_id: str, message: dict[str, Any]) -> bool:
        """Queue a message for one connection. Returns False if it was skipped."""
        outbox = self._outboxes.get(connection_id)
        if outbox is None or not outbox.connection.is_open:
            return False
        try:
            outbox.queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning("outbox full, dropping message", connection_id=connection_id, cmd=message.get("cmd"))
            return False
        return True

    def broadcast(self, connection_ids: Iterable[str], message: dict[str, Any]) -> None:
        for connection_id in connection_ids:
            self.send(connection_id, message)

    async def flush(self) -> None:
        """Wait until every queued message has been written (or failed)."""
        await asyncio.gather(*(outbox.queue.join() for outbox in list(self._outboxes.values())))

    async def close_all(self, timeout: float = 5.0) -> None:
        """Flush pending messages (bounded by `timeout`) and stop every writer task."""
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self.flush(), timeout)
        for connection_id in list(self._outboxes):
            await self.unregister(connection_id)
