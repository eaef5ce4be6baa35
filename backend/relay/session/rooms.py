"""Room table: live rooms keyed by code, with their member connection ids."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import BaseModel

from relay.session.codes import generate_room_code, normalize_room_code
from relay.session.exceptions import RoomAlreadyExistsError, RoomCodeExhaustedError, RoomNotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable

MAX_CODE_ATTEMPTS = 20


class RoomInfo(BaseModel):
    """Room information for the /rooms listing."""

    code: str
    player_count: int
    started: bool


@dataclass
class Room:
    """A group of connections sharing position and chat broadcasts.

    Members are stored as connection ids only; live connections are owned
    by the transport and looked up through ConnectionRegistry.
    """

    code: str
    started: bool = False
    members: dict[str, None] = field(default_factory=dict)  # ordered set of connection ids

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def is_empty(self) -> bool:
        return self.member_count == 0

    def add_member(self, connection_id: str) -> None:
        self.members[connection_id] = None

    def to_info(self) -> RoomInfo:
        return RoomInfo(code=self.code, player_count=self.member_count, started=self.started)


class RoomTable:
    """Live rooms keyed by normalized code.

    Invariant: a room with zero members is never stored. Codes are
    normalized here, so callers may pass them in any case.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}

    @property
    def count(self) -> int:
        return len(self._rooms)

    def get(self, code: str) -> Room | None:
        return self._rooms.get(normalize_room_code(code))

    def rooms(self) -> list[Room]:
        return list(self._rooms.values())

    def create(self, code: str, connection_id: str) -> Room:
        """Create a room whose sole member is `connection_id`."""
        code = normalize_room_code(code)
        if code in self._rooms:
            raise RoomAlreadyExistsError(f"room {code} already exists")
        room = Room(code=code)
        room.add_member(connection_id)
        self._rooms[code] = room
        return room

    def create_unique(
        self,
        connection_id: str,
        generate: Callable[[], str] = generate_room_code,
    ) -> Room:
        """Create a room under a freshly generated code, regenerating on collision."""
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate()
            if normalize_room_code(code) not in self._rooms:
                return self.create(code, connection_id)
        raise RoomCodeExhaustedError(f"no free room code after {MAX_CODE_ATTEMPTS} attempts")

    def join(self, code: str, connection_id: str) -> Room:
        room = self.get(code)
        if room is None:
            raise RoomNotFoundError(f"room {normalize_room_code(code)} not found")
        room.add_member(connection_id)
        return room

    def leave(self, code: str, connection_id: str) -> Room | None:
        """Remove a member, deleting the room if it becomes empty.

        Returns the room if it is still live afterwards, None otherwise.
        """
        code = normalize_room_code(code)
        room = self._rooms.get(code)
        if room is None:
            return None
        room.members.pop(connection_id, None)
        if room.is_empty:
            del self._rooms[code]
            return None
        return room

    def members_of(self, code: str, exclude: str | None = None) -> list[str]:
        room = self.get(code)
        if room is None:
            return []
        return [member for member in room.members if member != exclude]
