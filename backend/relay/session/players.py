"""Player registry: per-connection transient state for room-bound clients."""

from dataclasses import dataclass
from typing import Annotated

from pydantic import BaseModel, Field, StrictInt

from relay.session.exceptions import DuplicateIdentityError

# Spawn anchors. Placement is keyed on room occupancy before insertion:
# the first occupant gets LEFT, every later occupant gets RIGHT, so a 3rd+
# player shares the RIGHT anchor with the 2nd.
LEFT_ANCHOR = (550, 300)
RIGHT_ANCHOR = (700, 300)

# Integers stay integers so coordinates are relayed in the form they arrived.
Coordinate = StrictInt | Annotated[float, Field(strict=True, allow_inf_nan=False)]


class PlayerInfo(BaseModel):
    """Player payload for outbound messages."""

    uuid: str
    room: str
    x: Coordinate
    y: Coordinate


@dataclass
class Player:
    """A connected client bound to a room, with its last reported position."""

    id: str
    room_code: str
    x: float
    y: float

    def to_info(self) -> PlayerInfo:
        return PlayerInfo(uuid=self.id, room=self.room_code, x=self.x, y=self.y)


def spawn_anchor(occupancy: int) -> tuple[int, int]:
    """Return the spawn position for a player joining a room with `occupancy` players."""
    return LEFT_ANCHOR if occupancy == 0 else RIGHT_ANCHOR


class PlayerRegistry:
    """Authoritative store of Player records, keyed by connection id.

    Pure state: no I/O and no broadcasting. Owned by SessionManager.
    """

    def __init__(self) -> None:
        self._players: dict[str, Player] = {}  # connection_id -> Player

    @property
    def count(self) -> int:
        return len(self._players)

    def get(self, player_id: str) -> Player | None:
        return self._players.get(player_id)

    def get_by_room(self, room_code: str) -> list[Player]:
        """Snapshot of the players in a room, in insertion order."""
        return [p for p in self._players.values() if p.room_code == room_code]

    def add(self, player_id: str, room_code: str) -> Player:
        if player_id in self._players:
            raise DuplicateIdentityError(f"player {player_id} already registered")
        x, y = spawn_anchor(len(self.get_by_room(room_code)))
        player = Player(id=player_id, room_code=room_code, x=x, y=y)
        self._players[player_id] = player
        return player

    def update(self, player_id: str, x: float, y: float) -> None:
        player = self._players.get(player_id)
        if player is None:
            return
        player.x = x
        player.y = y

    def remove(self, player_id: str) -> Player | None:
        return self._players.pop(player_id, None)
