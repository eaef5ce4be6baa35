from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from relay.session.players import Coordinate, PlayerInfo


class ClientCommand(StrEnum):
    CREATE_ROOM = "create_room"
    JOIN_ROOM = "join_room"
    POSITION = "position"
    CHAT = "chat"


class ServerCommand(StrEnum):
    JOINED_SERVER = "joined_server"
    ROOM_CREATED = "room_created"
    ROOM_JOINED = "room_joined"
    ERROR = "error"
    SPAWN_LOCAL_PLAYER = "spawn_local_player"
    SPAWN_NETWORK_PLAYERS = "spawn_network_players"
    SPAWN_NEW_PLAYER = "spawn_new_player"
    START_GAME = "start_game"
    UPDATE_POSITION = "update_position"
    NEW_CHAT_MESSAGE = "new_chat_message"
    PLAYER_DISCONNECTED = "player_disconnected"


class ErrorCode(StrEnum):
    ROOM_NOT_FOUND = "room_not_found"
    ALREADY_IN_ROOM = "already_in_room"
    ROOM_UNAVAILABLE = "room_unavailable"


# --- Inbound (client -> server) ---


class CreateRoomContent(BaseModel):
    pass


class JoinRoomContent(BaseModel):
    code: str


class PositionContent(BaseModel):
    x: Coordinate
    y: Coordinate


class ChatContent(BaseModel):
    msg: str


class CreateRoomMessage(BaseModel):
    cmd: Literal[ClientCommand.CREATE_ROOM] = ClientCommand.CREATE_ROOM
    content: CreateRoomContent = Field(default_factory=CreateRoomContent)


class JoinRoomMessage(BaseModel):
    cmd: Literal[ClientCommand.JOIN_ROOM] = ClientCommand.JOIN_ROOM
    content: JoinRoomContent


class PositionMessage(BaseModel):
    cmd: Literal[ClientCommand.POSITION] = ClientCommand.POSITION
    content: PositionContent


class ChatMessage(BaseModel):
    cmd: Literal[ClientCommand.CHAT] = ClientCommand.CHAT
    content: ChatContent


ClientMessage = CreateRoomMessage | JoinRoomMessage | PositionMessage | ChatMessage

_client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(
    Annotated[ClientMessage, Field(discriminator="cmd")],
)

_CLIENT_COMMANDS = frozenset(ClientCommand)


def is_client_command(cmd: Any) -> bool:  # noqa: ANN401
    return isinstance(cmd, str) and cmd in _CLIENT_COMMANDS


def parse_client_message(data: dict[str, Any]) -> ClientMessage:
    """Parse a decoded frame into a typed ClientMessage.

    Raises pydantic.ValidationError when the envelope or content is malformed.
    """
    return _client_message_adapter.validate_python(data)


# --- Outbound (server -> client) ---


class UuidContent(BaseModel):
    uuid: str


class CodeContent(BaseModel):
    code: str


class PlayerContent(BaseModel):
    player: PlayerInfo


class PlayersContent(BaseModel):
    players: list[PlayerInfo]


class ErrorContent(BaseModel):
    msg: str
    code: ErrorCode


class EmptyContent(BaseModel):
    model_config = ConfigDict(extra="forbid")


class UpdatePositionContent(BaseModel):
    uuid: str
    x: Coordinate
    y: Coordinate


class NewChatMessageContent(BaseModel):
    uuid: str
    msg: str


class JoinedServerMessage(BaseModel):
    cmd: Literal[ServerCommand.JOINED_SERVER] = ServerCommand.JOINED_SERVER
    content: UuidContent


class RoomCreatedMessage(BaseModel):
    cmd: Literal[ServerCommand.ROOM_CREATED] = ServerCommand.ROOM_CREATED
    content: CodeContent


class RoomJoinedMessage(BaseModel):
    cmd: Literal[ServerCommand.ROOM_JOINED] = ServerCommand.ROOM_JOINED
    content: CodeContent


class ErrorMessage(BaseModel):
    cmd: Literal[ServerCommand.ERROR] = ServerCommand.ERROR
    content: ErrorContent


class SpawnLocalPlayerMessage(BaseModel):
    cmd: Literal[ServerCommand.SPAWN_LOCAL_PLAYER] = ServerCommand.SPAWN_LOCAL_PLAYER
    content: PlayerContent


class SpawnNetworkPlayersMessage(BaseModel):
    cmd: Literal[ServerCommand.SPAWN_NETWORK_PLAYERS] = ServerCommand.SPAWN_NETWORK_PLAYERS
    content: PlayersContent


class SpawnNewPlayerMessage(BaseModel):
    cmd: Literal[ServerCommand.SPAWN_NEW_PLAYER] = ServerCommand.SPAWN_NEW_PLAYER
    content: PlayerContent


class StartGameMessage(BaseModel):
    cmd: Literal[ServerCommand.START_GAME] = ServerCommand.START_GAME
    content: EmptyContent = Field(default_factory=EmptyContent)


class UpdatePositionMessage(BaseModel):
    cmd: Literal[ServerCommand.UPDATE_POSITION] = ServerCommand.UPDATE_POSITION
    content: UpdatePositionContent


class NewChatMessage(BaseModel):
    cmd: Literal[ServerCommand.NEW_CHAT_MESSAGE] = ServerCommand.NEW_CHAT_MESSAGE
    content: NewChatMessageContent


class PlayerDisconnectedMessage(BaseModel):
    cmd: Literal[ServerCommand.PLAYER_DISCONNECTED] = ServerCommand.PLAYER_DISCONNECTED
    content: UuidContent
