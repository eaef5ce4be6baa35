"""Tests for client message parsing and outbound message shapes."""

import pytest
from pydantic import ValidationError

from relay.messaging.types import (
    ChatMessage,
    CodeContent,
    CreateRoomMessage,
    ErrorCode,
    ErrorContent,
    ErrorMessage,
    JoinRoomMessage,
    PositionMessage,
    RoomCreatedMessage,
    ServerCommand,
    StartGameMessage,
    is_client_command,
    parse_client_message,
)


class TestParseClientMessage:
    def test_create_room_with_empty_content(self):
        message = parse_client_message({"cmd": "create_room", "content": {}})
        assert isinstance(message, CreateRoomMessage)

    def test_create_room_without_content(self):
        assert isinstance(parse_client_message({"cmd": "create_room"}), CreateRoomMessage)

    def test_join_room(self):
        message = parse_client_message({"cmd": "join_room", "content": {"code": "abcde"}})
        assert isinstance(message, JoinRoomMessage)
        assert message.content.code == "abcde"

    def test_position_accepts_ints_and_floats(self):
        message = parse_client_message({"cmd": "position", "content": {"x": 10, "y": 20.5}})
        assert isinstance(message, PositionMessage)
        assert (message.content.x, message.content.y) == (10, 20.5)
        assert type(message.content.x) is int
        assert type(message.content.y) is float

    def test_join_room_accepts_any_string_code(self):
        """Unknown codes, even empty or oversized ones, are answered by the room lookup."""
        for code in ("", "X" * 51):
            message = parse_client_message({"cmd": "join_room", "content": {"code": code}})
            assert message.content.code == code

    def test_chat(self):
        message = parse_client_message({"cmd": "chat", "content": {"msg": "hi"}})
        assert isinstance(message, ChatMessage)
        assert message.content.msg == "hi"

    def test_chat_has_no_length_cap(self):
        message = parse_client_message({"cmd": "chat", "content": {"msg": "a" * 5000}})
        assert len(message.content.msg) == 5000

    @pytest.mark.parametrize(
        "data",
        [
            {"cmd": "join_room", "content": {}},
            {"cmd": "join_room"},
            {"cmd": "join_room", "content": {"code": 12345}},
            {"cmd": "position", "content": {"x": 1}},
            {"cmd": "position", "content": {"x": "1", "y": "2"}},
            {"cmd": "position", "content": {"x": True, "y": 2}},
            {"cmd": "position", "content": "not an object"},
            {"cmd": "chat", "content": {}},
            {"cmd": "chat", "content": {"msg": None}},
        ],
    )
    def test_malformed_content_raises(self, data):
        with pytest.raises(ValidationError):
            parse_client_message(data)

    def test_unknown_command_is_not_a_client_command(self):
        assert is_client_command("chat")
        assert not is_client_command("dance")
        assert not is_client_command(None)
        assert not is_client_command(["chat"])


class TestOutboundMessages:
    def test_envelope_shape(self):
        dumped = RoomCreatedMessage(content=CodeContent(code="ABCDE")).model_dump()
        assert dumped == {"cmd": ServerCommand.ROOM_CREATED, "content": {"code": "ABCDE"}}

    def test_start_game_has_empty_content(self):
        assert StartGameMessage().model_dump() == {"cmd": "start_game", "content": {}}

    def test_error_carries_msg_and_code(self):
        dumped = ErrorMessage(content=ErrorContent(msg="Room not found.", code=ErrorCode.ROOM_NOT_FOUND)).model_dump()
        assert dumped["cmd"] == "error"
        assert dumped["content"] == {"msg": "Room not found.", "code": "room_not_found"}
