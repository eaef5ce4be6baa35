"""Exceptions raised by the session layer."""


class RelayError(Exception):
    """Base class for room/player state errors."""


class DuplicateIdentityError(RelayError):
    """A player record already exists for this connection id."""


class RoomAlreadyExistsError(RelayError):
    """A live room already uses this code."""


class RoomNotFoundError(RelayError):
    """No live room has this code."""


class RoomCodeExhaustedError(RelayError):
    """Every generated code collided with a live room."""


class AlreadyInRoomError(RelayError):
    """The connection is already bound to a room."""
