"""Short, human-shareable room codes."""

import secrets
import string

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 5


def generate_room_code(length: int = ROOM_CODE_LENGTH) -> str:
    """Return a code of `length` characters, each drawn uniformly from ROOM_CODE_ALPHABET.

    Uniqueness against live rooms is checked by RoomTable.create_unique.
    """
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))


def normalize_room_code(code: str) -> str:
    """Canonical form used for room lookups (codes are case-insensitive)."""
    return code.strip().upper()
