"""
JSON encoder/decoder for the text-frame wire format.

Every frame is a UTF-8 JSON object of the shape {"cmd": ..., "content": {...}}.
"""

import json
from typing import Any


class DecodeError(Exception):
    """Error raised when an inbound frame cannot be decoded."""


# Size limit to prevent resource exhaustion from oversized frames.
MAX_FRAME_LEN = 64 * 1024


def encode(data: dict[str, Any]) -> str:
    """
    Encode a dict to a compact JSON string.
    """
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def _reject_constant(value: str) -> None:
    raise ValueError(f"non-finite number {value} is not allowed")


def decode(data: str | bytes) -> dict[str, Any]:
    """
    Decode a JSON frame to a dict.

    Raises DecodeError if the frame is too large, is not valid JSON,
    or does not hold a JSON object.
    """
    if len(data) > MAX_FRAME_LEN:
        raise DecodeError(f"frame too large: {len(data)} bytes (max {MAX_FRAME_LEN})")
    try:
        result = json.loads(data, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"failed to decode JSON frame: {e}") from e

    if not isinstance(result, dict):
        raise DecodeError(f"expected object, got {type(result).__name__}")

    return result
