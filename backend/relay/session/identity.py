from uuid import uuid4


def issue_connection_id() -> str:
    """Return a new opaque connection id (random 128-bit UUID)."""
    return str(uuid4())
