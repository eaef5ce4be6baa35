import pytest

from relay.session.manager import SessionManager


@pytest.fixture
async def manager():
    manager = SessionManager()
    yield manager
    await manager.shutdown()
