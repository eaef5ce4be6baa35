import pytest

from relay.messaging.router import MessageRouter
from relay.session.manager import SessionManager
from relay.tests.mocks import MockConnection


@pytest.fixture
async def session_manager():
    manager = SessionManager()
    yield manager
    await manager.shutdown()


@pytest.fixture
def message_router(session_manager):
    return MessageRouter(session_manager)


@pytest.fixture
def mock_connection():
    return MockConnection()
