"""Root conftest: settings isolation and structlog routing for tests."""

import os

import pytest
import structlog

# Route structlog through stdlib logging so caplog sees relay events.
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.render_to_log_kwargs,
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=False,
)

_SETTINGS_ENV_PREFIXES = ("RELAY_",)
_SETTINGS_ENV_NAMES = {"PORT", "LOG_LEVEL", "LOG_FORMAT"}


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch):
    """Keep the developer's shell environment out of settings under test."""
    for name in list(os.environ):
        if name in _SETTINGS_ENV_NAMES or name.startswith(_SETTINGS_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Prevent context leaking between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
