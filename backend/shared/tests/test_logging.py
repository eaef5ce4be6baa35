import json
import logging
from datetime import UTC, datetime
from enum import StrEnum
from unittest.mock import patch

import pytest
import structlog

from shared.logging import _serialize_enums, setup_logging


class _Cmd(StrEnum):
    CHAT = "chat"


@pytest.fixture(autouse=True)
def _cleanup_root_logger():
    """Restore structlog config and the root logger after each test."""
    config = structlog.get_config()
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    root.setLevel(level)
    structlog.configure(**config)


@pytest.fixture
def file_logging():
    """Lift the pytest guard so a real log file is created."""
    with patch("shared.logging._is_test", return_value=False):
        yield


class TestSetupLogging:
    def test_stdout_only_by_default(self):
        assert setup_logging() is None

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger().handlers) == 1

    def test_no_log_file_under_pytest(self, tmp_path):
        assert setup_logging(log_dir=tmp_path / "relay") is None
        assert not (tmp_path / "relay").exists()

    @pytest.mark.usefixtures("file_logging")
    def test_log_file_named_by_start_time(self, tmp_path):
        fixed_time = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)
        with patch("shared.logging.datetime") as mock_dt:
            mock_dt.now.return_value = fixed_time
            log_path = setup_logging(log_dir=tmp_path / "relay")

        assert log_path == tmp_path / "relay" / "2026-01-02_03-04-05.log"
        assert isinstance(logging.getLogger().handlers[1], logging.FileHandler)

    @pytest.mark.usefixtures("file_logging")
    def test_json_lines_carry_bound_context(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log_path = setup_logging(log_dir=str(tmp_path))

        structlog.contextvars.bind_contextvars(connection_id="abc")
        structlog.get_logger("test.json").info("room created", room_code="ABCDE", cmd=_Cmd.CHAT)

        parsed = json.loads(log_path.read_text().strip().splitlines()[-1])
        assert parsed["event"] == "room created"
        assert parsed["connection_id"] == "abc"
        assert parsed["room_code"] == "ABCDE"
        assert parsed["cmd"] == "chat"
        assert parsed["level"] == "info"

    @pytest.mark.usefixtures("file_logging")
    def test_stdlib_loggers_are_rendered_too(self, tmp_path):
        log_path = setup_logging(log_dir=tmp_path)

        logging.getLogger("relay.messaging.router").warning("invalid message from %s", "c1")

        assert "invalid message from c1" in log_path.read_text()

    def test_uvicorn_loggers_propagate_to_root(self):
        logging.getLogger("uvicorn.error").addHandler(logging.NullHandler())
        setup_logging()

        uvicorn_logger = logging.getLogger("uvicorn.error")
        assert uvicorn_logger.handlers == []
        assert uvicorn_logger.propagate is True

    def test_level_argument_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(level=logging.DEBUG)
        assert logging.getLogger().level == logging.DEBUG

    def test_level_from_env_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        setup_logging()
        assert logging.getLogger().level == logging.WARNING

    def test_invalid_log_level_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "loud")
        with pytest.raises(ValueError, match="Invalid LOG_LEVEL"):
            setup_logging()

    def test_invalid_log_format_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "xml")
        with pytest.raises(ValueError, match="Invalid LOG_FORMAT"):
            setup_logging()


class TestSerializeEnums:
    def test_enum_values_are_unwrapped(self):
        event = _serialize_enums(None, "info", {"cmd": _Cmd.CHAT, "count": 2})
        assert event == {"cmd": "chat", "count": 2}
        assert type(event["cmd"]) is str
