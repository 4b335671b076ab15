import json
import logging

import pytest

import purenut
from purenut import JSONFormatter, setup_logging
from purenut.exceptions import ProtocolError
from purenut.utils.logging_utils import (
    REDACTED,
    log_command,
    log_command_error,
    log_connection_event,
    log_state_transition,
    redact_command,
)


class TestRedaction:
    @pytest.mark.parametrize(
        "command,expected",
        [
            ("PASSWORD secret", f"PASSWORD {REDACTED}"),
            ("password secret", f"password {REDACTED}"),
            ("USERNAME monuser", "USERNAME monuser"),
            ("PASSWORD", "PASSWORD"),
            ("LIST UPS", "LIST UPS"),
        ],
    )
    def test_redact_command(self, command, expected):
        assert redact_command(command) == expected

    def test_log_command_never_shows_password(self, caplog):
        logger = logging.getLogger("purenut.test")
        with caplog.at_level(logging.DEBUG, logger="purenut"):
            log_command(logger, "PASSWORD hunter2")
            log_command_error(logger, "PASSWORD hunter2", RuntimeError("x"))
        assert "hunter2" not in caplog.text
        assert "[SEND] PASSWORD ********" in caplog.text

    def test_authenticate_never_logs_password(self, session, peer, caplog):
        peer.reply("OK", "OK")
        with caplog.at_level(logging.DEBUG, logger="purenut"):
            session.authenticate("monuser", "hunter2")
        assert "hunter2" not in caplog.text
        assert "[SEND] USERNAME monuser" in caplog.text
        assert "[RECV] OK" in caplog.text

    def test_unsupported_variable_logs_below_warning(self, session, peer, caplog):
        peer.reply("OK", "ERR VAR-NOT-SUPPORTED")
        session.select_ups("myups")
        with caplog.at_level(logging.DEBUG, logger="purenut"):
            with pytest.raises(ProtocolError):
                session.fetch_variable("ups.temperature")
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


class TestLogHelpers:
    def test_state_transition(self, caplog):
        logger = logging.getLogger("purenut.test")
        with caplog.at_level(logging.DEBUG, logger="purenut"):
            log_state_transition(logger, "CONNECTED", "UPS_SELECTED", "LOGIN myups")
        record = caplog.records[-1]
        assert record.getMessage() == "[STATE] CONNECTED -> UPS_SELECTED (LOGIN myups)"
        assert record.protocol_phase == "UPS_SELECTED"

    def test_connection_event(self, caplog):
        logger = logging.getLogger("purenut.test")
        with caplog.at_level(logging.INFO, logger="purenut"):
            log_connection_event(logger, "Connected", "ups.local", 3493)
            log_connection_event(logger, "Closed")
        assert "[CONNECTION] Connected - ups.local:3493" in caplog.text
        assert "[CONNECTION] Closed" in caplog.text


class TestJSONFormatter:
    def _record(self, **extra):
        record = logging.LogRecord(
            "purenut.session", logging.INFO, __file__, 10, "hello %s", ("ups",), None
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(self._record()))
        assert entry["level"] == "INFO"
        assert entry["message"] == "hello ups"
        assert entry["line"] == 10
        assert "timestamp" in entry
        assert "protocol_phase" not in entry

    def test_structured_extras(self):
        record = self._record(
            session_id="abc",
            protocol_phase="CONNECTED",
            purenut_extra={"ups": "myups"},
        )
        entry = json.loads(JSONFormatter().format(record))
        assert entry["session_id"] == "abc"
        assert entry["protocol_phase"] == "CONNECTED"
        assert entry["ups"] == "myups"


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_output(self, monkeypatch):
        monkeypatch.setenv("PURENUT_LOG_JSON", "true")
        setup_logging("DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h.formatter, JSONFormatter) for h in root.handlers)

    def test_plain_output(self, monkeypatch):
        monkeypatch.delenv("PURENUT_LOG_JSON", raising=False)
        setup_logging("info")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert not any(isinstance(h.formatter, JSONFormatter) for h in root.handlers)

    def test_exported(self):
        assert purenut.setup_logging is setup_logging
