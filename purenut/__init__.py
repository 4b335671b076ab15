"""
purenut package init.
Exports the session, the typed client and the exception types for talking
to a Network UPS Tools (NUT) server.
"""

import datetime
import json
import logging
import os

from .client import UNAVAILABLE, NutClient, dial
from .exceptions import (
    AuthError,
    ConnectionError,
    InvalidArgumentError,
    LoginError,
    NoUpsSelectedError,
    NotConnectedError,
    ParseError,
    ProtocolError,
    PureNutError,
    TimeoutError,
    TLSHandshakeError,
)
from .protocol.constants import NUT_DEFAULT_PORT
from .protocol.ssl_wrapper import SSLWrapper
from .session import Session, SessionState

__version__ = "0.1.0"


class JSONFormatter(logging.Formatter):
    """JSON formatter with structured logging support."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.datetime.now().isoformat(),
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        session_id = getattr(record, "session_id", None)
        if session_id:
            log_entry["session_id"] = session_id

        protocol_phase = getattr(record, "protocol_phase", None)
        if protocol_phase:
            log_entry["protocol_phase"] = protocol_phase

        extra = getattr(record, "purenut_extra", {})
        if extra:
            log_entry.update(extra)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "WARNING") -> None:
    """
    Setup basic logging configuration.

    Set PURENUT_LOG_JSON=true in the environment for one JSON object per line.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    use_json = os.environ.get("PURENUT_LOG_JSON", "false").lower() == "true"
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    if use_json:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
    else:
        logging.basicConfig(level=getattr(logging, level.upper()))


__all__ = [
    "Session",
    "SessionState",
    "NutClient",
    "SSLWrapper",
    "dial",
    "setup_logging",
    "JSONFormatter",
    "NUT_DEFAULT_PORT",
    "UNAVAILABLE",
    "PureNutError",
    "ConnectionError",
    "NotConnectedError",
    "TimeoutError",
    "TLSHandshakeError",
    "ProtocolError",
    "AuthError",
    "LoginError",
    "NoUpsSelectedError",
    "InvalidArgumentError",
    "ParseError",
]
