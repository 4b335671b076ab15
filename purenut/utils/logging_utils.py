"""
Centralized logging utilities for purenut.

Provides standardized logging functions for common scenarios to reduce duplication
and ensure consistent log formatting across the codebase.
"""

import logging
from typing import Any

from ..protocol.constants import SENSITIVE_COMMANDS

REDACTED = "********"


def redact_command(command: str) -> str:
    """Return the command with any secret argument masked."""
    keyword, sep, _ = command.partition(" ")
    if sep and keyword.upper() in SENSITIVE_COMMANDS:
        return f"{keyword} {REDACTED}"
    return command


def log_command(logger: logging.Logger, command: str) -> None:
    """Log an outbound command line, secrets redacted."""
    logger.debug(f"[SEND] {redact_command(command)}")


def log_reply(logger: logging.Logger, line: str) -> None:
    """Log an inbound reply line."""
    logger.debug(f"[RECV] {line}")


def log_command_error(
    logger: logging.Logger, command: str, error: Exception
) -> None:
    """Log command execution errors with consistent format."""
    logger.error(f"Error handling command '{redact_command(command)}': {error}")


def log_protocol_event(
    logger: logging.Logger, event_type: str, details: str = ""
) -> None:
    """Log protocol events with consistent format."""
    detail_str = f": {details}" if details else ""
    logger.info(f"[PROTOCOL] {event_type}{detail_str}")


def log_tls_event(logger: logging.Logger, event_type: str, details: str = "") -> None:
    """Log TLS upgrade events with consistent format."""
    detail_str = f": {details}" if details else ""
    logger.info(f"[TLS] {event_type}{detail_str}")


def log_state_transition(
    logger: logging.Logger, old_state: Any, new_state: Any, reason: str = ""
) -> None:
    """Log a session state change."""
    reason_str = f" ({reason})" if reason else ""
    logger.debug(
        f"[STATE] {old_state} -> {new_state}{reason_str}",
        extra={"protocol_phase": getattr(new_state, "value", str(new_state))},
    )


def log_parsing_warning(logger: logging.Logger, operation: str, reason: str) -> None:
    """Log parsing warnings with consistent format."""
    logger.warning(f"{operation}: {reason}")


def log_connection_event(
    logger: logging.Logger, event_type: str, host: str = "", port: int = 0
) -> None:
    """Log connection events with consistent format."""
    if host and port:
        logger.info(f"[CONNECTION] {event_type} - {host}:{port}")
    else:
        logger.info(f"[CONNECTION] {event_type}")


__all__ = [
    "REDACTED",
    "redact_command",
    "log_command",
    "log_reply",
    "log_command_error",
    "log_protocol_event",
    "log_tls_event",
    "log_state_transition",
    "log_parsing_warning",
    "log_connection_event",
]
