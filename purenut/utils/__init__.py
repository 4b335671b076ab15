"""
Utilities package for purenut.

Contains common utility functions used across the purenut codebase.
"""

from .logging_utils import (
    log_command,
    log_command_error,
    log_connection_event,
    log_parsing_warning,
    log_protocol_event,
    log_reply,
    log_state_transition,
    log_tls_event,
    redact_command,
)

__all__ = [
    "log_command",
    "log_command_error",
    "log_connection_event",
    "log_parsing_warning",
    "log_protocol_event",
    "log_reply",
    "log_state_transition",
    "log_tls_event",
    "redact_command",
]
