"""
Centralized error handling utilities for protocol operations.

Provides a context manager and helper functions that translate socket/SSL
failures into purenut exceptions, so session.py and line_codec.py do not
repeat the same try/except ladders.
"""

import logging
import socket
import ssl
from typing import Any, Dict, Optional, Type

from .exceptions import (
    ConnectionError,
    PureNutError,
    ProtocolError,
    TimeoutError,
    TLSHandshakeError,
)

logger = logging.getLogger(__name__)


class safe_socket_operation:
    """
    Context manager for socket operations.

    Translates socket.timeout into TimeoutError and any other OSError
    (ssl.SSLError included) into ConnectionError, chaining the original
    exception. purenut exceptions pass through untouched.
    """

    def __init__(self, operation: str, context: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.context = context or {}

    def __enter__(self) -> "safe_socket_operation":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_type is None or issubclass(exc_type, PureNutError):
            return None
        context = dict(self.context, operation=self.operation)
        if issubclass(exc_type, socket.timeout):
            logger.error(f"Socket operation timed out: {self.operation}")
            raise TimeoutError(
                f"{self.operation} timed out", context, exc_val
            ) from exc_val
        if issubclass(exc_type, OSError):
            logger.error(f"Socket operation failed: {self.operation}: {exc_val}")
            raise ConnectionError(
                f"{self.operation} failed: {exc_val}", context, exc_val
            ) from exc_val
        return None


class tls_handshake_operation:
    """Context manager mapping any failure inside a TLS upgrade to TLSHandshakeError."""

    def __init__(self, server_hostname: Optional[str]):
        self.server_hostname = server_hostname

    def __enter__(self) -> "tls_handshake_operation":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_type is None or issubclass(exc_type, TLSHandshakeError):
            return None
        if issubclass(exc_type, (OSError, ssl.CertificateError, ValueError)):
            logger.error(f"TLS handshake failed: {exc_val}", exc_info=True)
            raise TLSHandshakeError(
                f"TLS handshake failed: {exc_val}",
                context={"server_hostname": self.server_hostname},
                original_exception=exc_val,
            ) from exc_val
        return None


def raise_protocol_error(
    raw: str,
    error_class: Type[ProtocolError] = ProtocolError,
    message: Optional[str] = None,
    command: Optional[str] = None,
    exc: Optional[Exception] = None,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """Raise a ProtocolError (or subclass) for a rejected reply line.

    Logged at debug level only; callers decide whether an ERR matters.
    """
    context = dict(context or {})
    if command:
        context["command"] = command
    text = message or raw or "empty reply"
    logger.debug(f"Server rejected command: {raw}")
    if exc is not None:
        raise error_class(text, raw=raw, context=context, original_exception=exc) from exc
    raise error_class(text, raw=raw, context=context)
