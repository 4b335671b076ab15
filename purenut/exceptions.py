"""Exceptions for purenut with contextual information."""

import builtins
from typing import Any, Dict, Optional


class PureNutError(Exception):
    """Base error for purenut with contextual information."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        """
        Initialize a purenut error.

        Args:
            message: Error message
            context: Optional context information (host, port, command, variable, raw reply, etc.)
            original_exception: Original exception that caused this error
        """
        super().__init__(message)
        self.context = context or {}
        self.original_exception = original_exception

    def __str__(self) -> str:
        """Get string representation with context."""
        base_msg = super().__str__()
        if self.context:
            context_items = []
            for key, value in self.context.items():
                if isinstance(value, str) and len(value) > 50:
                    # Truncate long values
                    value = value[:47] + "..."
                context_items.append(f"{key}={value}")
            context_str = ", ".join(context_items)
            return f"{base_msg} (Context: {context_str})"
        return base_msg

    def __repr__(self) -> str:
        """Get repr with context details."""
        base_repr = super().__repr__()
        if self.context:
            return f"{base_repr} (context={self.context!r})"
        return base_repr

    def add_context(self, key: str, value: Any) -> None:
        """
        Add context information to the exception.

        Args:
            key: Context key
            value: Context value
        """
        self.context[key] = value

    def get_context(self, key: str, default: Any = None) -> Any:
        """
        Get context information from the exception.

        Args:
            key: Context key
            default: Default value if key not found

        Returns:
            Context value or default
        """
        return self.context.get(key, default)


class ConnectionError(PureNutError):
    """Transport-level failure: dial, read, write or unexpected EOF."""

    pass


class NotConnectedError(ConnectionError):
    """Error raised when an operation is attempted on a closed session."""

    pass


class TimeoutError(ConnectionError):
    """The transport deadline expired while waiting on the server."""

    pass


class TLSHandshakeError(PureNutError):
    """STARTTLS was acknowledged but the TLS upgrade itself failed."""

    pass


class ProtocolError(PureNutError):
    """The server answered with a non-success result code.

    ``raw`` holds the full reply line, ``reason`` the text after the code
    (for ``ERR ACCESS-DENIED`` that is ``ACCESS-DENIED``).
    """

    def __init__(
        self,
        message: str,
        raw: str = "",
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message, context, original_exception)
        self.raw = raw
        _, _, reason = raw.partition(" ")
        self.reason = reason if reason else raw


class AuthError(ProtocolError):
    """USERNAME or PASSWORD was rejected by the server."""

    pass


class LoginError(ProtocolError):
    """LOGIN (UPS selection) was rejected by the server."""

    pass


class NoUpsSelectedError(PureNutError):
    """A UPS-scoped operation was attempted before a UPS was selected."""

    pass


class InvalidArgumentError(PureNutError, builtins.ValueError):
    """Malformed local input, rejected before anything is sent."""

    pass


class ParseError(PureNutError):
    """Server payload could not be interpreted as the expected type.

    ``value`` carries the "not available" sentinel callers may fall back to.
    """

    def __init__(
        self,
        message: str,
        value: Any = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message, context, original_exception)
        self.value = value
