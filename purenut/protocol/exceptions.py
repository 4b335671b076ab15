"""Exceptions for protocol handling."""

from ..exceptions import (
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

__all__ = [
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
