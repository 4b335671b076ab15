"""Line framing over a connected socket.

Writes one command per line and reads replies one line at a time. Knows
nothing about the NUT protocol itself.
"""

import logging
import socket
from typing import Any, Dict, Optional

from ..utils.logging_utils import log_command, log_reply, redact_command
from .constants import DEFAULT_ENCODING, LINE_TERMINATOR
from .errors import safe_socket_operation
from .exceptions import ConnectionError, InvalidArgumentError

logger = logging.getLogger(__name__)


class LineCodec:
    """Line reader/writer bound to one socket.

    A new codec must be created whenever the socket is replaced (for
    example after a TLS upgrade); call ``release`` on the old one first.
    """

    def __init__(
        self,
        sock: socket.socket,
        encoding: str = DEFAULT_ENCODING,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._sock = sock
        self._reader = sock.makefile("rb")
        self.encoding = encoding
        self.context = context or {}

    def write_line(self, line: str) -> None:
        """Send ``line`` followed by CRLF."""
        if "\r" in line or "\n" in line:
            raise InvalidArgumentError(
                "Command must be a single line",
                context={"command": redact_command(line)},
            )
        log_command(logger, line)
        data = (line + LINE_TERMINATOR).encode(self.encoding)
        with safe_socket_operation("write", self.context):
            self._sock.sendall(data)

    def read_line(self) -> str:
        """Read one line, without its terminator.

        Raises:
            ConnectionError: If the peer closed the connection before a full line arrived.
            TimeoutError: If the socket deadline expired.
        """
        with safe_socket_operation("read", self.context):
            raw = self._reader.readline()
        if not raw or not raw.endswith(b"\n"):
            raise ConnectionError(
                "Connection closed by server",
                context=dict(self.context, operation="read", partial=raw),
            )
        line = raw.rstrip(b"\r\n").decode(self.encoding, errors="replace")
        log_reply(logger, line)
        return line

    def release(self) -> None:
        """Drop the buffered reader without closing the socket."""
        if self._reader is not None:
            try:
                self._reader.close()
            except OSError as e:
                logger.debug(f"Ignoring error while releasing reader: {e}")
            self._reader = None
