"""
Session management for purenut: one synchronous connection to a NUT server (upsd).

The session owns the socket, the line codec and the small client-side state
machine (connected, TLS-upgraded, authenticated, UPS selected, closed). Every
public operation writes exactly one command and blocks until exactly one full
reply has been read.
"""

import logging
import socket
import ssl
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar, Union

from .exceptions import (
    AuthError,
    ConnectionError,
    InvalidArgumentError,
    LoginError,
    NoUpsSelectedError,
    NotConnectedError,
    ProtocolError,
    PureNutError,
    TLSHandshakeError,
)
from .protocol.constants import (
    CMD_GET_VAR,
    CMD_LOGIN,
    CMD_LOGOUT,
    CMD_PASSWORD,
    CMD_STARTTLS,
    CMD_USERNAME,
    DEFAULT_ENCODING,
    NUT_DEFAULT_PORT,
    REPLY_VAR,
)
from .protocol.errors import raise_protocol_error, safe_socket_operation
from .protocol.line_codec import LineCodec
from .protocol.parser import Reply, extract_value, is_list_end, is_list_start, parse_reply
from .protocol.ssl_wrapper import SSLWrapper, upgrade_socket
from .utils.logging_utils import (
    log_command_error,
    log_connection_event,
    log_protocol_event,
    log_state_transition,
    redact_command,
)

logger = logging.getLogger(__name__)

SocketFactory = Callable[..., socket.socket]

_S = TypeVar("_S", bound="Session")


class SessionState(Enum):
    """Client-side session states, in protocol order."""

    CONNECTED = "CONNECTED"
    TLS_UPGRADED = "TLS_UPGRADED"
    AUTHENTICATED = "AUTHENTICATED"
    UPS_SELECTED = "UPS_SELECTED"
    CLOSED = "CLOSED"


class StateTransitionError(PureNutError):
    """Raised when an invalid state transition is attempted."""

    pass


_VALID_TRANSITIONS: Dict[SessionState, Tuple[SessionState, ...]] = {
    SessionState.CONNECTED: (
        SessionState.TLS_UPGRADED,
        SessionState.AUTHENTICATED,
        SessionState.UPS_SELECTED,
        SessionState.CLOSED,
    ),
    SessionState.TLS_UPGRADED: (
        SessionState.AUTHENTICATED,
        SessionState.UPS_SELECTED,
        SessionState.CLOSED,
    ),
    SessionState.AUTHENTICATED: (
        SessionState.UPS_SELECTED,
        SessionState.CLOSED,
    ),
    SessionState.UPS_SELECTED: (
        SessionState.UPS_SELECTED,
        SessionState.CLOSED,
    ),
    SessionState.CLOSED: (SessionState.CLOSED,),
}

_STATE_ORDER = list(SessionState)


def split_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` (or ``[v6addr]:port``) into its parts."""
    host, sep, port_str = address.rpartition(":")
    if not sep or not host or not port_str:
        raise InvalidArgumentError(
            "Address must include a port, as in 'nutsrv.example.com:3493'",
            context={"address": address},
        )
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise InvalidArgumentError(
            "IPv6 addresses must be bracketed, as in '[::1]:3493'",
            context={"address": address},
        )
    try:
        port = int(port_str)
    except ValueError as e:
        raise InvalidArgumentError(
            f"Invalid port '{port_str}'", context={"address": address}
        ) from e
    if not 0 < port < 65536:
        raise InvalidArgumentError(
            f"Port out of range: {port}", context={"address": address}
        )
    return host, port


class Session:
    """
    Synchronous NUT protocol session over a single TCP connection.

    A session is not safe for concurrent use without external
    synchronization; open one session per thread instead.
    """

    def __init__(
        self,
        sock: socket.socket,
        host: str,
        port: Optional[int] = None,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        """
        Adopt an already connected socket.

        Args:
            sock: Connected stream socket. An ``ssl.SSLSocket`` counts as TLS-active.
            host: Server hostname, used as the TLS verification name.
            port: Server port, for logging only.
            encoding: Text encoding of the wire protocol.
        """
        self._sock = sock
        self.server_name = host
        self.port = port
        self.encoding = encoding
        self._tls_active = isinstance(sock, ssl.SSLSocket)
        self._ups_name = ""
        self._state = (
            SessionState.TLS_UPGRADED if self._tls_active else SessionState.CONNECTED
        )
        self._codec: Optional[LineCodec] = LineCodec(
            sock, encoding, context=self._log_context()
        )

    @classmethod
    def connect(
        cls: Type[_S],
        host: str,
        port: int = NUT_DEFAULT_PORT,
        timeout: Optional[float] = None,
        socket_factory: Optional[SocketFactory] = None,
        encoding: str = DEFAULT_ENCODING,
    ) -> _S:
        """Open a TCP connection to ``host:port`` and return a new session.

        Args:
            host: Server hostname or address.
            port: Server port (default 3493).
            timeout: Connect and I/O deadline in seconds; ``None`` blocks.
            socket_factory: Callable with the signature of ``socket.create_connection``.
            encoding: Text encoding of the wire protocol.

        Raises:
            ConnectionError: If the connection cannot be established.
        """
        factory = socket_factory or socket.create_connection
        log_connection_event(logger, "Connecting", host, port)
        with safe_socket_operation("connect", {"host": host, "port": port}):
            sock = factory((host, port), timeout)
        log_connection_event(logger, "Connected", host, port)
        return cls(sock, host, port=port, encoding=encoding)

    @classmethod
    def dial(
        cls: Type[_S],
        address: str,
        timeout: Optional[float] = None,
        socket_factory: Optional[SocketFactory] = None,
    ) -> _S:
        """Connect to ``address`` given as ``host:port``, e.g. ``"nutsrv.example.com:3493"``."""
        host, port = split_address(address)
        return cls.connect(host, port, timeout=timeout, socket_factory=socket_factory)

    # -- state --------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def tls_active(self) -> bool:
        return self._tls_active

    @property
    def ups_name(self) -> str:
        """Currently selected UPS, ``""`` when none."""
        return self._ups_name

    @property
    def connected(self) -> bool:
        return self._state is not SessionState.CLOSED

    @property
    def timeout(self) -> Optional[float]:
        """Socket deadline in seconds (``None`` = blocking)."""
        if self._state is SessionState.CLOSED:
            return None
        return self._sock.gettimeout()

    def set_timeout(self, seconds: Optional[float]) -> None:
        """Set the read/write deadline of the underlying socket.

        A ``TimeoutError`` leaves the reply stream in an unknown position;
        close the session after one.
        """
        self._ensure_open()
        self._sock.settimeout(seconds)

    def _log_context(self) -> Dict[str, Any]:
        return {"host": self.server_name, "port": self.port}

    def _ensure_open(self) -> LineCodec:
        if self._state is SessionState.CLOSED or self._codec is None:
            raise NotConnectedError("Session is closed", context=self._log_context())
        return self._codec

    def _change_state(self, new_state: SessionState, reason: str) -> None:
        """Move forward to ``new_state``; a state behind the current one is a no-op."""
        old_state = self._state
        if (
            new_state is not SessionState.CLOSED
            and _STATE_ORDER.index(new_state) < _STATE_ORDER.index(old_state)
        ):
            return
        if new_state not in _VALID_TRANSITIONS[old_state]:
            raise StateTransitionError(
                f"Invalid state transition: {old_state.value} -> {new_state.value}"
            )
        self._state = new_state
        log_state_transition(logger, old_state.value, new_state.value, reason)

    def _require_ups(self, operation: str) -> str:
        if not self._ups_name:
            raise NoUpsSelectedError(
                "No UPS selected, use select_ups first",
                context={"operation": operation},
            )
        return self._ups_name

    # -- command primitives -------------------------------------------------

    def _roundtrip(self, command: str) -> Reply:
        codec = self._ensure_open()
        codec.write_line(command)
        return parse_reply(codec.read_line())

    def execute(self, command: str) -> Reply:
        """
        Send one command line and read one reply line.

        Returns:
            The parsed reply when its code is OK, VAR or BEGIN.

        Raises:
            ProtocolError: For any other result code (typically ``ERR``).
            ConnectionError: On transport failure.
        """
        try:
            reply = self._roundtrip(command)
        except ConnectionError as e:
            log_command_error(logger, command, e)
            raise
        if not reply.ok:
            raise_protocol_error(reply.raw, command=redact_command(command))
        return reply

    def fetch_variable(self, name: str) -> str:
        """
        Return the raw value of variable ``name`` on the selected UPS.

        Raises:
            NoUpsSelectedError: If no UPS has been selected; nothing is sent.
            InvalidArgumentError: If ``name`` is empty.
            ProtocolError: If the reply is not a ``VAR`` line.
        """
        ups = self._require_ups("fetch_variable")
        if not name:
            raise InvalidArgumentError("Variable name cannot be empty")
        command = f"{CMD_GET_VAR} {ups} {name}"
        reply = self.execute(command)
        if not reply.is_code(REPLY_VAR):
            raise_protocol_error(
                reply.raw,
                message=f"Unexpected reply to {CMD_GET_VAR}: {reply.raw}",
                command=command,
            )
        return extract_value(reply.raw)

    def fetch_list(self, command: str) -> List[str]:
        """
        Send a LIST command and return the lines between BEGIN and END, verbatim.

        Raises:
            InvalidArgumentError: If ``command`` is empty.
            ProtocolError: If the first reply line is not ``BEGIN ...``.
            ConnectionError: If the connection drops before ``END``.
        """
        if not command:
            raise InvalidArgumentError("List command cannot be empty")
        first = self._roundtrip(command)
        if not is_list_start(first):
            raise_protocol_error(first.raw, command=command)
        codec = self._ensure_open()
        lines: List[str] = []
        while True:
            line = codec.read_line()
            if is_list_end(parse_reply(line)):
                break
            lines.append(line)
        logger.debug(f"{command}: {len(lines)} line(s)")
        return lines

    # -- session commands ---------------------------------------------------

    def start_tls(
        self,
        tls_config: Union[ssl.SSLContext, SSLWrapper],
        server_hostname: Optional[str] = None,
    ) -> None:
        """
        Upgrade the connection to TLS in place.

        Args:
            tls_config: Ready ``ssl.SSLContext`` (or an ``SSLWrapper`` to build one).
            server_hostname: Verification name; defaults to the connect hostname.

        Raises:
            ProtocolError: If the server refuses STARTTLS.
            TLSHandshakeError: If TLS is already active or the handshake fails.
                A failed handshake closes the session.
        """
        self._ensure_open()
        hostname = server_hostname or self.server_name
        if self._tls_active:
            raise TLSHandshakeError(
                "TLS already active on this connection",
                context={"server_hostname": hostname},
            )
        if isinstance(tls_config, SSLWrapper):
            # Build the context before STARTTLS so a bad CA path fails early
            tls_config.get_context()
        self.execute(CMD_STARTTLS)

        codec = self._ensure_open()
        codec.release()
        self._codec = None
        try:
            if isinstance(tls_config, SSLWrapper):
                tls_sock = tls_config.wrap_socket(self._sock, hostname)
            else:
                tls_sock = upgrade_socket(self._sock, tls_config, hostname)
        except TLSHandshakeError:
            self._abort("TLS handshake failed")
            raise
        self._sock = tls_sock
        self._codec = LineCodec(tls_sock, self.encoding, context=self._log_context())
        self._tls_active = True
        self._change_state(SessionState.TLS_UPGRADED, "STARTTLS accepted")

    def authenticate(self, login: str, password: str) -> None:
        """
        Send USERNAME then PASSWORD.

        Raises:
            AuthError: If the server rejects either one.
        """
        try:
            self.execute(f"{CMD_USERNAME} {login}")
        except ProtocolError as e:
            raise_protocol_error(
                e.raw,
                AuthError,
                message=f"Bad login: {e.raw}",
                context={"login": login},
                exc=e,
            )
        try:
            self.execute(f"{CMD_PASSWORD} {password}")
        except ProtocolError as e:
            raise_protocol_error(
                e.raw,
                AuthError,
                message=f"Bad password: {e.raw}",
                context={"login": login},
                exc=e,
            )
        log_protocol_event(logger, "Authenticated", login)
        self._change_state(SessionState.AUTHENTICATED, f"user {login}")

    def select_ups(self, name: str) -> None:
        """
        Send LOGIN for ``name`` and remember it as the selected UPS.

        Raises:
            InvalidArgumentError: If ``name`` is empty.
            LoginError: If the server rejects the LOGIN; the previous selection is kept.
        """
        if not name:
            raise InvalidArgumentError("UPS name cannot be empty")
        try:
            self.execute(f"{CMD_LOGIN} {name}")
        except ProtocolError as e:
            raise_protocol_error(
                e.raw,
                LoginError,
                message=f"Cannot select UPS '{name}': {e.raw}",
                context={"ups": name},
                exc=e,
            )
        self._ups_name = name
        log_protocol_event(logger, "UPS selected", name)
        self._change_state(SessionState.UPS_SELECTED, f"LOGIN {name}")

    def logout(self) -> None:
        """Send LOGOUT. The locally selected UPS name is kept."""
        self.execute(CMD_LOGOUT)
        log_protocol_event(logger, "Logged out")

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._state is SessionState.CLOSED:
            return
        if self._codec is not None:
            self._codec.release()
            self._codec = None
        try:
            self._sock.close()
        except OSError as e:
            logger.debug(f"Ignoring error while closing socket: {e}")
        self._ups_name = ""
        self._change_state(SessionState.CLOSED, "close")
        log_connection_event(logger, "Closed", self.server_name, self.port or 0)

    def _abort(self, reason: str) -> None:
        logger.error(f"Aborting session: {reason}")
        self.close()

    def __enter__(self) -> "Session":
        """Enter the context manager."""
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        """Exit the context manager and ensure cleanup."""
        self.close()

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} host={self.server_name} port={self.port} "
            f"state={self._state.value} tls={self._tls_active} ups={self._ups_name!r}>"
        )

