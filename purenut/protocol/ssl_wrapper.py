"""SSL/TLS support for the NUT STARTTLS upgrade using the stdlib ssl module."""

import logging
import socket
import ssl
from typing import Optional

from ..exceptions import PureNutError
from ..utils.logging_utils import log_tls_event
from .errors import tls_handshake_operation

logger = logging.getLogger(__name__)


class SSLError(PureNutError):
    """Error while building an SSL context."""

    pass


def upgrade_socket(
    sock: socket.socket, context: ssl.SSLContext, server_hostname: Optional[str]
) -> ssl.SSLSocket:
    """
    Wrap an already connected socket in TLS and run the client handshake.

    The returned socket replaces ``sock``; the original must not be used
    afterwards.

    :raises TLSHandshakeError: If the handshake fails for any reason.
    """
    with tls_handshake_operation(server_hostname):
        tls_sock = context.wrap_socket(
            sock, server_side=False, server_hostname=server_hostname or None
        )
    version = tls_sock.version() if hasattr(tls_sock, "version") else None
    log_tls_event(logger, "Handshake complete", f"{server_hostname} ({version})")
    return tls_sock


class SSLWrapper:
    """Builds client SSL contexts for upsd connections."""

    def __init__(
        self,
        verify: bool = True,
        cafile: Optional[str] = None,
        capath: Optional[str] = None,
    ):
        """
        Initialize the SSLWrapper.

        :param verify: Whether to verify the server's certificate.
        :param cafile: Path to CA certificate file.
        :param capath: Path to CA certificates directory.
        """
        self.verify = verify
        self.cafile = cafile
        self.capath = capath
        self.context: Optional[ssl.SSLContext] = None

        if not verify:
            logger.warning(
                "SSL verification disabled at SSLWrapper creation. "
                "Only use this against servers you trust, e.g. upsd with a self-signed certificate."
            )

    def create_context(self) -> ssl.SSLContext:
        """
        Create an SSLContext for the STARTTLS upgrade.

        - Build context with ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        - When verify=True: check_hostname=True and verify_mode=CERT_REQUIRED
        - Enforce minimum TLS 1.2

        :return: Configured SSLContext.
        :raises SSLError: If context creation fails.
        """
        try:
            ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

            if self.verify:
                ctx.check_hostname = True
                ctx.verify_mode = ssl.CERT_REQUIRED
                if self.cafile or self.capath:
                    ctx.load_verify_locations(cafile=self.cafile, capath=self.capath)
                else:
                    ctx.load_default_certs()
            else:
                ctx.check_hostname = False
                ctx.verify_mode = ssl.CERT_NONE
                logger.warning(
                    "SSL certificate verification is DISABLED (verify=False)."
                )

            ctx.minimum_version = ssl.TLSVersion.TLSv1_2

            self.context = ctx
            logger.debug("SSLContext created successfully")
            return ctx

        except (ssl.SSLError, OSError) as e:
            logger.error(f"SSL context creation failed: {e}")
            raise SSLError(
                f"SSL context creation failed: {e}",
                context={"cafile": self.cafile, "capath": self.capath},
                original_exception=e,
            ) from e

    def get_context(self) -> ssl.SSLContext:
        """Get the SSLContext (create if not exists)."""
        if self.context is None:
            self.create_context()
        assert self.context is not None, "Context should be created by create_context"
        return self.context

    def wrap_socket(
        self, sock: socket.socket, server_hostname: Optional[str]
    ) -> ssl.SSLSocket:
        """Upgrade ``sock`` using this wrapper's context."""
        return upgrade_socket(sock, self.get_context(), server_hostname)


# Usage example:
# wrapper = SSLWrapper(verify=False)
# session = Session.connect("ups.example.com")
# session.start_tls(wrapper.get_context())
