import logging
import os
import socket
import ssl
from logging import NullHandler

import pytest

from purenut.client import NutClient
from purenut.protocol.ssl_wrapper import SSLWrapper
from purenut.session import Session
from tests.mocks import MockNUTServer, ScriptedPeer

TEST_HOST = "nut.example.com"
TEST_PORT = 3493

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")
TLS_CERT = os.path.join(DATA_DIR, "localhost.pem")
TLS_KEY = os.path.join(DATA_DIR, "localhost.key")


def pytest_configure(config):
    config.option.log_cli_level = "INFO"
    config.addinivalue_line("markers", "property: hypothesis property-based tests")
    config.addinivalue_line("markers", "integration: tests using a real TCP listener")


@pytest.fixture
def socket_pair():
    """Connected (client, server) socket pair, closed at teardown."""
    client_sock, server_sock = socket.socketpair()
    yield client_sock, server_sock
    client_sock.close()
    server_sock.close()


@pytest.fixture
def peer(socket_pair):
    """Scripted server end of the socket pair."""
    return ScriptedPeer(socket_pair[1])


@pytest.fixture
def session(socket_pair):
    """Plain Session adopted over the client end of the socket pair."""
    s = Session(socket_pair[0], TEST_HOST, port=TEST_PORT)
    yield s
    s.close()


@pytest.fixture
def client(socket_pair):
    """NutClient adopted over the client end of the socket pair."""
    c = NutClient(socket_pair[0], TEST_HOST, port=TEST_PORT)
    yield c
    c.close()


@pytest.fixture
def selected_client(client, peer):
    """NutClient with ``myups`` already selected; the LOGIN line is drained."""
    peer.reply("OK")
    client.select_ups("myups")
    assert peer.received() == ["LOGIN myups"]
    return client


@pytest.fixture
def ssl_wrapper():
    return SSLWrapper()


@pytest.fixture
def server_tls_context():
    """Server-side context presenting the self-signed localhost certificate."""
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.load_cert_chain(TLS_CERT, TLS_KEY)
    return ctx


@pytest.fixture
def nut_server():
    with MockNUTServer() as server:
        yield server


@pytest.fixture(autouse=True)
def suppress_logging():
    logger = logging.getLogger()
    old_handlers = logger.handlers[:]
    null_handler = NullHandler()
    logger.addHandler(null_handler)
    yield
    try:
        logger.removeHandler(null_handler)
    except ValueError:
        pass
    current_handlers = logger.handlers[:]
    for h in old_handlers:
        if h not in current_handlers:
            logger.addHandler(h)
    for h in logger.handlers[:]:
        if h not in old_handlers:
            logger.removeHandler(h)
