import ssl
from unittest.mock import MagicMock, patch

import pytest

from purenut.exceptions import TLSHandshakeError
from purenut.protocol.ssl_wrapper import SSLError, SSLWrapper, upgrade_socket


class TestSSLWrapper:
    def test_init(self, ssl_wrapper):
        assert ssl_wrapper.verify is True
        assert ssl_wrapper.cafile is None
        assert ssl_wrapper.capath is None
        assert ssl_wrapper.context is None

    @patch("ssl.SSLContext")
    def test_create_context_verify(self, mock_ssl_context, ssl_wrapper):
        ctx = MagicMock()
        mock_ssl_context.return_value = ctx
        ssl_wrapper.create_context()
        mock_ssl_context.assert_called_once_with(ssl.PROTOCOL_TLS_CLIENT)
        assert ctx.check_hostname is True
        assert ctx.verify_mode == ssl.CERT_REQUIRED
        assert ctx.minimum_version == ssl.TLSVersion.TLSv1_2
        ctx.load_default_certs.assert_called_once()
        ctx.load_verify_locations.assert_not_called()

    @patch("ssl.SSLContext")
    def test_create_context_with_cafile(self, mock_ssl_context):
        wrapper = SSLWrapper(cafile="/etc/nut/ca.pem")
        ctx = MagicMock()
        mock_ssl_context.return_value = ctx
        wrapper.create_context()
        ctx.load_verify_locations.assert_called_once_with(
            cafile="/etc/nut/ca.pem", capath=None
        )
        ctx.load_default_certs.assert_not_called()

    @patch("ssl.SSLContext")
    def test_create_context_no_verify(self, mock_ssl_context):
        wrapper = SSLWrapper(verify=False)
        ctx = MagicMock()
        mock_ssl_context.return_value = ctx
        wrapper.create_context()
        assert ctx.check_hostname is False
        assert ctx.verify_mode == ssl.CERT_NONE

    @patch("ssl.SSLContext")
    def test_create_context_error(self, mock_ssl_context, ssl_wrapper):
        mock_ssl_context.side_effect = ssl.SSLError("Test error")
        with pytest.raises(SSLError):
            ssl_wrapper.create_context()

    def test_missing_cafile(self):
        wrapper = SSLWrapper(cafile="/nonexistent/ca.pem")
        with pytest.raises(SSLError) as exc_info:
            wrapper.create_context()
        assert exc_info.value.get_context("cafile") == "/nonexistent/ca.pem"

    def test_get_context(self, ssl_wrapper):
        with patch.object(ssl_wrapper, "create_context") as mock_create:
            ssl_wrapper.get_context()
        mock_create.assert_called_once()

    def test_get_context_reuses_existing(self, ssl_wrapper):
        ctx = MagicMock(spec=ssl.SSLContext)
        ssl_wrapper.context = ctx
        with patch.object(ssl_wrapper, "create_context") as mock_create:
            assert ssl_wrapper.get_context() is ctx
        mock_create.assert_not_called()

    def test_real_context(self, ssl_wrapper):
        ctx = ssl_wrapper.get_context()
        assert isinstance(ctx, ssl.SSLContext)
        assert ctx.check_hostname is True


class TestUpgradeSocket:
    def test_wraps_client_side(self):
        sock = MagicMock()
        ctx = MagicMock(spec=ssl.SSLContext)
        upgraded = upgrade_socket(sock, ctx, "ups.example.com")
        ctx.wrap_socket.assert_called_once_with(
            sock, server_side=False, server_hostname="ups.example.com"
        )
        assert upgraded is ctx.wrap_socket.return_value

    def test_handshake_error(self):
        ctx = MagicMock(spec=ssl.SSLContext)
        ctx.wrap_socket.side_effect = ssl.SSLError("wrong version number")
        with pytest.raises(TLSHandshakeError) as exc_info:
            upgrade_socket(MagicMock(), ctx, "ups.example.com")
        assert exc_info.value.get_context("server_hostname") == "ups.example.com"

    def test_hostname_mismatch(self):
        ctx = MagicMock(spec=ssl.SSLContext)
        ctx.wrap_socket.side_effect = ssl.CertificateError("hostname mismatch")
        with pytest.raises(TLSHandshakeError):
            upgrade_socket(MagicMock(), ctx, "ups.example.com")

    def test_peer_reset(self):
        ctx = MagicMock(spec=ssl.SSLContext)
        ctx.wrap_socket.side_effect = ConnectionResetError(104, "reset")
        with pytest.raises(TLSHandshakeError):
            upgrade_socket(MagicMock(), ctx, None)

    def test_wrapper_wrap_socket(self, ssl_wrapper):
        ctx = MagicMock(spec=ssl.SSLContext)
        ssl_wrapper.context = ctx
        sock = MagicMock()
        ssl_wrapper.wrap_socket(sock, "ups.example.com")
        ctx.wrap_socket.assert_called_once()
