"""NUT line protocol: framing, reply parsing, TLS upgrade and error mapping."""

from .line_codec import LineCodec
from .parser import Reply, extract_value, parse_reply, parse_ups_list, parse_var_list
from .ssl_wrapper import SSLError, SSLWrapper, upgrade_socket

__all__ = [
    "LineCodec",
    "Reply",
    "SSLError",
    "SSLWrapper",
    "extract_value",
    "parse_reply",
    "parse_ups_list",
    "parse_var_list",
    "upgrade_socket",
]
