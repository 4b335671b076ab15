"""Wire-level constants for the NUT network protocol (upsd, RFC 9271)."""

# Default upsd TCP port (IANA "nut")
NUT_DEFAULT_PORT = 3493

# Line terminator written after every command
LINE_TERMINATOR = "\r\n"
DEFAULT_ENCODING = "utf-8"

# Commands
CMD_STARTTLS = "STARTTLS"
CMD_USERNAME = "USERNAME"
CMD_PASSWORD = "PASSWORD"
CMD_LOGIN = "LOGIN"
CMD_LOGOUT = "LOGOUT"
CMD_GET_VAR = "GET VAR"
CMD_LIST_UPS = "LIST UPS"
CMD_LIST_VAR = "LIST VAR"

# Reply result codes
REPLY_OK = "OK"
REPLY_VAR = "VAR"
REPLY_BEGIN = "BEGIN"
REPLY_END = "END"
REPLY_UPS = "UPS"

# Codes accepted as success by the plain command path
SUCCESS_CODES = frozenset({REPLY_OK, REPLY_VAR, REPLY_BEGIN})

# ups.status flags inspected by the status helpers
STATUS_ONLINE = "OL"
STATUS_BYPASS = "BYPASS"
STATUS_ON_BATTERY = "OB"
STATUS_LOW_BATTERY = "LB"

# Commands whose argument must never reach the logs
SENSITIVE_COMMANDS = frozenset({CMD_PASSWORD})
