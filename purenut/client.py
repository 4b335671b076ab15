"""
Typed accessors for UPS and server variables.

``NutClient`` is a ``Session`` plus one method per well-known NUT variable.
Each accessor fetches the raw text through ``Session.fetch_variable`` and
converts it; numeric accessors raise ``ParseError`` carrying the
``UNAVAILABLE`` sentinel, or return it when called with ``strict=False``.
"""

import logging
import types
from typing import Any, List, Optional

from .exceptions import ParseError, ProtocolError
from .protocol.constants import (
    CMD_LIST_UPS,
    CMD_LIST_VAR,
    STATUS_BYPASS,
    STATUS_LOW_BATTERY,
    STATUS_ON_BATTERY,
    STATUS_ONLINE,
)
from .protocol.parser import parse_ups_list, parse_var_list
from .session import Session, SocketFactory
from .utils.logging_utils import log_parsing_warning

logger = logging.getLogger(__name__)

# Returned for numeric values the server could not provide
UNAVAILABLE = -1

STATUS_VARIABLE = "ups.status"


def parse_int(raw: str, label: str, variable: str = "") -> int:
    """Parse ``raw`` as a base-10 integer or raise ParseError naming ``label``."""
    text = raw.strip()
    try:
        # int() also takes underscores and non-ASCII digits
        if "_" in text or not text.isascii():
            raise ValueError(f"invalid literal for int(): {raw!r}")
        return int(text, 10)
    except ValueError as e:
        raise ParseError(
            f"Cannot convert {label} to numerical value",
            value=UNAVAILABLE,
            context={"variable": variable, "raw": raw},
            original_exception=e,
        ) from e


class _VariableAccessor:
    """Class attribute that becomes a zero-argument method reading one variable."""

    def __init__(self, variable: str, label: str, doc: str) -> None:
        self.variable = variable
        self.label = label
        self.__doc__ = doc
        self.__name__ = variable

    def __set_name__(self, owner: type, name: str) -> None:
        self.__name__ = name
        self.__qualname__ = f"{owner.__name__}.{name}"

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __call__(self, client: "NutClient", *args: Any, **kwargs: Any) -> Any:
        raise NotImplementedError


class IntVariable(_VariableAccessor):
    def __call__(self, client: "NutClient", strict: bool = True) -> int:
        return client.get_int(self.variable, self.label, strict=strict)


class StringVariable(_VariableAccessor):
    def __call__(self, client: "NutClient") -> str:
        return client.fetch_variable(self.variable)


class NutClient(Session):
    """NUT session with typed accessors for the common UPS variables."""

    # Battery
    battery_charge = IntVariable(
        "battery.charge", "battery charge", "Battery charge (percent)."
    )
    battery_charge_low = IntVariable(
        "battery.charge.low",
        "battery charge low",
        "Remaining battery level at which the UPS switches to LB (percent).",
    )
    battery_charge_warning = IntVariable(
        "battery.charge.warning",
        "battery charge warning",
        "Battery level at which the UPS raises a warning (percent).",
    )
    battery_charge_restart = IntVariable(
        "battery.charge.restart",
        "battery charge restart",
        "Minimum battery level for the UPS to restart after power-off (percent).",
    )
    battery_runtime = IntVariable(
        "battery.runtime", "battery runtime", "Battery runtime (seconds)."
    )
    battery_runtime_low = IntVariable(
        "battery.runtime.low",
        "battery runtime low",
        "Remaining runtime at which the UPS switches to LB (seconds).",
    )
    battery_runtime_restart = IntVariable(
        "battery.runtime.restart",
        "battery runtime restart",
        "Minimum runtime for the UPS to restart after power-off (seconds).",
    )

    # UPS
    ups_load = IntVariable("ups.load", "ups load", "Load on the UPS (percent).")
    ups_temperature = IntVariable(
        "ups.temperature", "ups temperature", "UPS temperature (degrees C)."
    )
    ups_apparent_power = IntVariable(
        "ups.power", "ups apparent power", "Current apparent power (VA)."
    )
    ups_active_power = IntVariable(
        "ups.realpower", "ups active power", "Current active power (W)."
    )

    # Input / output
    input_voltage = IntVariable(
        "input.voltage", "input voltage", "Input voltage (V)."
    )
    input_current = IntVariable(
        "input.current", "input current", "Input current (A)."
    )
    input_frequency = IntVariable(
        "input.frequency", "input frequency", "Input line frequency (Hz)."
    )
    output_voltage = IntVariable(
        "output.voltage", "output voltage", "Output voltage (V)."
    )
    output_current = IntVariable(
        "output.current", "output current", "Output current (A)."
    )
    output_frequency = IntVariable(
        "output.frequency", "output frequency", "Output frequency (Hz)."
    )

    # Identification
    get_ups_model = StringVariable("ups.model", "ups model", "UPS model name.")
    get_ups_serial = StringVariable(
        "ups.serial", "ups serial", "UPS serial number."
    )
    get_server_info = StringVariable(
        "server.info", "server info", "Server information string."
    )
    get_server_version = StringVariable(
        "server.version", "server version", "Server version string."
    )

    def get_int(self, variable: str, label: str = "", strict: bool = True) -> int:
        """
        Fetch ``variable`` and parse it as an integer.

        Args:
            variable: NUT variable name, e.g. ``battery.charge``.
            label: Human name used in the error message.
            strict: When False, return ``UNAVAILABLE`` instead of raising ParseError.
        """
        raw = self.fetch_variable(variable)
        try:
            return parse_int(raw, label or variable, variable)
        except ParseError as e:
            if strict:
                raise
            log_parsing_warning(logger, variable, str(e))
            return UNAVAILABLE

    def _fetch_status(self) -> str:
        return self.fetch_variable(STATUS_VARIABLE)

    def _status_too_short(self, status: str) -> ParseError:
        return ParseError(
            "Cannot identify ups response",
            value=False,
            context={"variable": STATUS_VARIABLE, "raw": status},
        )

    def is_online(self) -> bool:
        """True when the first ``ups.status`` flag is OL or BYPASS."""
        status = self._fetch_status()
        first, _, _ = status.partition(" ")
        if len(first) < 2:
            raise self._status_too_short(status)
        return first.upper() in (STATUS_ONLINE, STATUS_BYPASS)

    def is_on_battery(self) -> bool:
        """True when ``ups.status`` starts with OB or LB."""
        status = self._fetch_status()
        if len(status) < 2:
            raise self._status_too_short(status)
        return status[:2].upper() in (STATUS_ON_BATTERY, STATUS_LOW_BATTERY)

    def is_low_battery(self) -> bool:
        """True when ``ups.status`` starts with LB."""
        status = self._fetch_status()
        if len(status) < 2:
            raise self._status_too_short(status)
        return status[:2].upper() == STATUS_LOW_BATTERY

    def get_server_ups_list(self) -> List[str]:
        """Names of the UPS units the server knows about.

        Raises:
            ProtocolError: If the server rejects LIST UPS or lists nothing.
        """
        names = parse_ups_list(self.fetch_list(CMD_LIST_UPS))
        if not names:
            raise ProtocolError("Empty UPS list", context={"command": CMD_LIST_UPS})
        return names

    def get_ups_vars(self) -> List[str]:
        """Names of the variables exposed by the selected UPS.

        Raises:
            NoUpsSelectedError: If no UPS has been selected; nothing is sent.
            ProtocolError: If the server rejects LIST VAR or lists nothing.
        """
        ups = self._require_ups("get_ups_vars")
        command = f"{CMD_LIST_VAR} {ups}"
        names = parse_var_list(self.fetch_list(command))
        if not names:
            raise ProtocolError("Empty variable list", context={"command": command})
        return names


def dial(
    address: str,
    timeout: Optional[float] = None,
    socket_factory: Optional[SocketFactory] = None,
) -> NutClient:
    """Connect to ``address`` (``host:port``) and return a ``NutClient``."""
    return NutClient.dial(address, timeout=timeout, socket_factory=socket_factory)


__all__: List[str] = [
    "UNAVAILABLE",
    "IntVariable",
    "NutClient",
    "StringVariable",
    "dial",
    "parse_int",
]

