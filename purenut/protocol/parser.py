"""Reply parsing for the NUT line protocol.

Every reply line is split once on the first space into a result code and
the remainder. The helpers below turn that split into a structured
``Reply`` and pull names and values out of ``VAR``/``UPS`` lines.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List

from ..utils.logging_utils import log_parsing_warning
from .constants import (
    REPLY_BEGIN,
    REPLY_END,
    REPLY_UPS,
    REPLY_VAR,
    SUCCESS_CODES,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reply:
    """One reply line split into ``code`` and ``args``; ``raw`` is the full line."""

    code: str
    args: str
    raw: str

    @property
    def ok(self) -> bool:
        return self.code.upper() in SUCCESS_CODES

    def is_code(self, code: str) -> bool:
        return self.code.upper() == code.upper()

    @property
    def fields(self) -> List[str]:
        """Whitespace-separated fields of the whole line."""
        return self.raw.split()


def parse_reply(line: str) -> Reply:
    """Split ``line`` on its first space.

    A line without a space is all code: ``OK`` parses to ``Reply("OK", "", "OK")``.
    """
    code, _, args = line.partition(" ")
    return Reply(code=code, args=args, raw=line)


def is_list_start(reply: Reply) -> bool:
    return reply.is_code(REPLY_BEGIN)


def is_list_end(reply: Reply) -> bool:
    return reply.is_code(REPLY_END)


def extract_value(line: str) -> str:
    """Return the text between the first and the last double quote of ``line``.

    Escaped quotes inside the value are passed through as sent. A line with
    no quote yields ``""``; a line with a single quote yields everything
    after it.
    """
    first = line.find('"')
    if first < 0:
        log_parsing_warning(logger, "extract_value", f"no quoted value in {line!r}")
        return ""
    last = line.rfind('"')
    if last == first:
        log_parsing_warning(logger, "extract_value", f"unterminated value in {line!r}")
        return line[first + 1 :]
    return line[first + 1 : last]


def parse_ups_list(lines: Iterable[str]) -> List[str]:
    """UPS names from the body of a ``LIST UPS`` reply (second field of ``UPS`` lines)."""
    names: List[str] = []
    for line in lines:
        reply = parse_reply(line)
        if not reply.is_code(REPLY_UPS):
            continue
        fields = reply.fields
        if len(fields) > 1:
            names.append(fields[1])
    return names


def parse_var_list(lines: Iterable[str]) -> List[str]:
    """Variable names from the body of a ``LIST VAR`` reply (third field of ``VAR`` lines)."""
    names: List[str] = []
    for line in lines:
        reply = parse_reply(line)
        if not reply.is_code(REPLY_VAR):
            continue
        fields = reply.fields
        if len(fields) > 3:
            names.append(fields[2])
    return names
