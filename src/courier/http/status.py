"""HTTP status codes with sanitised reason phrases.

The status line is written verbatim by the transport, so a reason phrase
must never contain CR, LF, or any other control character.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from http import HTTPStatus

# RFC 2616 section 6.1.1: any TEXT except CRLF, where TEXT excludes octets 0-31 and 127
_ILLEGAL_REASON_CHARS = re.compile(r"[\x00-\x1f\x7f]")


class Family(Enum):
    """Status class, as given by the first digit of the code."""

    INFORMATIONAL = 1
    SUCCESSFUL = 2
    REDIRECTION = 3
    CLIENT_ERROR = 4
    SERVER_ERROR = 5
    OTHER = 0

    @classmethod
    def of(cls, code: int) -> Family:
        try:
            return cls(code // 100)
        except ValueError:
            return cls.OTHER


def sanitize_reason_phrase(phrase: str | None) -> str:
    """Replace every character that would break a status line with a space."""
    if phrase is None:
        return ""
    return _ILLEGAL_REASON_CHARS.sub(" ", phrase)


@dataclass(frozen=True, slots=True)
class Status:
    """A status code plus the reason phrase sent with it."""

    code: int
    reason_phrase: str = ""

    @classmethod
    def of(cls, code: int) -> Status:
        """Return the canonical status for *code*.

        Unknown codes get an empty reason phrase.
        """
        try:
            phrase = HTTPStatus(code).phrase
        except ValueError:
            phrase = ""
        return cls(code=code, reason_phrase=phrase)

    @property
    def family(self) -> Family:
        return Family.of(self.code)

    def with_reason_phrase(self, phrase: str | None) -> Status:
        """Return a copy with a different, sanitised, reason phrase."""
        return replace(self, reason_phrase=sanitize_reason_phrase(phrase))

    def __str__(self) -> str:
        if self.reason_phrase:
            return f"{self.code} {self.reason_phrase}"
        return str(self.code)


OK = Status.of(200)
NO_CONTENT = Status.of(204)
NOT_MODIFIED = Status.of(304)
BAD_REQUEST = Status.of(400)
NOT_FOUND = Status.of(404)
METHOD_NOT_ALLOWED = Status.of(405)
INTERNAL_SERVER_ERROR = Status.of(500)
