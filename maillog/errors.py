"""Error taxonomy for mail-log extraction."""

from __future__ import annotations


class MaillogError(Exception):
    """Base class for every error raised by the maillog package."""


class LineError(MaillogError):
    """A single log line could not be turned into an event.

    Carries the raw line and, once known, the subsystem that was parsing it.
    """

    def __init__(self, message: str, line: str = "", component: str | None = None):
        super().__init__(message)
        self.line = line
        self.component = component

    def __str__(self) -> str:
        base = super().__str__()
        if self.component:
            return f"[{self.component}] {base}"
        return base


class MalformedLine(LineError):
    """Metadata prefix is missing the delimiter or positional fields."""


class MalformedTimestamp(LineError):
    """Month/day/time tokens do not match ``Mon D HH:MM:SS``."""


class MalformedField(LineError):
    """A subsystem-specific key/value or numeric token is missing or invalid."""


class IngestError(MaillogError):
    """The log source could not be opened or read."""

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source


class ConfigError(MaillogError):
    """Configuration file contents are invalid."""
