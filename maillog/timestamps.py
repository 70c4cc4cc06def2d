"""Timestamp resolution for syslog-style ``Mon D HH:MM:SS`` prefixes.

The log format carries no year, so callers always pass one in. The wall
clock is only consulted through ``current_year()`` at the outermost layer.
"""

from __future__ import annotations

from datetime import datetime, tzinfo

from maillog.errors import MalformedTimestamp

TIMESTAMP_FORMAT = "%b %d %H:%M:%S %Y"


def current_year() -> int:
    return datetime.now().year


def resolve_timestamp(month: str, day: str, clock: str, year: int,
                      tz: tzinfo | None = None) -> datetime:
    """Combine ``Jan``, ``5``, ``10:22:31`` and a year into an aware datetime.

    Without ``tz`` the result is interpreted in the host's local zone.

    Raises:
        MalformedTimestamp: If the tokens do not match the expected grammar.
    """
    text = f"{month} {day} {clock}"
    if not day.isdigit() or clock.count(":") != 2:
        raise MalformedTimestamp(f"Unrecognized timestamp: {text!r}", line=text)
    try:
        naive = datetime.strptime(f"{text} {year}", TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise MalformedTimestamp(f"Unrecognized timestamp: {text!r}", line=text) from exc

    if tz is None:
        return naive.astimezone()
    return naive.replace(tzinfo=tz)
