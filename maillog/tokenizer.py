"""Split raw log lines into metadata and message body, and tokenize bodies.

Line shape::

    Jan  5 10:22:31 mail postfix/smtpd[1234]: connect from host[10.0.0.5]
    <--------------- metadata ------------->   <------- body -------->
"""

from __future__ import annotations

from dataclasses import dataclass

from maillog.errors import MalformedLine

DELIMITER = "]: "
SUBSYSTEM_MARKER = " postfix/"


@dataclass(frozen=True)
class LineParts:
    month: str
    day: str
    clock: str
    hostname: str
    tag: str              # "postfix/smtpd"
    pid: int | None
    body: str
    raw: str = ""


def subsystem_tag(line: str) -> str | None:
    """Return the ``postfix/<name>`` token of a line, or None if absent."""
    fields = line.split()
    if len(fields) < 5:
        return None
    return fields[4].split("[", 1)[0].rstrip(":")


def split_line(line: str) -> LineParts:
    """Split a line on the first ``]: `` into positional metadata and body.

    Raises:
        MalformedLine: If the delimiter is absent or the metadata lacks
            month, day, time, hostname and process tag.
    """
    stripped = line.rstrip("\r\n")
    meta, sep, body = stripped.partition(DELIMITER)
    if not sep:
        raise MalformedLine("Missing ']: ' delimiter", line=stripped)

    fields = meta.split()
    if len(fields) < 5:
        raise MalformedLine(
            f"Expected at least 5 metadata fields, got {len(fields)}", line=stripped
        )

    tag, _, raw_pid = fields[4].partition("[")
    # isdigit() alone admits superscripts that int() rejects
    pid = int(raw_pid) if raw_pid.isascii() and raw_pid.isdigit() else None

    return LineParts(
        month=fields[0],
        day=fields[1],
        clock=fields[2],
        hostname=fields[3],
        tag=tag,
        pid=pid,
        body=body,
        raw=stripped,
    )


def body_tokens(body: str) -> list[str]:
    return body.split()


def leading_queue_id(body: str) -> str:
    """First body token with its trailing colon removed (``ABC123:`` -> ``ABC123``)."""
    tokens = body.split(None, 1)
    if not tokens:
        return ""
    return tokens[0].rstrip(":")


def key_value_pairs(text: str) -> dict[str, str]:
    """Parse ``a=1, b=<x>, c=y`` into a dict.

    Splits on ``", "`` then on the first ``=``. Fragments without ``=`` are
    ignored. Values are returned verbatim, brackets included.
    """
    pairs = {}
    for fragment in text.split(", "):
        key, sep, value = fragment.partition("=")
        if sep and key and " " not in key.strip():
            pairs[key.strip()] = value
    return pairs


def strip_brackets(value: str) -> str:
    """``<user@example.com>`` -> ``user@example.com``."""
    return value.strip().strip("<>")


def split_host_address(value: str) -> tuple[str, str | None]:
    """``host.example.com[10.0.0.5]:25`` -> ``("host.example.com", "10.0.0.5")``.

    Values without brackets come back unchanged with no address.
    """
    if "[" not in value:
        return value, None
    host, _, rest = value.partition("[")
    address, _, _ = rest.partition("]")
    return host, address
