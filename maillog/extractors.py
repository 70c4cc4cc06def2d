"""Per-subsystem message-body extractors.

Each extractor takes the tokenized line, a reference year and an optional
time zone, and returns one event variant. Required fields that are missing
or unparseable raise :class:`MalformedField`; no partial event is returned.

Expected bodies:

  smtpd    connect from host[ip]
           disconnect from host[ip] ehlo=1 quit=1 commands=2
           lost connection after CONNECT from host[ip]
           QID: client=host[ip]
  pickup   QID: uid=1000 from=<root>
  cleanup  QID: message-id=<id@host>
  qmgr     QID: from=<a@b>, size=512, nrcpt=1 (queue active)
           QID: removed
  smtp     QID: to=<x@y>, relay=mx[1.2.3.4]:25, delay=1.2, ..., status=sent (250 OK)
  local    QID: to=<x@y>, orig_to=<x>, relay=local, delay=0.05, delays=a/b/c/d,
           dsn=2.0.0, status=sent (delivered to mailbox)
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo

from maillog.errors import MalformedField, MalformedTimestamp
from maillog.models import (
    CleanupEvent,
    Component,
    ConnectionEvent,
    ConnectionRecordType,
    LocalDeliveryEvent,
    PickupEvent,
    QueueManagerEvent,
    QueueRecordType,
    RelayEvent,
)
from maillog.timestamps import resolve_timestamp
from maillog.tokenizer import (
    LineParts,
    body_tokens,
    key_value_pairs,
    leading_queue_id,
    split_host_address,
    strip_brackets,
)

logger = logging.getLogger(__name__)

# Administrative lines that occupy the queue id position.
SENTINEL_QUEUE_IDS = frozenset({"warning", "connect"})

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _event_time(parts: LineParts, year: int, tz: tzinfo | None,
                component: Component) -> datetime:
    try:
        return resolve_timestamp(parts.month, parts.day, parts.clock, year, tz)
    except MalformedTimestamp as exc:
        raise MalformedTimestamp(str(exc), line=parts.raw, component=component.value) from exc


def _field_error(component: Component, parts: LineParts, message: str) -> MalformedField:
    return MalformedField(message, line=parts.raw, component=component.value)


def _require(pairs: dict[str, str], key: str, component: Component,
             parts: LineParts) -> str:
    value = pairs.get(key)
    if value is None:
        raise _field_error(component, parts, f"Missing '{key}=' field")
    return value


def _parse_int(value: str, key: str, component: Component, parts: LineParts) -> int:
    """Parse the leading token of *value* as an integer (``1 (queue active)`` -> 1)."""
    token = value.split(None, 1)[0] if value.strip() else ""
    try:
        return int(token)
    except ValueError as exc:
        raise _field_error(component, parts, f"Non-numeric '{key}' value: {token!r}") from exc


def _parse_float(value: str, key: str, component: Component, parts: LineParts) -> float:
    token = value.split(None, 1)[0] if value.strip() else ""
    try:
        return float(token)
    except ValueError as exc:
        raise _field_error(component, parts, f"Non-numeric '{key}' value: {token!r}") from exc


def _after_queue_id(body: str) -> str:
    """Everything after ``QID: ``."""
    _, sep, rest = body.partition(": ")
    return rest if sep else ""


def _unwrap_parens(text: str) -> str:
    text = text.strip()
    if text.startswith("(") and text.endswith(")"):
        return text[1:-1]
    return text


def _split_status(text: str) -> tuple[str, str]:
    """``sent (250 OK)`` -> ``("sent", "250 OK")``."""
    status, _, detail = text.strip().partition(" ")
    return status, _unwrap_parens(detail)


def _split_delivery_fields(rest: str, component: Component,
                           parts: LineParts) -> tuple[dict[str, str], str]:
    """Split ``k=v, ..., status=...`` into the pairs before status and the status text.

    The status text runs to end of line, so commas inside a remote server's
    reply do not break pair splitting.
    """
    head, sep, status_text = rest.partition("status=")
    if not sep:
        raise _field_error(component, parts, "Missing 'status=' field")
    return key_value_pairs(head.rstrip(", ")), status_text


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


def extract_connection(parts: LineParts, year: int,
                       tz: tzinfo | None = None) -> ConnectionEvent | None:
    """smtpd lines. Returns None for smtpd messages outside the four record types."""
    component = Component.CONNECTION
    tokens = body_tokens(parts.body)
    body = parts.body

    if len(tokens) >= 2 and tokens[0] in ("connect", "disconnect") and tokens[1] == "from":
        if len(tokens) < 3 or "[" not in tokens[2]:
            raise _field_error(component, parts, "Missing client 'name[ip]' token")
        name, ip = split_host_address(tokens[2])
        record_type = (ConnectionRecordType.CONNECT if tokens[0] == "connect"
                       else ConnectionRecordType.DISCONNECT)
        return ConnectionEvent(
            event_time=_event_time(parts, year, tz, component),
            hostname=parts.hostname,
            pid=parts.pid,
            record_type=record_type,
            client_name=name,
            client_ip=ip,
        )

    if body.startswith("lost connection after CONNECT"):
        name = ip = None
        _, sep, client = body.partition(" from ")
        if sep:
            name, ip = split_host_address(client.strip())
        return ConnectionEvent(
            event_time=_event_time(parts, year, tz, component),
            hostname=parts.hostname,
            pid=parts.pid,
            record_type=ConnectionRecordType.LOST_AFTER_CONNECT,
            client_name=name,
            client_ip=ip,
        )

    rest = _after_queue_id(body)
    if rest.startswith("client=") and tokens[0] not in ("NOQUEUE:", "warning:"):
        name, ip = split_host_address(key_value_pairs(rest)["client"])
        return ConnectionEvent(
            event_time=_event_time(parts, year, tz, component),
            hostname=parts.hostname,
            pid=parts.pid,
            record_type=ConnectionRecordType.CLIENT_IDENTIFIED,
            client_name=name,
            client_ip=ip,
            queue_id=leading_queue_id(body),
        )

    logger.debug("Skipping unmodeled smtpd message: %s", body)
    return None


def extract_pickup(parts: LineParts, year: int, tz: tzinfo | None = None) -> PickupEvent:
    component = Component.PICKUP
    tokens = body_tokens(parts.body)
    if len(tokens) < 2 or not tokens[1].startswith("uid="):
        raise _field_error(component, parts, "Missing 'uid=' field")

    sender = None
    for token in tokens[2:]:
        if token.startswith("from="):
            sender = strip_brackets(token[len("from="):])

    return PickupEvent(
        event_time=_event_time(parts, year, tz, component),
        hostname=parts.hostname,
        pid=parts.pid,
        queue_id=leading_queue_id(parts.body),
        uid=tokens[1][len("uid="):],
        sender=sender,
    )


def extract_cleanup(parts: LineParts, year: int, tz: tzinfo | None = None) -> CleanupEvent:
    component = Component.CLEANUP
    rest = _after_queue_id(parts.body)
    if not rest.startswith("message-id="):
        raise _field_error(component, parts, "Missing 'message-id=' field")

    return CleanupEvent(
        event_time=_event_time(parts, year, tz, component),
        hostname=parts.hostname,
        pid=parts.pid,
        queue_id=leading_queue_id(parts.body),
        message_id=strip_brackets(rest[len("message-id="):]),
    )


def extract_queue_manager(parts: LineParts, year: int,
                          tz: tzinfo | None = None) -> QueueManagerEvent:
    component = Component.QUEUE_MANAGER
    queue_id = leading_queue_id(parts.body)
    rest = _after_queue_id(parts.body)

    if rest.strip() == "removed":
        return QueueManagerEvent(
            event_time=_event_time(parts, year, tz, component),
            hostname=parts.hostname,
            pid=parts.pid,
            queue_id=queue_id,
            record_type=QueueRecordType.REMOVED,
        )

    pairs = key_value_pairs(rest)
    size = _parse_int(_require(pairs, "size", component, parts), "size", component, parts)
    count = _parse_int(_require(pairs, "nrcpt", component, parts), "nrcpt", component, parts)
    sender = pairs.get("from")

    return QueueManagerEvent(
        event_time=_event_time(parts, year, tz, component),
        hostname=parts.hostname,
        pid=parts.pid,
        queue_id=queue_id,
        record_type=QueueRecordType.QUEUED,
        sender=strip_brackets(sender) if sender is not None else None,
        size=size,
        recipient_count=count,
    )


def extract_relay(parts: LineParts, year: int, tz: tzinfo | None = None) -> RelayEvent:
    component = Component.RELAY
    queue_id = leading_queue_id(parts.body)
    event_time = _event_time(parts, year, tz, component)

    if queue_id in SENTINEL_QUEUE_IDS:
        return RelayEvent(
            event_time=event_time, hostname=parts.hostname, pid=parts.pid, queue_id=queue_id,
        )

    pairs, status_text = _split_delivery_fields(_after_queue_id(parts.body), component, parts)
    to = _require(pairs, "to", component, parts)
    relay, _ = split_host_address(_require(pairs, "relay", component, parts))
    raw_delay = _require(pairs, "delay", component, parts)
    try:
        delay = int(float(raw_delay))
    except (ValueError, OverflowError) as exc:
        raise _field_error(component, parts, f"Non-numeric 'delay' value: {raw_delay!r}") from exc

    status, detail = _split_status(status_text)
    reply_code = None
    code, _, remainder = detail.partition(" ")
    if len(code) == 3 and code.isascii() and code.isdigit():
        reply_code = int(code)
        detail = remainder

    return RelayEvent(
        event_time=event_time,
        hostname=parts.hostname,
        pid=parts.pid,
        queue_id=queue_id,
        to=strip_brackets(to),
        relay=relay,
        delay=delay,
        status=status,
        reply_code=reply_code,
        status_message=detail or None,
    )


def extract_local_delivery(parts: LineParts, year: int,
                           tz: tzinfo | None = None) -> LocalDeliveryEvent:
    component = Component.LOCAL_DELIVERY
    queue_id = leading_queue_id(parts.body)
    event_time = _event_time(parts, year, tz, component)

    if queue_id in SENTINEL_QUEUE_IDS:
        return LocalDeliveryEvent(
            event_time=event_time, hostname=parts.hostname, pid=parts.pid, queue_id=queue_id,
        )

    pairs, status_text = _split_delivery_fields(_after_queue_id(parts.body), component, parts)
    to = _require(pairs, "to", component, parts)
    relay, _ = split_host_address(_require(pairs, "relay", component, parts))
    delay = _parse_float(_require(pairs, "delay", component, parts), "delay", component, parts)
    delays = _require(pairs, "delays", component, parts)
    dsn = _require(pairs, "dsn", component, parts)
    original_to = pairs.get("orig_to")
    status, message = _split_status(status_text)

    return LocalDeliveryEvent(
        event_time=event_time,
        hostname=parts.hostname,
        pid=parts.pid,
        queue_id=queue_id,
        to=strip_brackets(to),
        original_to=strip_brackets(original_to) if original_to is not None else None,
        relay=relay,
        delay=delay,
        delays=delays,
        dsn=dsn,
        status=status,
        delivery_message=message or None,
    )
