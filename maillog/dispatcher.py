"""Route a raw log line to the extractor for its Postfix subsystem."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import tzinfo
from typing import Optional

from maillog.errors import MalformedLine
from maillog.extractors import (
    extract_cleanup,
    extract_connection,
    extract_local_delivery,
    extract_pickup,
    extract_queue_manager,
    extract_relay,
)
from maillog.models import AnyMailEvent, Component
from maillog.tokenizer import SUBSYSTEM_MARKER, LineParts, split_line, subsystem_tag

logger = logging.getLogger(__name__)

Extractor = Callable[[LineParts, int, Optional[tzinfo]], Optional[AnyMailEvent]]

SUBSYSTEM_TABLE: dict[str, Component] = {
    "postfix/smtpd": Component.CONNECTION,
    "postfix/pickup": Component.PICKUP,
    "postfix/cleanup": Component.CLEANUP,
    "postfix/qmgr": Component.QUEUE_MANAGER,
    "postfix/smtp": Component.RELAY,
    "postfix/local": Component.LOCAL_DELIVERY,
}

EXTRACTORS: dict[Component, Extractor] = {
    Component.CONNECTION: extract_connection,
    Component.PICKUP: extract_pickup,
    Component.CLEANUP: extract_cleanup,
    Component.QUEUE_MANAGER: extract_queue_manager,
    Component.RELAY: extract_relay,
    Component.LOCAL_DELIVERY: extract_local_delivery,
}


def build_table(aliases: Mapping[str, str] | None = None) -> dict[str, Component]:
    """Extend the fixed tag table with ``{"postfix/submission/smtpd": "connection"}`` aliases.

    Raises:
        ValueError: If an alias names an unknown component.
    """
    table = dict(SUBSYSTEM_TABLE)
    for tag, name in (aliases or {}).items():
        table[tag] = Component(name)
    return table


def dispatch_line(line: str, year: int, tz: tzinfo | None = None,
                  table: Mapping[str, Component] | None = None) -> AnyMailEvent | None:
    """Parse one line into an event.

    Returns None for lines without the ``postfix/`` marker, for unrecognized
    subsystem tags, and for messages an extractor does not model. Extractor
    errors propagate.
    """
    if SUBSYSTEM_MARKER not in line:
        return None

    table = SUBSYSTEM_TABLE if table is None else table
    component = table.get(subsystem_tag(line) or "")
    if component is None:
        logger.debug("Unrecognized subsystem, skipping: %s", line.rstrip())
        return None

    try:
        parts = split_line(line)
    except MalformedLine as exc:
        exc.component = component.value
        raise
    return EXTRACTORS[component](parts, year, tz)
