"""Output formatters — one-line text summary and JSON (NDJSON)."""

import json
from typing import Callable

from maillog.models import AnyMailEvent, event_to_dict

# Per-component attributes shown after the common prefix in text output.
TEXT_FIELDS = {
    "connection": ("client_name", "client_ip"),
    "pickup": ("uid", "sender"),
    "cleanup": ("message_id",),
    "queue-manager": ("sender", "size", "recipient_count"),
    "relay": ("to", "relay", "delay", "status", "status_message"),
    "local-delivery": ("to", "original_to", "relay", "delay", "status", "delivery_message"),
}


def format_text(event: AnyMailEvent) -> str:
    """``2025-01-05 10:22:31 relay ABC123 type=0 to=x@y.com status=sent``."""
    ts = event.event_time.strftime("%Y-%m-%d %H:%M:%S")
    parts = [ts, event.component.value, event.queue_id or "-", f"type={int(event.record_type)}"]
    for name in TEXT_FIELDS[event.component.value]:
        value = getattr(event, name)
        if value is not None:
            parts.append(f"{name}={value}")
    return " ".join(parts)


def format_json(event: AnyMailEvent) -> str:
    """Return NDJSON — one JSON object per line, compatible with jq."""
    return json.dumps(event_to_dict(event))


def get_formatter(output_format: str = "text") -> Callable[[AnyMailEvent], str]:
    """Factory that returns the right formatter based on args."""
    if output_format == "json":
        return format_json
    return format_text
