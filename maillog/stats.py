"""Statistics — events per component, delivery statuses, per-line errors."""

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from maillog.models import AnyMailEvent
from maillog.store import LineDiagnostic


@dataclass
class EventStats:
    total_events: int = 0
    component_counts: dict[str, int] = field(default_factory=dict)
    status_counts: dict[str, int] = field(default_factory=dict)
    error_count: int = 0
    error_components: dict[str, int] = field(default_factory=dict)


def compute_stats(events: Iterable[AnyMailEvent],
                  diagnostics: Iterable[LineDiagnostic] = ()) -> EventStats:
    """Consume an event stream and produce aggregated statistics."""
    component_counter = Counter()
    status_counter = Counter()
    total = 0

    for event in events:
        total += 1
        component_counter[event.component.value] += 1
        status = getattr(event, "status", None)
        if status:
            status_counter[status] += 1

    error_counter = Counter(d.component or "unknown" for d in diagnostics)

    return EventStats(
        total_events=total,
        component_counts=dict(component_counter.most_common()),
        status_counts=dict(status_counter.most_common()),
        error_count=sum(error_counter.values()),
        error_components=dict(error_counter.most_common()),
    )


def format_stats_text(stats: EventStats) -> str:
    """Human-readable stats summary."""
    lines = [f"Total events: {stats.total_events}", ""]

    lines.append("Events per component:")
    for component, count in stats.component_counts.items():
        lines.append(f"  {component:15s} {count}")
    lines.append("")

    lines.append("Delivery statuses:")
    for status, count in stats.status_counts.items():
        lines.append(f"  {status:15s} {count}")
    lines.append("")

    if stats.error_count:
        lines.append(f"Unparseable lines: {stats.error_count}")
        for component, count in stats.error_components.items():
            lines.append(f"  {component:15s} {count}")
    else:
        lines.append("No unparseable lines.")

    return "\n".join(lines)


def format_stats_json(stats: EventStats) -> str:
    """JSON stats output."""
    return json.dumps({
        "total_events": stats.total_events,
        "component_counts": stats.component_counts,
        "status_counts": stats.status_counts,
        "error_count": stats.error_count,
        "error_components": stats.error_components,
    }, indent=2)
