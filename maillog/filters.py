"""Filter predicates for mail events — component, queue id, recency window."""

import re
from datetime import timedelta
from typing import Callable

from maillog.models import AnyMailEvent

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhd]?)\s*$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(text: str) -> timedelta:
    """``90`` / ``90s`` / ``15m`` / ``2h`` / ``1d`` -> timedelta.

    Raises ValueError for anything else.
    """
    match = _DURATION_RE.match(text)
    if not match:
        raise ValueError(f"Invalid duration: {text!r}")
    amount, unit = match.groups()
    return timedelta(seconds=float(amount) * _UNIT_SECONDS[unit])


def filter_by_component(event: AnyMailEvent, component: str) -> bool:
    return event.component.value == component


def filter_by_queue_id(event: AnyMailEvent, queue_id: str) -> bool:
    return event.queue_id == queue_id


def build_filter_chain(args) -> Callable[[AnyMailEvent], bool]:
    """Combine all active filters from parsed args into a single callable.

    Returns a function that ANDs all active predicates together. The recency
    window is applied by the store, not here.
    """
    predicates = []

    if getattr(args, "component", None):
        component = args.component
        predicates.append(lambda event, c=component: filter_by_component(event, c))

    if getattr(args, "queue_id", None):
        queue_id = args.queue_id
        predicates.append(lambda event, q=queue_id: filter_by_queue_id(event, q))

    if not predicates:
        return lambda event: True

    def combined(event: AnyMailEvent) -> bool:
        return all(p(event) for p in predicates)

    return combined
