"""Mail event variants, one frozen dataclass per Postfix subsystem.

The variants share a small capability surface (``component``, ``event_time``,
``record_type``, ``queue_id``) described by :class:`MailEvent`; everything
else is subsystem-specific. ``AnyMailEvent`` is the closed union.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, ClassVar, Protocol, Union


class Component(str, Enum):
    CONNECTION = "connection"
    PICKUP = "pickup"
    CLEANUP = "cleanup"
    QUEUE_MANAGER = "queue-manager"
    RELAY = "relay"
    LOCAL_DELIVERY = "local-delivery"


class ConnectionRecordType(IntEnum):
    CONNECT = 0
    DISCONNECT = 1
    LOST_AFTER_CONNECT = 2
    CLIENT_IDENTIFIED = 3


class QueueRecordType(IntEnum):
    QUEUED = 0
    REMOVED = 1


class MailEvent(Protocol):
    component: ClassVar[Component]
    event_time: datetime
    record_type: int
    queue_id: str | None


@dataclass(frozen=True)
class ConnectionEvent:
    component: ClassVar[Component] = Component.CONNECTION

    event_time: datetime
    hostname: str
    pid: int | None
    record_type: int
    client_name: str | None = None
    client_ip: str | None = None
    queue_id: str | None = None


@dataclass(frozen=True)
class PickupEvent:
    component: ClassVar[Component] = Component.PICKUP

    event_time: datetime
    hostname: str
    pid: int | None
    queue_id: str
    uid: str
    sender: str | None = None
    record_type: int = 0


@dataclass(frozen=True)
class CleanupEvent:
    component: ClassVar[Component] = Component.CLEANUP

    event_time: datetime
    hostname: str
    pid: int | None
    queue_id: str
    message_id: str
    record_type: int = 0


@dataclass(frozen=True)
class QueueManagerEvent:
    component: ClassVar[Component] = Component.QUEUE_MANAGER

    event_time: datetime
    hostname: str
    pid: int | None
    queue_id: str
    record_type: int = QueueRecordType.QUEUED
    sender: str | None = None
    size: int | None = None
    recipient_count: int | None = None


@dataclass(frozen=True)
class RelayEvent:
    component: ClassVar[Component] = Component.RELAY

    event_time: datetime
    hostname: str
    pid: int | None
    queue_id: str
    to: str | None = None
    relay: str | None = None
    delay: int | None = None
    status: str | None = None
    reply_code: int | None = None
    status_message: str | None = None
    record_type: int = 0


@dataclass(frozen=True)
class LocalDeliveryEvent:
    component: ClassVar[Component] = Component.LOCAL_DELIVERY

    event_time: datetime
    hostname: str
    pid: int | None
    queue_id: str
    to: str | None = None
    original_to: str | None = None
    relay: str | None = None
    delay: float | None = None
    delays: str | None = None
    dsn: str | None = None
    status: str | None = None
    delivery_message: str | None = None
    record_type: int = 0


AnyMailEvent = Union[
    ConnectionEvent,
    PickupEvent,
    CleanupEvent,
    QueueManagerEvent,
    RelayEvent,
    LocalDeliveryEvent,
]


def event_to_dict(event: AnyMailEvent) -> dict[str, Any]:
    """Convert an event to a JSON-ready dict, dropping None values."""
    data = {k: v for k, v in asdict(event).items() if v is not None}
    data["event_time"] = event.event_time.isoformat()
    data["record_type"] = int(event.record_type)
    return {"component": event.component.value, **data}
