"""
Event delivery between services.

The board store records events in its outbox; the relay delivers them to
in-process topics.
"""

from taskboard.kernel.events.event_types import BOARD_DELETED, BoardDeletedEvent
from taskboard.kernel.events.topic import DeliveryError, Topic, board_deleted_topic
from taskboard.kernel.events.outbox import OutboxRelay, OutboxStore, get_outbox_relay

__all__ = [
    "BOARD_DELETED",
    "BoardDeletedEvent",
    "DeliveryError",
    "Topic",
    "board_deleted_topic",
    "OutboxRelay",
    "OutboxStore",
    "get_outbox_relay",
]
