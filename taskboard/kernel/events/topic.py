"""
In-process publish/subscribe topic.

Subscriptions are named; subscribing twice under the same name replaces the
handler, so registration at startup is idempotent.
"""

from typing import Any, Awaitable, Callable, Dict, Generic, List, Mapping, Type, TypeVar

from pydantic import BaseModel

from taskboard.kernel.events.event_types import BOARD_DELETED, BoardDeletedEvent
from taskboard.logging_config import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound=BaseModel)
Handler = Callable[[E], Awaitable[None]]


class DeliveryError(Exception):
    """One or more subscribers failed to handle an event."""

    def __init__(self, topic: str, failures: Mapping[str, BaseException]):
        self.topic = topic
        self.failures = dict(failures)
        details = "; ".join(f"{name}: {exc!r}" for name, exc in self.failures.items())
        super().__init__(f"delivery on {topic} failed for {details}")


class Topic(Generic[E]):
    """A named topic carrying one event type."""

    def __init__(self, name: str, event_type: Type[E]):
        self.name = name
        self.event_type = event_type
        self._subscriptions: Dict[str, Handler] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscriptions[name] = handler
        logger.debug("Subscription registered", extra={"topic": self.name, "subscription": name})

    def unsubscribe(self, name: str) -> None:
        self._subscriptions.pop(name, None)

    @property
    def subscriptions(self) -> List[str]:
        return list(self._subscriptions)

    def parse(self, payload: Dict[str, Any]) -> E:
        return self.event_type.model_validate(payload)

    async def publish(self, event: E) -> None:
        """
        Deliver an event to every subscriber.

        Every subscriber is attempted even if an earlier one fails.

        Raises:
            DeliveryError: naming each subscription that failed
        """
        failures: Dict[str, BaseException] = {}
        for name, handler in list(self._subscriptions.items()):
            try:
                await handler(event)
            except Exception as e:
                logger.warning(
                    "Subscriber failed",
                    extra={"topic": self.name, "subscription": name, "error": repr(e)},
                )
                failures[name] = e
        if failures:
            raise DeliveryError(self.name, failures)


board_deleted_topic: Topic[BoardDeletedEvent] = Topic(BOARD_DELETED, BoardDeletedEvent)
