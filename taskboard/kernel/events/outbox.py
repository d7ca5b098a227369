"""
Transactional outbox and its relay.

OutboxStore.record() adds a row in the caller's transaction, so the event
exists if and only if the state change committed. OutboxRelay delivers
pending rows to their topic, retrying until every subscriber succeeds or
the attempt limit is reached.
"""

import asyncio
import uuid
from functools import lru_cache
from typing import Dict, List, Mapping

from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.kernel.events.topic import DeliveryError, Topic, board_deleted_topic
from taskboard.kernel.models.outbox import OutboxEvent, OutboxStatus
from taskboard.logging_config import get_logger

logger = get_logger(__name__)


class OutboxStore:
    """
    Writes outbox rows inside the caller's transaction.

    Usage:
        outbox = OutboxStore(session)
        row = outbox.record(board_deleted_topic, BoardDeletedEvent(board_id=str(board.id)))
        await session.commit()
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def record(self, topic: Topic, event: BaseModel) -> OutboxEvent:
        row = OutboxEvent(
            id=uuid.uuid4(),
            topic=topic.name,
            payload=event.model_dump(mode="json"),
            status=OutboxStatus.PENDING.value,
            attempts=0,
        )
        self.session.add(row)
        # Caller commits
        return row

    async def pending(self, limit: int) -> List[OutboxEvent]:
        """Oldest pending rows first."""
        query = select(OutboxEvent).where(
            OutboxEvent.status == OutboxStatus.PENDING.value,
        ).order_by(OutboxEvent.created_at, OutboxEvent.id).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())


class OutboxRelay:
    """Delivers outbox rows to in-process topics. Delivery is at-least-once."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        topics: Mapping[str, Topic],
        max_attempts: int = 10,
        batch_size: int = 50,
        poll_interval: float = 5.0,
    ):
        self.session_maker = session_maker
        self.topics: Dict[str, Topic] = dict(topics)
        self.max_attempts = max_attempts
        self.batch_size = batch_size
        self.poll_interval = poll_interval

    async def deliver(self, event_id: uuid.UUID) -> bool:
        """
        Deliver one outbox row if it is still pending.

        Returns:
            True if the row was delivered by this call, False if it was
            no longer pending (already sent, dead or unknown)

        Raises:
            DeliveryError: a subscriber failed; the failure is recorded and
                the row stays pending until max_attempts is reached
        """
        async with self.session_maker() as session:
            row = await session.get(OutboxEvent, event_id)
            if row is None or row.status != OutboxStatus.PENDING.value:
                return False

            topic = self.topics.get(row.topic)
            if topic is None:
                self._mark_dead(row, f"no topic named {row.topic!r}")
                await session.commit()
                return False

            try:
                event = topic.parse(row.payload)
            except ValidationError as e:
                self._mark_dead(row, f"malformed payload: {e}")
                await session.commit()
                return False

            row.attempts += 1
            try:
                await topic.publish(event)
            except DeliveryError as e:
                row.last_error = str(e)
                if row.attempts >= self.max_attempts:
                    self._mark_dead(row, str(e))
                else:
                    logger.warning(
                        "Outbox delivery failed, will retry",
                        extra={
                            "event_id": str(row.id),
                            "topic": row.topic,
                            "attempts": row.attempts,
                        },
                    )
                await session.commit()
                raise

            row.status = OutboxStatus.SENT.value
            row.last_error = None
            await session.commit()

        logger.info("Outbox event delivered", extra={"event_id": str(event_id), "topic": topic.name})
        return True

    def _mark_dead(self, row: OutboxEvent, reason: str) -> None:
        row.status = OutboxStatus.DEAD.value
        row.last_error = reason
        logger.error(
            "Outbox event abandoned",
            extra={
                "event_id": str(row.id),
                "topic": row.topic,
                "attempts": row.attempts,
                "reason": reason,
            },
        )

    async def publish_pending(self) -> int:
        """
        Deliver one batch of pending rows, oldest first.

        Returns:
            Number of rows delivered
        """
        async with self.session_maker() as session:
            ids = [row.id for row in await OutboxStore(session).pending(self.batch_size)]

        delivered = 0
        for event_id in ids:
            try:
                if await self.deliver(event_id):
                    delivered += 1
            except DeliveryError:
                # Recorded on the row; retried on a later pass
                continue
        return delivered

    async def run(self) -> None:
        """Poll for pending rows until cancelled."""
        logger.info("Outbox relay started", extra={"poll_interval": self.poll_interval})
        try:
            while True:
                try:
                    await self.publish_pending()
                except SQLAlchemyError:
                    logger.exception("Outbox relay pass failed")
                await asyncio.sleep(self.poll_interval)
        finally:
            logger.info("Outbox relay stopped")


@lru_cache
def get_outbox_relay() -> OutboxRelay:
    """Relay over the board store's outbox."""
    from taskboard.config import get_settings
    from taskboard.database import board_session_maker

    settings = get_settings()
    return OutboxRelay(
        board_session_maker,
        {board_deleted_topic.name: board_deleted_topic},
        max_attempts=settings.outbox_max_attempts,
        batch_size=settings.outbox_batch_size,
        poll_interval=settings.outbox_poll_interval_seconds,
    )
