"""Drain the board-deleted outbox once, e.g. after the task store was unreachable."""
import asyncio
import sys

from sqlalchemy import func, select

from taskboard.config import get_settings
from taskboard.database import board_session_maker, close_db, task_session_maker
from taskboard.kernel.events.outbox import get_outbox_relay
from taskboard.kernel.events.topic import board_deleted_topic
from taskboard.kernel.models.outbox import OutboxEvent
from taskboard.kernel.tasks.cascade import register_task_subscriptions
from taskboard.logging_config import configure_logging


async def count_by_status() -> dict:
    async with board_session_maker() as session:
        result = await session.execute(
            select(OutboxEvent.status, func.count()).group_by(OutboxEvent.status)
        )
        return {status: count for status, count in result.all()}


async def main() -> int:
    settings = get_settings()
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        service=f"{settings.project_name}-relay",
    )
    register_task_subscriptions(board_deleted_topic, task_session_maker)

    relay = get_outbox_relay()
    total = 0
    try:
        # Keep draining while full batches come back
        while True:
            delivered = await relay.publish_pending()
            total += delivered
            if delivered < relay.batch_size:
                break
        counts = await count_by_status()
    finally:
        await close_db()

    print(f"Delivered {total} event(s)")
    for status in sorted(counts):
        print(f"  {status}: {counts[status]}")
    return 1 if counts.get("pending") or counts.get("dead") else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
