"""
Transactional outbox for events leaving the board store.

A row is written in the same transaction as the state change it announces,
then relayed to the topic until delivery succeeds.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, Index, Integer, JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.kernel.models.base import BoardStoreBase, TimestampMixin, generate_uuid


class OutboxStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    DEAD = "dead"


class OutboxEvent(BoardStoreBase, TimestampMixin):
    """An event awaiting (or done with) delivery."""

    __tablename__ = "outbox_events"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    topic: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
    )
    status: Mapped[OutboxStatus] = mapped_column(
        String(10),
        nullable=False,
        default=OutboxStatus.PENDING.value,
    )
    attempts: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    last_error: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'sent', 'dead')",
            name="ck_outbox_events_status",
        ),
        Index("ix_outbox_events_status_created", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<OutboxEvent {self.id} topic={self.topic} status={self.status} attempts={self.attempts}>"
