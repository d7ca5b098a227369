"""
Event payload definitions using Pydantic for validation.

Payloads are stored as JSON in the outbox and parsed back before delivery.
"""

from pydantic import BaseModel, ConfigDict

BOARD_DELETED = "board-deleted"


class BoardDeletedEvent(BaseModel):
    """Announces that a board and its memberships are gone."""

    model_config = ConfigDict(frozen=True)

    board_id: str
