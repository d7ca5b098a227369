"""
Board registry: board metadata plus the membership and invitation
operations that hang off it.
"""

import uuid
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.database import commit_or_raise
from taskboard.errors import Internal, InvalidArgument, NotFound
from taskboard.kernel.events.event_types import BoardDeletedEvent
from taskboard.kernel.events.outbox import OutboxRelay, OutboxStore
from taskboard.kernel.events.topic import DeliveryError, board_deleted_topic
from taskboard.kernel.models.board import Board, BoardMember, BoardRole
from taskboard.kernel.permissions.membership_ledger import MembershipLedger
from taskboard.kernel.permissions.policy import BoardAction
from taskboard.kernel.boards.invitation_workflow import InvitationWorkflow
from taskboard.logging_config import get_logger

logger = get_logger(__name__)


class BoardRegistry:
    """
    Service for board lifecycle.

    Usage:
        registry = BoardRegistry(session, relay)
        board = await registry.create("Roadmap", None, creator_id=user_id)
    """

    def __init__(self, session: AsyncSession, relay: Optional[OutboxRelay] = None):
        self.session = session
        self.relay = relay
        self.ledger = MembershipLedger(session)
        self.invitations = InvitationWorkflow(session)

    async def create(
        self,
        name: str,
        description: Optional[str],
        creator_id: uuid.UUID,
    ) -> Board:
        """
        Create a board with its creator as sole Admin.

        The board row and the Admin membership commit together or not at all.
        """
        if not name:
            raise InvalidArgument("name is required")

        board = Board(
            id=uuid.uuid4(),
            name=name,
            description=description or None,
            created_by=creator_id,
        )
        try:
            self.session.add(board)
            await self.session.flush()
            await self.ledger.add_member(board.id, creator_id, BoardRole.ADMIN)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise Internal("failed to create board") from e
        await commit_or_raise(self.session, "failed to create board")

        logger.info(
            "Board created",
            extra={"board_id": str(board.id), "created_by": str(creator_id)},
        )
        return board

    async def get(self, board_id: uuid.UUID, acting_user_id: uuid.UUID) -> Board:
        await self.ledger.require(
            board_id,
            acting_user_id,
            BoardAction.VIEW_BOARD,
            "access denied: not a member of this board",
        )
        board = await self.session.get(Board, board_id)
        if board is None:
            raise NotFound("board not found")
        return board

    async def membership(
        self,
        board_id: uuid.UUID,
        acting_user_id: uuid.UUID,
    ) -> Optional[BoardRole]:
        """The caller's own role, None when not a member."""
        return await self.ledger.role_of(board_id, acting_user_id)

    async def list_members(
        self,
        board_id: uuid.UUID,
        acting_user_id: uuid.UUID,
    ) -> List[BoardMember]:
        return await self.ledger.list_members(board_id, acting_user_id)

    async def remove_member(
        self,
        board_id: uuid.UUID,
        user_id: uuid.UUID,
        acting_user_id: uuid.UUID,
    ) -> None:
        try:
            await self.ledger.remove_member(board_id, user_id, acting_user_id)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise Internal("failed to remove user") from e
        await commit_or_raise(self.session, "failed to remove user")

    async def delete(self, board_id: uuid.UUID, acting_user_id: uuid.UUID) -> None:
        """
        Delete a board and announce it on the board-deleted topic.

        Memberships and invitations go with the board row (FK cascade). The
        BoardDeleted event is recorded in the outbox in the same transaction,
        then delivered before returning. Without a relay the event waits in
        the outbox for the background relay.

        Raises:
            PermissionDenied: caller is not the board's Admin
            NotFound: board row already gone
            Internal: storage failure, or delivery failed (the outbox keeps
                the event for the relay to retry)
        """
        await self.ledger.require(
            board_id,
            acting_user_id,
            BoardAction.DELETE_BOARD,
            "only Admin can delete a board",
        )

        try:
            result = await self.session.execute(
                delete(Board).where(Board.id == board_id),
                execution_options={"synchronize_session": False},
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise Internal("failed to delete board") from e
        if result.rowcount == 0:
            await self.session.rollback()
            raise NotFound("board not found")

        row = OutboxStore(self.session).record(
            board_deleted_topic,
            BoardDeletedEvent(board_id=str(board_id)),
        )
        await commit_or_raise(self.session, "failed to delete board")

        logger.info(
            "Board deleted",
            extra={"board_id": str(board_id), "deleted_by": str(acting_user_id)},
        )

        if self.relay is None:
            return
        try:
            await self.relay.deliver(row.id)
        except DeliveryError as e:
            raise Internal("failed to publish board deletion event") from e
