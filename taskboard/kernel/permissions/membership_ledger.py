"""
Membership ledger: the authoritative (board, user) -> role roster.

Invariants are enforced by the store, not by read-then-write in Python:
- (board_id, user_id) is the primary key; inserts ignore conflicts
- at most one Admin row per board (partial unique index)
- the last Admin is never deleted (conditional DELETE)
"""

import uuid
from typing import List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from taskboard.errors import FailedPrecondition, NotFound, PermissionDenied
from taskboard.kernel.models.board import BoardMember, BoardRole
from taskboard.kernel.permissions.policy import BoardAction, can_remove_member, is_allowed
from taskboard.logging_config import get_logger

logger = get_logger(__name__)


class MembershipLedger:
    """
    Reads and writes board_members rows.

    Methods never commit; callers own the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(BoardMember)
        if dialect == "sqlite":
            return sqlite.insert(BoardMember)
        raise NotImplementedError(f"conflict-ignoring insert not supported for {dialect}")

    async def add_member(
        self,
        board_id: uuid.UUID,
        user_id: uuid.UUID,
        role: BoardRole,
    ) -> bool:
        """
        Insert a membership row.

        An existing (board, user) row is left untouched, which lets racing
        invitation acceptances both succeed.

        Returns:
            True if a row was inserted, False if it already existed
        """
        stmt = self._insert().values(
            board_id=board_id,
            user_id=user_id,
            role=BoardRole(role).value,
        ).on_conflict_do_nothing()
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def role_of(self, board_id: uuid.UUID, user_id: uuid.UUID) -> Optional[BoardRole]:
        """Role of a user on a board, or None if not a member."""
        query = select(BoardMember.role).where(
            BoardMember.board_id == board_id,
            BoardMember.user_id == user_id,
        )
        result = await self.session.execute(query)
        role = result.scalar_one_or_none()
        return BoardRole(role) if role is not None else None

    async def require(
        self,
        board_id: uuid.UUID,
        user_id: uuid.UUID,
        action: BoardAction,
        message: str,
    ) -> BoardRole:
        """Return the caller's role, or raise PermissionDenied if the policy forbids the action."""
        role = await self.role_of(board_id, user_id)
        if not is_allowed(role, action):
            raise PermissionDenied(message)
        return role

    async def count_admins(self, board_id: uuid.UUID) -> int:
        query = select(func.count()).select_from(BoardMember).where(
            BoardMember.board_id == board_id,
            BoardMember.role == BoardRole.ADMIN.value,
        )
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def list_members(
        self,
        board_id: uuid.UUID,
        acting_user_id: uuid.UUID,
    ) -> List[BoardMember]:
        """Members ordered by role then user id. Only members may list."""
        await self.require(
            board_id,
            acting_user_id,
            BoardAction.LIST_MEMBERS,
            "access denied: not a member of this board",
        )
        query = select(BoardMember).where(
            BoardMember.board_id == board_id,
        ).order_by(BoardMember.role, BoardMember.user_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def remove_member(
        self,
        board_id: uuid.UUID,
        user_id: uuid.UUID,
        acting_user_id: uuid.UUID,
    ) -> None:
        """
        Remove a user from a board.

        Raises:
            PermissionDenied: acting user is not a member, or is neither Admin nor the target
            NotFound: target is not a member
            FailedPrecondition: target is the last Admin
        """
        acting_role = await self.role_of(board_id, acting_user_id)
        if acting_role is None:
            raise PermissionDenied("access denied: not a member or insufficient permissions")
        if not can_remove_member(acting_role, acting_user_id, user_id):
            raise PermissionDenied("only Admin or the user themselves can remove a user")

        target_role = await self.role_of(board_id, user_id)
        if target_role is None:
            raise NotFound("user not a member of this board")
        if target_role == BoardRole.ADMIN and await self.count_admins(board_id) <= 1:
            raise FailedPrecondition("cannot remove the last Admin")

        # Re-check the Admin count inside the DELETE so a concurrent removal
        # cannot leave the board without an Admin.
        admins = aliased(BoardMember)
        other_admins = select(func.count()).select_from(admins).where(
            admins.board_id == board_id,
            admins.role == BoardRole.ADMIN.value,
            admins.user_id != user_id,
        ).scalar_subquery()
        stmt = delete(BoardMember).where(
            BoardMember.board_id == board_id,
            BoardMember.user_id == user_id,
            or_(BoardMember.role != BoardRole.ADMIN.value, other_admins > 0),
        )
        result = await self.session.execute(
            stmt,
            execution_options={"synchronize_session": False},
        )
        if result.rowcount == 0:
            if await self.role_of(board_id, user_id) is None:
                raise NotFound("user not a member of this board")
            raise FailedPrecondition("cannot remove the last Admin")

        logger.info(
            "Member removed",
            extra={
                "board_id": str(board_id),
                "user_id": str(user_id),
                "removed_by": str(acting_user_id),
            },
        )
