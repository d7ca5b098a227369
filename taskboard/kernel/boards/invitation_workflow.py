"""
Invitation workflow.

Pending -> Accepted | Rejected. Both outcomes are terminal.
"""

import uuid
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.database import commit_or_raise
from taskboard.errors import FailedPrecondition, Internal, InvalidArgument, NotFound
from taskboard.kernel.models.board import Board, BoardRole
from taskboard.kernel.models.invitation import Invitation, InvitationStatus
from taskboard.kernel.permissions.membership_ledger import MembershipLedger
from taskboard.kernel.permissions.policy import BoardAction
from taskboard.logging_config import get_logger

logger = get_logger(__name__)

_TRANSITIONS: Dict[InvitationStatus, Set[InvitationStatus]] = {
    InvitationStatus.PENDING: {InvitationStatus.ACCEPTED, InvitationStatus.REJECTED},
    InvitationStatus.ACCEPTED: set(),
    InvitationStatus.REJECTED: set(),
}

_INVITABLE_ROLES = frozenset({BoardRole.MEMBER, BoardRole.VIEWER})


def can_transition(from_status: str, to_status: str) -> bool:
    return InvitationStatus(to_status) in _TRANSITIONS[InvitationStatus(from_status)]


def _parse_status(value: str, message: str) -> InvitationStatus:
    try:
        return InvitationStatus(value)
    except ValueError:
        raise InvalidArgument(message) from None


class InvitationWorkflow:
    """Creates, resolves and lists board invitations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.ledger = MembershipLedger(session)

    async def create(
        self,
        board_id: Optional[uuid.UUID],
        inviter_id: uuid.UUID,
        invitee_id: Optional[uuid.UUID],
        role: Optional[str],
    ) -> Invitation:
        """
        Invite a user to a board.

        Raises:
            InvalidArgument: missing field, or role other than Member/Viewer
            PermissionDenied: inviter is not the board's Admin
        """
        if board_id is None or invitee_id is None or not role:
            raise InvalidArgument("board_id, invitee_id, and role are required")

        await self.ledger.require(
            board_id,
            inviter_id,
            BoardAction.INVITE_USER,
            "only Admin can invite users",
        )

        if role not in {r.value for r in _INVITABLE_ROLES}:
            raise InvalidArgument("role must be 'Member' or 'Viewer'")

        invitation = Invitation(
            id=uuid.uuid4(),
            board_id=board_id,
            inviter_id=inviter_id,
            invitee_id=invitee_id,
            role=role,
            status=InvitationStatus.PENDING.value,
        )
        self.session.add(invitation)
        await commit_or_raise(self.session, "failed to create invitation")

        logger.info(
            "Invitation created",
            extra={
                "invitation_id": str(invitation.id),
                "board_id": str(board_id),
                "invitee_id": str(invitee_id),
                "role": role,
            },
        )
        return invitation

    async def resolve(
        self,
        invitation_id: Optional[uuid.UUID],
        acting_user_id: uuid.UUID,
        decision: Optional[str],
    ) -> uuid.UUID:
        """
        Accept or reject an invitation addressed to the acting user.

        Acceptance adds the membership and flips the status in one
        transaction. The status flip only matches a Pending row, so a
        concurrent second resolution fails and its membership insert is
        rolled back.

        Returns:
            The invitation's board id

        Raises:
            InvalidArgument: missing field or decision not Accepted/Rejected
            NotFound: no such invitation for this user
            FailedPrecondition: invitation already resolved
        """
        if invitation_id is None or not decision:
            raise InvalidArgument("invitation_id and action are required")

        target = _parse_status(decision, "action must be 'Accepted' or 'Rejected'")
        if target == InvitationStatus.PENDING:
            raise InvalidArgument("action must be 'Accepted' or 'Rejected'")

        query = select(Invitation).where(
            Invitation.id == invitation_id,
            Invitation.invitee_id == acting_user_id,
        )
        result = await self.session.execute(query)
        invitation = result.scalar_one_or_none()
        if invitation is None:
            raise NotFound("invitation not found or not for this user")
        if not can_transition(invitation.status, target):
            raise FailedPrecondition("invitation already processed")

        board_id = invitation.board_id
        try:
            if target == InvitationStatus.ACCEPTED:
                await self.ledger.add_member(board_id, acting_user_id, BoardRole(invitation.role))

            flipped = await self.session.execute(
                update(Invitation)
                .where(
                    Invitation.id == invitation_id,
                    Invitation.status == InvitationStatus.PENDING.value,
                )
                .values(status=target.value)
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise Internal("failed to update invitation status") from e

        if flipped.rowcount != 1:
            await self.session.rollback()
            raise FailedPrecondition("invitation already processed")

        await commit_or_raise(self.session, "failed to update invitation status")

        logger.info(
            "Invitation resolved",
            extra={
                "invitation_id": str(invitation_id),
                "board_id": str(board_id),
                "status": target.value,
            },
        )
        return board_id

    async def list_for_invitee(
        self,
        acting_user_id: uuid.UUID,
        status: str,
    ) -> List[Tuple[Invitation, str]]:
        """Invitations addressed to the caller with a status, with board names, newest first."""
        status_value = _parse_status(
            status,
            "status must be 'Pending', 'Accepted', or 'Rejected'",
        )
        query = (
            select(Invitation, Board.name)
            .join(Board, Invitation.board_id == Board.id)
            .where(
                Invitation.invitee_id == acting_user_id,
                Invitation.status == status_value.value,
            )
            .order_by(Invitation.created_at.desc(), Invitation.id)
        )
        result = await self.session.execute(query)
        return [(invitation, board_name) for invitation, board_name in result.all()]
