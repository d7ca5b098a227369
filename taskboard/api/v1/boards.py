"""
Board, membership and invitation endpoints.
"""

import uuid

from fastapi import APIRouter, status

from taskboard.api.deps import BoardDb, CurrentUserId, Relay
from taskboard.kernel.boards.board_registry import BoardRegistry
from taskboard.kernel.boards.invitation_workflow import InvitationWorkflow
from taskboard.schemas.board import (
    BoardCreate,
    BoardResponse,
    InvitationDecision,
    InvitationDecisionResponse,
    InvitationListResponse,
    InvitationResponse,
    InviteRequest,
    InviteResponse,
    MemberListResponse,
    MemberResponse,
    MembershipResponse,
)
from taskboard.schemas.common import MessageResponse

router = APIRouter()


@router.post("/board", response_model=BoardResponse, status_code=status.HTTP_201_CREATED)
async def create_board(data: BoardCreate, user_id: CurrentUserId, db: BoardDb):
    """Create a board; the caller becomes its Admin."""
    registry = BoardRegistry(db)
    board = await registry.create(data.name, data.description, creator_id=user_id)
    return BoardResponse.model_validate(board)


@router.post("/board/invite", response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
async def invite_user(data: InviteRequest, user_id: CurrentUserId, db: BoardDb):
    """Invite a user as Member or Viewer. Admin only."""
    workflow = InvitationWorkflow(db)
    invitation = await workflow.create(
        board_id=data.board_id,
        inviter_id=user_id,
        invitee_id=data.invitee_id,
        role=data.role,
    )
    return InviteResponse(invitation_id=invitation.id)


@router.patch("/board/invitation", response_model=InvitationDecisionResponse)
async def resolve_invitation(data: InvitationDecision, user_id: CurrentUserId, db: BoardDb):
    """Accept or reject an invitation addressed to the caller."""
    workflow = InvitationWorkflow(db)
    board_id = await workflow.resolve(data.invitation_id, user_id, data.action)
    return InvitationDecisionResponse(board_id=board_id)


@router.get("/invitations/{invitation_status}", response_model=InvitationListResponse)
async def list_invitations(invitation_status: str, user_id: CurrentUserId, db: BoardDb):
    """The caller's invitations with the given status, newest first."""
    workflow = InvitationWorkflow(db)
    rows = await workflow.list_for_invitee(user_id, invitation_status)
    return InvitationListResponse(
        invitations=[
            InvitationResponse(
                invitation_id=invitation.id,
                board_id=invitation.board_id,
                board_name=board_name,
                inviter_id=invitation.inviter_id,
                role=invitation.role,
                status=invitation.status,
                created_at=invitation.created_at,
            )
            for invitation, board_name in rows
        ]
    )


@router.get("/board/{board_id}", response_model=BoardResponse)
async def get_board(board_id: uuid.UUID, user_id: CurrentUserId, db: BoardDb):
    registry = BoardRegistry(db)
    board = await registry.get(board_id, user_id)
    return BoardResponse.model_validate(board)


@router.delete("/board/{board_id}", response_model=MessageResponse)
async def delete_board(board_id: uuid.UUID, user_id: CurrentUserId, db: BoardDb, relay: Relay):
    """
    Delete a board. Admin only.

    Tasks on the board are removed through the board-deleted topic.
    """
    registry = BoardRegistry(db, relay)
    await registry.delete(board_id, user_id)
    return MessageResponse(message="Board deleted successfully")


@router.get("/board/{board_id}/users", response_model=MemberListResponse)
async def list_members(board_id: uuid.UUID, user_id: CurrentUserId, db: BoardDb):
    registry = BoardRegistry(db)
    members = await registry.list_members(board_id, user_id)
    return MemberListResponse(
        members=[MemberResponse.model_validate(member) for member in members],
    )


@router.get("/board/{board_id}/membership", response_model=MembershipResponse)
async def check_membership(board_id: uuid.UUID, user_id: CurrentUserId, db: BoardDb):
    """The caller's own role on a board. Non-members get is_member=false."""
    registry = BoardRegistry(db)
    role = await registry.membership(board_id, user_id)
    if role is None:
        return MembershipResponse(is_member=False)
    return MembershipResponse(is_member=True, role=role.value)


@router.delete("/board/{board_id}/user/{member_id}", response_model=MessageResponse)
async def remove_member(
    board_id: uuid.UUID,
    member_id: uuid.UUID,
    user_id: CurrentUserId,
    db: BoardDb,
):
    """Remove a member. Admins may remove anyone, others only themselves."""
    registry = BoardRegistry(db)
    await registry.remove_member(board_id, member_id, acting_user_id=user_id)
    return MessageResponse(message="User removed successfully")
