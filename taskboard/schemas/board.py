"""
Board, membership and invitation schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BoardCreate(BaseModel):
    """Board creation request."""

    name: str = ""
    description: Optional[str] = Field(None, max_length=10000)


class BoardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_by: uuid.UUID
    created_at: datetime


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: uuid.UUID
    role: str


class MemberListResponse(BaseModel):
    members: List[MemberResponse]


class MembershipResponse(BaseModel):
    """The caller's own standing on a board."""

    is_member: bool
    role: Optional[str] = None


class InviteRequest(BaseModel):
    """Invitation request. Role must be Member or Viewer."""

    board_id: Optional[uuid.UUID] = None
    invitee_id: Optional[uuid.UUID] = None
    role: str = ""


class InviteResponse(BaseModel):
    invitation_id: uuid.UUID


class InvitationDecision(BaseModel):
    """Accept or reject an invitation. Action is 'Accepted' or 'Rejected'."""

    invitation_id: Optional[uuid.UUID] = None
    action: str = ""


class InvitationDecisionResponse(BaseModel):
    board_id: uuid.UUID


class InvitationResponse(BaseModel):
    invitation_id: uuid.UUID
    board_id: uuid.UUID
    board_name: str
    inviter_id: uuid.UUID
    role: str
    status: str
    created_at: datetime


class InvitationListResponse(BaseModel):
    invitations: List[InvitationResponse]
