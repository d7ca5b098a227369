"""
Pydantic schemas for API request/response validation.
"""

from taskboard.schemas.auth import (
    SignupRequest,
    LoginRequest,
    SignupResponse,
    TokenResponse,
)
from taskboard.schemas.board import (
    BoardCreate,
    BoardResponse,
    MemberResponse,
    MemberListResponse,
    MembershipResponse,
    InviteRequest,
    InviteResponse,
    InvitationDecision,
    InvitationDecisionResponse,
    InvitationResponse,
    InvitationListResponse,
)
from taskboard.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskResponse,
    TaskListResponse,
)
from taskboard.schemas.common import (
    ErrorResponse,
    MessageResponse,
    HealthResponse,
)

__all__ = [
    # Auth
    "SignupRequest",
    "LoginRequest",
    "SignupResponse",
    "TokenResponse",
    # Boards
    "BoardCreate",
    "BoardResponse",
    "MemberResponse",
    "MemberListResponse",
    "MembershipResponse",
    "InviteRequest",
    "InviteResponse",
    "InvitationDecision",
    "InvitationDecisionResponse",
    "InvitationResponse",
    "InvitationListResponse",
    # Tasks
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "TaskListResponse",
    # Common
    "ErrorResponse",
    "MessageResponse",
    "HealthResponse",
]
