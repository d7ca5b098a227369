"""
FastAPI dependencies for authentication, database sessions and the
collaborators injected into services.
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.config import get_settings
from taskboard.database import board_session_maker, get_board_db, get_task_db, get_user_db
from taskboard.errors import Unauthenticated
from taskboard.kernel.events.outbox import OutboxRelay, get_outbox_relay
from taskboard.kernel.identity.tokens import TokenManager, get_token_manager
from taskboard.kernel.permissions.membership_checker import (
    HttpMembershipChecker,
    LedgerMembershipChecker,
    MembershipChecker,
)


# Security scheme
security = HTTPBearer(auto_error=False)


UserDb = Annotated[AsyncSession, Depends(get_user_db)]
BoardDb = Annotated[AsyncSession, Depends(get_board_db)]
TaskDb = Annotated[AsyncSession, Depends(get_task_db)]
Tokens = Annotated[TokenManager, Depends(get_token_manager)]


async def get_bearer_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> str:
    """Raw bearer token, or 401."""
    if not credentials or not credentials.credentials:
        raise Unauthenticated("authentication required")
    return credentials.credentials


BearerToken = Annotated[str, Depends(get_bearer_token)]


async def get_current_user_id(token: BearerToken, tokens: Tokens) -> uuid.UUID:
    """Authenticated user id from the bearer token."""
    return tokens.validate(token)


CurrentUserId = Annotated[uuid.UUID, Depends(get_current_user_id)]


def get_membership_checker(token: BearerToken, user_id: CurrentUserId) -> MembershipChecker:
    """
    Membership checker for the task registry.

    Calls the board service over HTTP when MEMBERSHIP_SERVICE_URL is set,
    otherwise reads the board store in-process.
    """
    settings = get_settings()
    if settings.membership_service_url:
        return HttpMembershipChecker(
            settings.membership_service_url,
            token=token,
            user_id=user_id,
            timeout=settings.membership_request_timeout_seconds,
        )
    return LedgerMembershipChecker(board_session_maker)


Membership = Annotated[MembershipChecker, Depends(get_membership_checker)]


def get_relay() -> OutboxRelay:
    return get_outbox_relay()


Relay = Annotated[OutboxRelay, Depends(get_relay)]


def get_request_id(request: Request) -> Optional[str]:
    """Get request correlation ID (set by RequestIdMiddleware)."""
    return getattr(request.state, "request_id", None)
