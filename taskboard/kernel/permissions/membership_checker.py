"""
Membership checking capability used by the task registry.

The task store holds no roster of its own. It asks a MembershipChecker for
the acting user's role on a board: either in-process against the board
store, or over HTTP against the board service's membership endpoint.
"""

import uuid
from typing import Optional, Protocol

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.errors import Internal, Unauthenticated
from taskboard.kernel.models.board import BoardRole
from taskboard.kernel.permissions.membership_ledger import MembershipLedger
from taskboard.logging_config import get_logger

logger = get_logger(__name__)


class MembershipChecker(Protocol):
    """Answers "what role does this user hold on this board?"."""

    async def role_of(self, board_id: uuid.UUID, user_id: uuid.UUID) -> Optional[BoardRole]:
        """Role of the user, or None if not a member."""
        ...


class LedgerMembershipChecker:
    """Reads the board store directly, each check in its own short session."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def role_of(self, board_id: uuid.UUID, user_id: uuid.UUID) -> Optional[BoardRole]:
        try:
            async with self.session_maker() as session:
                return await MembershipLedger(session).role_of(board_id, user_id)
        except SQLAlchemyError as e:
            logger.exception("Membership lookup failed", extra={"board_id": str(board_id)})
            raise Internal("failed to check membership") from e


class HttpMembershipChecker:
    """
    Calls GET /board/{board_id}/membership on the board service.

    The endpoint answers for the token's owner, so this checker can only
    answer for the user the bearer token was issued to.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        user_id: uuid.UUID,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.user_id = user_id
        self.timeout = timeout
        self.transport = transport

    async def role_of(self, board_id: uuid.UUID, user_id: uuid.UUID) -> Optional[BoardRole]:
        if user_id != self.user_id:
            raise ValueError("HttpMembershipChecker only answers for its token's user")

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.get(
                    f"/board/{board_id}/membership",
                    headers={"Authorization": f"Bearer {self.token}"},
                )
        except httpx.HTTPError as e:
            logger.warning(
                "Membership service unreachable",
                extra={"board_id": str(board_id), "error": str(e)},
            )
            raise Internal("failed to check membership") from e

        if response.status_code == 401:
            raise Unauthenticated("membership service rejected credentials")
        if response.status_code != 200:
            logger.warning(
                "Membership service error",
                extra={"board_id": str(board_id), "status_code": response.status_code},
            )
            raise Internal("failed to check membership")

        try:
            body = response.json()
            if not body.get("is_member"):
                return None
            return BoardRole(body["role"])
        except (ValueError, KeyError, AttributeError) as e:
            raise Internal("malformed membership response") from e
