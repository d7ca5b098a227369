"""Unit tests for the in-process and HTTP membership checkers."""

import uuid

import httpx
import pytest

from taskboard.errors import Internal, Unauthenticated
from taskboard.kernel.models.board import BoardRole
from taskboard.kernel.permissions.membership_checker import HttpMembershipChecker

USER_ID = uuid.uuid4()
BOARD_ID = uuid.uuid4()


def _checker(handler) -> HttpMembershipChecker:
    return HttpMembershipChecker(
        "http://boards.internal/",
        token="caller-token",
        user_id=USER_ID,
        transport=httpx.MockTransport(handler),
    )


class TestLedgerMembershipChecker:

    @pytest.mark.asyncio
    async def test_reads_roles_from_board_store(
        self, membership_checker, board, admin_id, member_id, viewer_id
    ):
        assert await membership_checker.role_of(board.id, admin_id) == BoardRole.ADMIN
        assert await membership_checker.role_of(board.id, member_id) == BoardRole.MEMBER
        assert await membership_checker.role_of(board.id, viewer_id) == BoardRole.VIEWER
        assert await membership_checker.role_of(board.id, uuid.uuid4()) is None


class TestHttpMembershipChecker:

    @pytest.mark.asyncio
    async def test_forwards_bearer_token_and_parses_role(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"is_member": True, "role": "Member"})

        role = await _checker(handler).role_of(BOARD_ID, USER_ID)

        assert role == BoardRole.MEMBER
        assert seen == {
            "path": f"/board/{BOARD_ID}/membership",
            "auth": "Bearer caller-token",
        }

    @pytest.mark.asyncio
    async def test_non_member(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"is_member": False})

        assert await _checker(handler).role_of(BOARD_ID, USER_ID) is None

    @pytest.mark.asyncio
    async def test_transport_failure_is_internal(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(Internal):
            await _checker(handler).role_of(BOARD_ID, USER_ID)

    @pytest.mark.asyncio
    async def test_server_error_is_internal(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"detail": "down"})

        with pytest.raises(Internal):
            await _checker(handler).role_of(BOARD_ID, USER_ID)

    @pytest.mark.asyncio
    async def test_rejected_token_is_unauthenticated(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"detail": "invalid or expired token"})

        with pytest.raises(Unauthenticated):
            await _checker(handler).role_of(BOARD_ID, USER_ID)

    @pytest.mark.asyncio
    async def test_malformed_body_is_internal(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"is_member": True, "role": "Owner"})

        with pytest.raises(Internal):
            await _checker(handler).role_of(BOARD_ID, USER_ID)

    @pytest.mark.asyncio
    async def test_answers_only_for_token_owner(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"is_member": True, "role": "Admin"})

        with pytest.raises(ValueError):
            await _checker(handler).role_of(BOARD_ID, uuid.uuid4())
