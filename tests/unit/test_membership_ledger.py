"""Unit tests for the membership ledger."""

import uuid

import pytest

from taskboard.errors import FailedPrecondition, NotFound, PermissionDenied
from taskboard.kernel.models.board import BoardRole
from taskboard.kernel.permissions.membership_ledger import MembershipLedger


class TestAddMember:

    @pytest.mark.asyncio
    async def test_existing_membership_is_left_untouched(self, board_session, board, member_id):
        ledger = MembershipLedger(board_session)

        inserted = await ledger.add_member(board.id, member_id, BoardRole.VIEWER)
        await board_session.commit()

        assert inserted is False
        assert await ledger.role_of(board.id, member_id) == BoardRole.MEMBER

    @pytest.mark.asyncio
    async def test_second_admin_is_not_inserted(self, board_session, board):
        ledger = MembershipLedger(board_session)
        newcomer = uuid.uuid4()

        inserted = await ledger.add_member(board.id, newcomer, BoardRole.ADMIN)
        await board_session.commit()

        assert inserted is False
        assert await ledger.role_of(board.id, newcomer) is None
        assert await ledger.count_admins(board.id) == 1

    @pytest.mark.asyncio
    async def test_role_of_non_member_is_none(self, board_session, board):
        ledger = MembershipLedger(board_session)

        assert await ledger.role_of(board.id, uuid.uuid4()) is None


class TestListMembers:

    @pytest.mark.asyncio
    async def test_ordered_by_role_then_user(self, board_session, board, admin_id, member_id, viewer_id):
        ledger = MembershipLedger(board_session)

        members = await ledger.list_members(board.id, viewer_id)

        assert [(m.user_id, m.role) for m in members] == [
            (admin_id, "Admin"),
            (member_id, "Member"),
            (viewer_id, "Viewer"),
        ]

    @pytest.mark.asyncio
    async def test_non_member_cannot_list(self, board_session, board):
        ledger = MembershipLedger(board_session)

        with pytest.raises(PermissionDenied):
            await ledger.list_members(board.id, uuid.uuid4())


class TestRemoveMember:

    @pytest.mark.asyncio
    async def test_admin_removes_viewer(self, board_session, board, admin_id, viewer_id):
        ledger = MembershipLedger(board_session)

        await ledger.remove_member(board.id, viewer_id, admin_id)
        await board_session.commit()

        assert await ledger.role_of(board.id, viewer_id) is None

    @pytest.mark.asyncio
    async def test_member_removes_self(self, board_session, board, member_id):
        ledger = MembershipLedger(board_session)

        await ledger.remove_member(board.id, member_id, member_id)
        await board_session.commit()

        assert await ledger.role_of(board.id, member_id) is None

    @pytest.mark.asyncio
    async def test_member_cannot_remove_others(self, board_session, board, member_id, viewer_id):
        ledger = MembershipLedger(board_session)

        with pytest.raises(PermissionDenied):
            await ledger.remove_member(board.id, viewer_id, member_id)

    @pytest.mark.asyncio
    async def test_non_member_is_denied_before_target_lookup(self, board_session, board):
        ledger = MembershipLedger(board_session)
        outsider = uuid.uuid4()

        with pytest.raises(PermissionDenied):
            await ledger.remove_member(board.id, uuid.uuid4(), outsider)

    @pytest.mark.asyncio
    async def test_missing_target_is_not_found(self, board_session, board, admin_id):
        ledger = MembershipLedger(board_session)

        with pytest.raises(NotFound):
            await ledger.remove_member(board.id, uuid.uuid4(), admin_id)

    @pytest.mark.asyncio
    async def test_sole_admin_cannot_leave(self, board_session, board, admin_id):
        ledger = MembershipLedger(board_session)

        with pytest.raises(FailedPrecondition):
            await ledger.remove_member(board.id, admin_id, admin_id)

        assert await ledger.count_admins(board.id) == 1
        assert await ledger.role_of(board.id, admin_id) == BoardRole.ADMIN

    @pytest.mark.asyncio
    async def test_admin_count_survives_any_removal_sequence(
        self, board_session, board, admin_id, member_id, viewer_id
    ):
        ledger = MembershipLedger(board_session)

        for target, actor in (
            (viewer_id, viewer_id),
            (member_id, admin_id),
            (admin_id, admin_id),
        ):
            try:
                await ledger.remove_member(board.id, target, actor)
            except FailedPrecondition:
                pass
            await board_session.commit()
            assert await ledger.count_admins(board.id) >= 1

        assert await ledger.count_admins(board.id) == 1
