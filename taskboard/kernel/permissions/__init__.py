"""Board membership and authorization."""

from taskboard.kernel.permissions.policy import (
    BoardAction,
    can_modify_task,
    can_remove_member,
    is_allowed,
)
from taskboard.kernel.permissions.membership_ledger import MembershipLedger
from taskboard.kernel.permissions.membership_checker import (
    HttpMembershipChecker,
    LedgerMembershipChecker,
    MembershipChecker,
)

__all__ = [
    "BoardAction",
    "can_modify_task",
    "can_remove_member",
    "is_allowed",
    "MembershipLedger",
    "MembershipChecker",
    "LedgerMembershipChecker",
    "HttpMembershipChecker",
]
