"""
Board authorization policy: which roles may perform which actions.

Roles are a fixed enum; this table is the whole policy.
"""

import uuid
from enum import Enum
from typing import Dict, FrozenSet, Optional, Union

from taskboard.kernel.models.board import BoardRole


class BoardAction(str, Enum):
    """Actions guarded by a board's membership roster."""
    VIEW_BOARD = "view_board"
    LIST_MEMBERS = "list_members"
    LIST_TASKS = "list_tasks"
    CREATE_TASK = "create_task"
    MODIFY_OWN_TASK = "modify_own_task"
    MODIFY_ANY_TASK = "modify_any_task"
    INVITE_USER = "invite_user"
    REMOVE_SELF = "remove_self"
    REMOVE_ANY_MEMBER = "remove_any_member"
    DELETE_BOARD = "delete_board"


_EVERY_ROLE: FrozenSet[BoardRole] = frozenset(BoardRole)
_EDITORS: FrozenSet[BoardRole] = frozenset({BoardRole.ADMIN, BoardRole.MEMBER})
_ADMINS: FrozenSet[BoardRole] = frozenset({BoardRole.ADMIN})

# Action -> roles that may perform it. Non-members may perform nothing.
_POLICY: Dict[BoardAction, FrozenSet[BoardRole]] = {
    BoardAction.VIEW_BOARD: _EVERY_ROLE,
    BoardAction.LIST_MEMBERS: _EVERY_ROLE,
    BoardAction.LIST_TASKS: _EVERY_ROLE,
    BoardAction.CREATE_TASK: _EDITORS,
    # "Own" means the acting user created the task; Viewers own nothing editable
    BoardAction.MODIFY_OWN_TASK: _EDITORS,
    BoardAction.MODIFY_ANY_TASK: _ADMINS,
    BoardAction.INVITE_USER: _ADMINS,
    BoardAction.REMOVE_SELF: _EVERY_ROLE,
    BoardAction.REMOVE_ANY_MEMBER: _ADMINS,
    BoardAction.DELETE_BOARD: _ADMINS,
}


def is_allowed(role: Optional[Union[BoardRole, str]], action: BoardAction) -> bool:
    """Check whether a role (None for non-members) may perform an action."""
    if role is None:
        return False
    return BoardRole(role) in _POLICY[action]


def can_modify_task(
    role: Optional[Union[BoardRole, str]],
    acting_user_id: uuid.UUID,
    creator_id: uuid.UUID,
) -> bool:
    """Update/delete rule: Admin any task, Member only own, Viewer never."""
    if is_allowed(role, BoardAction.MODIFY_ANY_TASK):
        return True
    return acting_user_id == creator_id and is_allowed(role, BoardAction.MODIFY_OWN_TASK)


def can_remove_member(
    role: Optional[Union[BoardRole, str]],
    acting_user_id: uuid.UUID,
    target_user_id: uuid.UUID,
) -> bool:
    """Removal rule: Admin anyone, everyone else only themselves."""
    if is_allowed(role, BoardAction.REMOVE_ANY_MEMBER):
        return True
    return acting_user_id == target_user_id and is_allowed(role, BoardAction.REMOVE_SELF)
