"""Boards and their invitations."""

from taskboard.kernel.boards.board_registry import BoardRegistry
from taskboard.kernel.boards.invitation_workflow import InvitationWorkflow, can_transition

__all__ = [
    "BoardRegistry",
    "InvitationWorkflow",
    "can_transition",
]
