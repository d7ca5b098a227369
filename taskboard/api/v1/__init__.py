"""
API v1 routes.
"""

from fastapi import APIRouter

from taskboard.api.v1 import auth, boards, tasks

router = APIRouter()

router.include_router(auth.router, tags=["Authentication"])
router.include_router(boards.router, tags=["Boards"])
router.include_router(tasks.router, tags=["Tasks"])
