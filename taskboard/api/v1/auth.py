"""
Authentication endpoints.
"""

from fastapi import APIRouter, status

from taskboard.api.deps import Tokens, UserDb
from taskboard.kernel.identity.identity_service import IdentityService
from taskboard.schemas.auth import LoginRequest, SignupRequest, SignupResponse, TokenResponse

router = APIRouter()


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(data: SignupRequest, db: UserDb, tokens: Tokens):
    """Register a new user account."""
    identity_service = IdentityService(db, tokens)
    user = await identity_service.signup(email=data.email, password=data.password)
    return SignupResponse(id=user.id, email=user.email)


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: UserDb, tokens: Tokens):
    """
    Exchange credentials for a bearer token.

    Unknown email and wrong password are indistinguishable.
    """
    identity_service = IdentityService(db, tokens)
    _, token = await identity_service.login(email=data.email, password=data.password)
    return TokenResponse(token=token, expires_in=tokens.expires_in)
