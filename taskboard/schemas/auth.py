"""
Authentication schemas.
"""

import uuid

from pydantic import BaseModel, EmailStr


class SignupRequest(BaseModel):
    """User registration request."""

    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr
    password: str


class SignupResponse(BaseModel):
    id: uuid.UUID
    email: str


class TokenResponse(BaseModel):
    """Authentication token response."""

    token: str
    token_type: str = "bearer"
    expires_in: int
