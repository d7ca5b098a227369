"""
Bearer token issue and validation (JWT).
"""

import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from taskboard.config import get_settings
from taskboard.errors import Unauthenticated


class TokenClaims(BaseModel):
    """Decoded bearer token claims."""
    
    sub: uuid.UUID  # User ID
    email: Optional[str] = None
    iat: datetime
    exp: datetime


class TokenManager:
    """
    JWT creation and verification.

    The signing secret is injected; nothing in this module reads a constant key.
    """
    
    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 1440,
    ):
        if not secret_key:
            raise ValueError("secret_key is required")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
    
    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return self.expire_minutes * 60
    
    def issue_token(
        self,
        user_id: uuid.UUID,
        email: str,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Create a signed token for a user.
        
        Args:
            user_id: User's unique identifier (the `sub` claim)
            email: User's email
            now: Issue time, defaults to the current time
            
        Returns:
            Encoded JWT
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
    
    def decode(self, token: str) -> TokenClaims:
        """
        Verify a token and return its claims.
        
        Raises:
            Unauthenticated: empty, malformed, wrong algorithm, bad signature,
                expired, or missing subject
        """
        if not token:
            raise Unauthenticated("token is required")
        
        try:
            # Only the configured HMAC algorithm is accepted; "none" and
            # asymmetric algorithms fail here.
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
            )
        except JWTError as e:
            raise Unauthenticated("invalid or expired token") from e
        
        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub:
            raise Unauthenticated("invalid token: missing or invalid user ID")
        try:
            user_id = uuid.UUID(sub)
        except ValueError as e:
            raise Unauthenticated("invalid token: missing or invalid user ID") from e
        
        if "iat" not in payload or "exp" not in payload:
            raise Unauthenticated("invalid token: missing timestamps")
        
        return TokenClaims(
            sub=user_id,
            email=payload.get("email"),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    
    def validate(self, token: str) -> uuid.UUID:
        """Verify a token and return the user ID it was issued to."""
        return self.decode(token).sub


@lru_cache
def get_token_manager() -> TokenManager:
    """Token manager configured from settings, created once per process."""
    settings = get_settings()
    return TokenManager(
        secret_key=settings.secret_key,
        algorithm=settings.algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )
