"""
Identity service: signup, login and user lookups against the user store.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.database import commit_or_raise
from taskboard.errors import AlreadyExists, InvalidArgument, Unauthenticated
from taskboard.kernel.identity.password import PasswordHasher, default_hasher
from taskboard.kernel.identity.tokens import TokenManager
from taskboard.kernel.models.user import User
from taskboard.logging_config import get_logger

logger = get_logger(__name__)

# Same message for unknown email and wrong password
INVALID_CREDENTIALS = "invalid email or password"


def normalize_email(email: str) -> str:
    return email.lower().strip()


class IdentityService:
    """
    Service for user identity operations.
    
    Handles user registration and credential checks. Token signing is
    delegated to the injected TokenManager.
    """
    
    def __init__(
        self,
        session: AsyncSession,
        token_manager: TokenManager,
        hasher: PasswordHasher = default_hasher,
    ):
        self.session = session
        self.token_manager = token_manager
        self.hasher = hasher
    
    async def signup(self, email: str, password: str) -> User:
        """
        Register a new user.
        
        Args:
            email: User's email address
            password: Plain text password
            
        Returns:
            The created User object
            
        Raises:
            InvalidArgument: If email or password is empty
            AlreadyExists: If the email is already registered
        """
        if not email or not email.strip() or not password:
            raise InvalidArgument("email and password are required")
        
        user = User(
            email=normalize_email(email),
            password_hash=self.hasher.hash(password),
        )
        self.session.add(user)
        
        # The unique index decides; two concurrent signups cannot both win.
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise AlreadyExists("user already exists") from e
        
        await commit_or_raise(self.session, "failed to create user")
        
        logger.info("User registered", extra={"user_id": str(user.id)})
        return user
    
    async def login(self, email: str, password: str) -> tuple[User, str]:
        """
        Check credentials and issue a bearer token.
        
        Returns:
            Tuple of (User, token)
            
        Raises:
            InvalidArgument: If email or password is empty
            Unauthenticated: If the email is unknown or the password is wrong
        """
        if not email or not email.strip() or not password:
            raise InvalidArgument("email and password are required")
        
        user = await self.get_user_by_email(email)
        if not user:
            self.hasher.verify_unknown_user(password)
            raise Unauthenticated(INVALID_CREDENTIALS)
        
        if not self.hasher.verify(password, user.password_hash):
            raise Unauthenticated(INVALID_CREDENTIALS)
        
        token = self.token_manager.issue_token(user.id, user.email)
        return user, token
    
    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        query = select(User).where(User.email == normalize_email(email))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
