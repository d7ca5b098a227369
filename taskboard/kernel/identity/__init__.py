"""
Identity Core - credentials and bearer tokens.
"""

from taskboard.kernel.identity.password import PasswordHasher, default_hasher
from taskboard.kernel.identity.tokens import TokenClaims, TokenManager, get_token_manager
from taskboard.kernel.identity.identity_service import IdentityService

__all__ = [
    "PasswordHasher",
    "default_hasher",
    "TokenClaims",
    "TokenManager",
    "get_token_manager",
    "IdentityService",
]
