"""Unit tests for password hashing, bearer tokens and the identity service."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from taskboard.errors import AlreadyExists, InvalidArgument, Unauthenticated
from taskboard.kernel.identity.identity_service import INVALID_CREDENTIALS, IdentityService
from taskboard.kernel.identity.password import PasswordHasher
from taskboard.kernel.identity.tokens import TokenManager


@pytest.fixture
def hasher() -> PasswordHasher:
    """Minimum bcrypt cost keeps the suite fast."""
    return PasswordHasher(rounds=4)


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    def test_hash_creates_different_hashes(self, hasher):
        """Same password should create different hashes (due to salt)."""
        hash1 = hasher.hash("correct horse")
        hash2 = hasher.hash("correct horse")

        assert hash1 != hash2
        assert hash1.startswith("$2b$04$")

    def test_verify(self, hasher):
        hashed = hasher.hash("correct horse")

        assert hasher.verify("correct horse", hashed) is True
        assert hasher.verify("wrong horse", hashed) is False

    def test_verify_rejects_corrupt_hash(self, hasher):
        """A non-bcrypt value in the store fails closed."""
        assert hasher.verify("anything", "not-a-bcrypt-hash") is False

    def test_only_first_72_bytes_count(self, hasher):
        hashed = hasher.hash("a" * 72)

        assert hasher.verify("a" * 72 + "ignored", hashed) is True

    def test_unknown_user_check_reuses_one_dummy_hash(self, hasher):
        hasher.verify_unknown_user("whatever")
        dummy = hasher._dummy_hash
        hasher.verify_unknown_user("something else")

        assert dummy.startswith("$2b$04$")
        assert hasher._dummy_hash == dummy


class TestTokenManager:
    """Tests for bearer token issue and validation."""

    def test_issue_and_validate(self, token_manager: TokenManager):
        user_id = uuid.uuid4()
        token = token_manager.issue_token(user_id, "ann@example.com")

        assert token_manager.validate(token) == user_id
        claims = token_manager.decode(token)
        assert claims.email == "ann@example.com"
        assert claims.exp - claims.iat == timedelta(minutes=30)

    def test_empty_token_rejected(self, token_manager: TokenManager):
        with pytest.raises(Unauthenticated):
            token_manager.validate("")

    def test_malformed_token_rejected(self, token_manager: TokenManager):
        with pytest.raises(Unauthenticated):
            token_manager.validate("not.a.jwt")

    def test_expired_token_rejected(self, token_manager: TokenManager):
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = token_manager.issue_token(uuid.uuid4(), "ann@example.com", now=issued)

        with pytest.raises(Unauthenticated):
            token_manager.validate(token)

    def test_foreign_signature_rejected(self, token_manager: TokenManager):
        other = TokenManager(secret_key="another-secret-key-that-is-long-enough-0000")
        token = other.issue_token(uuid.uuid4(), "ann@example.com")

        with pytest.raises(Unauthenticated):
            token_manager.validate(token)

    def test_unexpected_algorithm_rejected(self, token_manager: TokenManager):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "iat": now, "exp": now + timedelta(minutes=5)},
            token_manager.secret_key,
            algorithm="HS512",
        )

        with pytest.raises(Unauthenticated):
            token_manager.validate(token)

    def test_invalid_subject_rejected(self, token_manager: TokenManager):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "not-a-uuid", "iat": now, "exp": now + timedelta(minutes=5)},
            token_manager.secret_key,
            algorithm="HS256",
        )

        with pytest.raises(Unauthenticated):
            token_manager.validate(token)

    def test_missing_subject_rejected(self, token_manager: TokenManager):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"iat": now, "exp": now + timedelta(minutes=5)},
            token_manager.secret_key,
            algorithm="HS256",
        )

        with pytest.raises(Unauthenticated):
            token_manager.validate(token)

    def test_secret_is_required(self):
        with pytest.raises(ValueError):
            TokenManager(secret_key="")


class TestIdentityService:
    """Tests for signup and login against the user store."""

    @pytest.mark.asyncio
    async def test_signup_normalizes_email(self, user_session, token_manager):
        service = IdentityService(user_session, token_manager)

        user = await service.signup("  Ann@Example.COM ", "s3cret-pass")

        assert user.email == "ann@example.com"
        assert user.password_hash != "s3cret-pass"

    @pytest.mark.asyncio
    async def test_signup_requires_email_and_password(self, user_session, token_manager):
        service = IdentityService(user_session, token_manager)

        with pytest.raises(InvalidArgument):
            await service.signup("", "s3cret-pass")
        with pytest.raises(InvalidArgument):
            await service.signup("ann@example.com", "")

    @pytest.mark.asyncio
    async def test_duplicate_signup_rejected(self, user_session, token_manager):
        service = IdentityService(user_session, token_manager)
        await service.signup("ann@example.com", "s3cret-pass")

        with pytest.raises(AlreadyExists):
            await service.signup("ANN@example.com", "other-pass")

    @pytest.mark.asyncio
    async def test_login_issues_token_for_user(self, user_session, token_manager):
        service = IdentityService(user_session, token_manager)
        created = await service.signup("ann@example.com", "s3cret-pass")

        user, token = await service.login("Ann@example.com", "s3cret-pass")

        assert user.id == created.id
        assert token_manager.validate(token) == created.id

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_are_indistinguishable(
        self, user_session, token_manager
    ):
        service = IdentityService(user_session, token_manager)
        await service.signup("ann@example.com", "s3cret-pass")

        with pytest.raises(Unauthenticated) as wrong_password:
            await service.login("ann@example.com", "not-the-pass")
        with pytest.raises(Unauthenticated) as unknown_email:
            await service.login("bob@example.com", "s3cret-pass")

        assert wrong_password.value.message == INVALID_CREDENTIALS
        assert unknown_email.value.message == wrong_password.value.message
        assert unknown_email.value.code == wrong_password.value.code

    @pytest.mark.asyncio
    async def test_login_requires_fields(self, user_session, token_manager):
        service = IdentityService(user_session, token_manager)

        with pytest.raises(InvalidArgument):
            await service.login("", "s3cret-pass")
