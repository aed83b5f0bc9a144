"""Tests for signup, login, refresh rotation, logout and the session cap."""

import pytest

from stock_backend.errors import (
    EmailAlreadyExists,
    InvalidCredentials,
    InvalidRefreshToken,
    InvalidToken,
    SessionNotFound,
    SessionRevoked,
    ValidationError,
)
from stock_backend.models.session import MAX_SESSIONS_PER_USER
from stock_backend.services.auth_service import AuthService
from stock_backend.services.security import TokenService, hash_password, verify_password
from stock_backend.services.session_store import RedisSessionRepository, SQLSessionRepository
from stock_backend.services.user_repository import UserRepository

EMAIL = "bob@example.com"
PASSWORD = "s3cret-password"


@pytest.fixture(params=["sql", "redis"])
def sessions(request, db, redis_client):
    if request.param == "sql":
        return SQLSessionRepository(db)
    return RedisSessionRepository(redis_client)


@pytest.fixture
def auth(db, sessions, token_service):
    return AuthService(UserRepository(db), sessions, token_service)


@pytest.fixture
def registered(auth):
    return auth.signup(EMAIL, PASSWORD)


class TestPasswordsAndTokens:
    """bcrypt and access token helpers."""

    def test_hash_and_verify(self):
        password_hash = hash_password(PASSWORD)

        assert password_hash != PASSWORD
        assert verify_password(PASSWORD, password_hash)
        assert not verify_password("wrong-password", password_hash)

    def test_verify_against_malformed_hash(self):
        assert not verify_password(PASSWORD, "not-a-bcrypt-hash")

    def test_token_round_trip(self, token_service):
        token = token_service.generate_token(12, EMAIL)
        claims = token_service.decode_token(token)

        assert claims["sub"] == 12
        assert claims["email"] == EMAIL
        assert claims["exp"] - claims["iat"] == 900

    def test_token_signed_with_other_secret_is_rejected(self, token_service):
        token = TokenService("other-secret").generate_token(12, EMAIL)

        with pytest.raises(InvalidToken):
            token_service.decode_token(token)

    def test_expired_token_is_rejected(self):
        tokens = TokenService("test-secret", expires_in=-10)

        with pytest.raises(InvalidToken):
            tokens.decode_token(tokens.generate_token(1, EMAIL))

    def test_empty_secret_is_refused(self):
        with pytest.raises(ValueError):
            TokenService("")


class TestSignupAndLogin:
    """Account creation and credential checks."""

    def test_signup_stores_hashed_password(self, auth, registered):
        assert registered.id is not None
        assert registered.password != PASSWORD
        assert verify_password(PASSWORD, registered.password)

    def test_signup_rejects_short_password(self, auth):
        with pytest.raises(ValidationError):
            auth.signup("short@example.com", "1234567")

    def test_signup_rejects_password_over_bcrypt_limit(self, auth):
        with pytest.raises(ValidationError):
            auth.signup("long@example.com", "x" * 100)

        # 72 bytes is still accepted; multibyte characters count by bytes
        assert auth.signup("edge@example.com", "x" * 72).id is not None
        with pytest.raises(ValidationError):
            auth.signup("kana@example.com", "あ" * 25)

    def test_signup_rejects_duplicate_email(self, auth, registered):
        with pytest.raises(EmailAlreadyExists):
            auth.signup(EMAIL, "another-password")

    def test_login_returns_token_pair(self, auth, registered, token_service, sessions):
        result = auth.login(EMAIL, PASSWORD, user_agent="pytest", ip_address="127.0.0.1")

        assert result.token_type == "Bearer"
        assert result.expires_in == 900
        assert token_service.decode_token(result.access_token)["sub"] == registered.id

        session = sessions.find_by_id(result.refresh_token)
        assert session.user_id == registered.id
        assert session.user_agent == "pytest"
        assert session.ip_address == "127.0.0.1"

    def test_login_with_wrong_password(self, auth, registered):
        with pytest.raises(InvalidCredentials):
            auth.login(EMAIL, "wrong-password")

    def test_login_with_unknown_email(self, auth):
        with pytest.raises(InvalidCredentials):
            auth.login("nobody@example.com", PASSWORD)


class TestSessionCap:
    """A user never keeps more than MAX_SESSIONS_PER_USER valid sessions."""

    def test_sixth_login_evicts_oldest_session(self, auth, registered, sessions):
        tokens = [auth.login(EMAIL, PASSWORD).refresh_token for _ in range(MAX_SESSIONS_PER_USER + 1)]

        remaining = sessions.find_by_user_id(registered.id)

        assert len(remaining) == MAX_SESSIONS_PER_USER
        assert [s.id for s in remaining] == tokens[1:]
        with pytest.raises(SessionNotFound):
            sessions.find_by_id(tokens[0])

    def test_many_logins_stay_capped(self, auth, registered, sessions):
        for _ in range(MAX_SESSIONS_PER_USER * 2):
            auth.login(EMAIL, PASSWORD)
            assert sessions.count_by_user_id(registered.id) <= MAX_SESSIONS_PER_USER


class TestRefreshAndLogout:
    """Refresh token rotation and revocation."""

    def test_refresh_rotates_token(self, auth, registered, sessions, token_service):
        login = auth.login(EMAIL, PASSWORD)

        refreshed = auth.refresh_token(login.refresh_token)

        assert refreshed.refresh_token != login.refresh_token
        assert sessions.find_by_id(login.refresh_token).is_revoked()
        assert sessions.find_by_id(refreshed.refresh_token).is_valid()
        assert token_service.decode_token(refreshed.access_token)["sub"] == registered.id

    def test_reusing_rotated_token_is_rejected(self, auth, registered):
        login = auth.login(EMAIL, PASSWORD)
        auth.refresh_token(login.refresh_token)

        with pytest.raises(SessionRevoked):
            auth.refresh_token(login.refresh_token)

    def test_refresh_with_unknown_token(self, auth):
        with pytest.raises(InvalidRefreshToken):
            auth.refresh_token("0" * 64)

    def test_refresh_keeps_session_count(self, auth, registered, sessions):
        login = auth.login(EMAIL, PASSWORD)
        auth.refresh_token(login.refresh_token)

        assert sessions.count_by_user_id(registered.id) == 1

    def test_logout_revokes_session(self, auth, registered, sessions):
        login = auth.login(EMAIL, PASSWORD)

        auth.logout(login.refresh_token)

        assert sessions.find_by_id(login.refresh_token).is_revoked()
        with pytest.raises(SessionRevoked):
            auth.refresh_token(login.refresh_token)

    def test_logout_with_unknown_token_is_silent(self, auth):
        auth.logout("0" * 64)

    def test_logout_all_revokes_every_session(self, auth, registered, sessions):
        for _ in range(3):
            auth.login(EMAIL, PASSWORD)

        auth.logout_all(registered.id)

        assert sessions.count_by_user_id(registered.id) == 0
