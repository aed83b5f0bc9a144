"""
Authentication Service

Signup, login, refresh-token rotation and logout on top of a session store.

Session cap: after each new session, if the user holds more than
MAX_SESSIONS_PER_USER valid sessions, the oldest one is deleted. Creation and
eviction are two separate calls, so concurrent logins can briefly leave one
extra session until the next login corrects it.
"""

from dataclasses import dataclass

from stock_backend.errors import (
    InvalidCredentials,
    InvalidRefreshToken,
    SessionExpired,
    SessionNotFound,
    SessionRevoked,
    UserNotFound,
    ValidationError,
)
from stock_backend.models.session import SessionData, MAX_SESSIONS_PER_USER
from stock_backend.services.security import (
    TokenService,
    dummy_password_hash,
    hash_password,
    verify_password,
)
from stock_backend.services.session_store import SessionRepository
from stock_backend.services.user_repository import UserRepository
from stock_backend.utils.logger import create_logger

logger = create_logger(__name__)

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt input limit


@dataclass
class LoginResult:
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"


@dataclass
class RefreshResult:
    access_token: str
    refresh_token: str
    expires_in: int


class AuthService:
    """Authentication use cases."""

    def __init__(self, users: UserRepository, sessions: SessionRepository, tokens: TokenService):
        """
        Initialize auth service.

        Args:
            users: User store
            sessions: Session store (SQL or Redis)
            tokens: Access token issuer
        """
        self.users = users
        self.sessions = sessions
        self.tokens = tokens

    def signup(self, email: str, password: str):
        """
        Register a new user.

        Raises:
            ValidationError: If the password is too short or too long
            EmailAlreadyExists: If the email is taken
        """
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes long")

        user = self.users.create(email, hash_password(password))
        logger.info(f"User {user.id} signed up")
        return user

    def login(self, email: str, password: str, user_agent: str = "", ip_address: str = "") -> LoginResult:
        """
        Authenticate a user and open a new session.

        Args:
            email: User email
            password: Plaintext password
            user_agent: Client user-agent
            ip_address: Client IP

        Returns:
            LoginResult: Access token plus refresh token (the session id)

        Raises:
            InvalidCredentials: If the email is unknown or the password is wrong
        """
        try:
            user = self.users.find_by_email(email)
            password_hash = user.password
        except UserNotFound:
            user = None
            password_hash = dummy_password_hash()

        # Always run bcrypt so unknown emails take as long as wrong passwords
        password_ok = verify_password(password, password_hash)
        if user is None or not password_ok:
            raise InvalidCredentials("invalid email or password")

        session = self._open_session(user.id, user_agent, ip_address)
        access_token = self.tokens.generate_token(user.id, user.email)

        logger.info(f"User {user.id} logged in")
        return LoginResult(
            access_token=access_token,
            refresh_token=session.id,
            expires_in=self.tokens.expires_in,
        )

    def refresh_token(self, refresh_token: str, user_agent: str = "", ip_address: str = "") -> RefreshResult:
        """
        Rotate a refresh token: revoke the old session and open a new one.

        Raises:
            InvalidRefreshToken: If no session matches the token
            SessionRevoked: If the session was revoked
            SessionExpired: If the session expired
        """
        try:
            session = self.sessions.find_by_id(refresh_token)
        except SessionNotFound as e:
            raise InvalidRefreshToken("invalid refresh token") from e

        if session.is_revoked():
            raise SessionRevoked("session has been revoked")
        if session.is_expired():
            raise SessionExpired("session has expired")

        user = self.users.find_by_id(session.user_id)

        self.sessions.revoke(refresh_token)
        new_session = self._open_session(user.id, user_agent, ip_address)
        access_token = self.tokens.generate_token(user.id, user.email)

        logger.info(f"Rotated refresh token for user {user.id}")
        return RefreshResult(
            access_token=access_token,
            refresh_token=new_session.id,
            expires_in=self.tokens.expires_in,
        )

    def logout(self, refresh_token: str):
        """Revoke a refresh token. Unknown tokens are ignored."""
        try:
            self.sessions.revoke(refresh_token)
        except SessionNotFound:
            logger.debug("Logout with unknown refresh token")

    def logout_all(self, user_id: int):
        self.sessions.revoke_all_by_user_id(user_id)

    def _open_session(self, user_id: int, user_agent: str, ip_address: str) -> SessionData:
        session = SessionData.new(user_id, user_agent, ip_address)
        self.sessions.create(session)

        if self.sessions.count_by_user_id(user_id) > MAX_SESSIONS_PER_USER:
            self.sessions.delete_oldest_by_user_id(user_id)
            logger.info(f"Session cap reached for user {user_id}, evicted oldest session")

        return session
