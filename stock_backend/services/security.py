"""
Security Helpers

Password hashing with bcrypt and HS256 access tokens with PyJWT.
"""

from datetime import timedelta, timezone, datetime
from functools import lru_cache
import secrets
import bcrypt
import jwt

from stock_backend.errors import InvalidToken

BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(BCRYPT_ROUNDS)).decode("utf-8")


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash compared against when the user does not exist, so login timing matches."""
    return hash_password(secrets.token_hex(16))


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a plaintext password against a bcrypt hash.

    Args:
        password: Plaintext password
        password_hash: Stored bcrypt hash

    Returns:
        bool: True if the password matches
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


class TokenService:
    """Issues and validates signed access tokens."""

    ALGORITHM = "HS256"

    def __init__(self, secret: str, expires_in: int = 900):
        """
        Initialize token service.

        Args:
            secret: HMAC signing secret
            expires_in: Access token lifetime in seconds
        """
        if not secret:
            raise ValueError("JWT secret is required")
        self.secret = secret
        self.expires_in = expires_in

    def generate_token(self, user_id: int, email: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + timedelta(seconds=self.expires_in),
        }
        return jwt.encode(claims, self.secret, algorithm=self.ALGORITHM)

    def decode_token(self, token: str) -> dict:
        """
        Validate a token and return its claims.

        Args:
            token: Encoded JWT

        Returns:
            dict: Claims with "sub" converted back to an int user id

        Raises:
            InvalidToken: If the signature, expiry or subject is invalid
        """
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.ALGORITHM])
            claims["sub"] = int(claims["sub"])
        except (jwt.PyJWTError, KeyError, ValueError) as e:
            raise InvalidToken(str(e)) from e
        return claims
