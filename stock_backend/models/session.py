"""
Session Model

A session is one authenticated client login. Its id is the refresh token
handed to the client, so it is generated from 32 random bytes (hex, 64 chars).

Lifecycle:
- Created on login or refresh, valid for 7 days
- Revoked on logout / refresh rotation (revoked_at is never cleared)
- Removed by the expiry sweep (SQL) or by key TTL (Redis)
"""

import secrets
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from stock_backend.database import Base
from stock_backend.utils.market_hours import utcnow

REFRESH_TOKEN_LENGTH = 32  # bytes (256 bits)
REFRESH_TOKEN_EXPIRY = timedelta(days=7)
MAX_SESSIONS_PER_USER = 5


@dataclass
class SessionData:
    """Storage-independent session value shared by both session stores."""

    id: str
    user_id: int
    user_agent: str
    ip_address: str
    created_at: datetime
    expires_at: datetime
    revoked_at: Optional[datetime] = None

    @classmethod
    def new(cls, user_id: int, user_agent: str = "", ip_address: str = "") -> "SessionData":
        """
        Create a fresh session with a cryptographically secure id.

        Args:
            user_id: Owning user
            user_agent: Client user-agent header
            ip_address: Client IP address

        Returns:
            SessionData: Session expiring REFRESH_TOKEN_EXPIRY from now
        """
        now = utcnow()
        return cls(
            id=secrets.token_hex(REFRESH_TOKEN_LENGTH),
            user_id=user_id,
            user_agent=user_agent or "",
            ip_address=ip_address or "",
            created_at=now,
            expires_at=now + REFRESH_TOKEN_EXPIRY,
        )

    def is_expired(self) -> bool:
        return utcnow() > self.expires_at

    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_valid(self) -> bool:
        return not self.is_expired() and not self.is_revoked()

    def revoke(self):
        """Mark the session revoked. The first revocation time is kept."""
        if self.revoked_at is None:
            self.revoked_at = utcnow()

    def to_dict(self) -> dict:
        data = asdict(self)
        for field in ("created_at", "expires_at", "revoked_at"):
            if data[field] is not None:
                data[field] = data[field].isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SessionData":
        revoked_at = data.get("revoked_at")
        return cls(
            id=data["id"],
            user_id=int(data["user_id"]),
            user_agent=data.get("user_agent", ""),
            ip_address=data.get("ip_address", ""),
            created_at=datetime.fromisoformat(data["created_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
            revoked_at=datetime.fromisoformat(revoked_at) if revoked_at else None,
        )


class SessionModel(Base):
    """Session row used by the SQL session store."""

    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_agent = Column(String(512), nullable=False, default="")
    ip_address = Column(String(45), nullable=False, default="")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    revoked_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="sessions")

    def to_entity(self) -> SessionData:
        return SessionData(
            id=self.id,
            user_id=self.user_id,
            user_agent=self.user_agent,
            ip_address=self.ip_address,
            created_at=self.created_at,
            expires_at=self.expires_at,
            revoked_at=self.revoked_at,
        )

    @classmethod
    def from_entity(cls, session: SessionData) -> "SessionModel":
        return cls(
            id=session.id,
            user_id=session.user_id,
            user_agent=session.user_agent,
            ip_address=session.ip_address,
            created_at=session.created_at,
            expires_at=session.expires_at,
            revoked_at=session.revoked_at,
        )

    def __repr__(self):
        return (
            f"<SessionModel(user_id={self.user_id}, "
            f"expires_at={self.expires_at}, revoked_at={self.revoked_at})>"
        )
