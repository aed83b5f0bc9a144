"""
Session Repository Contract

Abstract base class implemented by the SQL and Redis session stores. Callers
(login, refresh and logout flows) depend only on this contract.
"""

from abc import ABC, abstractmethod
from typing import List

from stock_backend.models.session import SessionData


class SessionRepository(ABC):
    """Persistence contract for refresh-token sessions."""

    @abstractmethod
    def create(self, session: SessionData) -> None:
        """
        Persist a new session.

        Raises:
            SessionAlreadyExpired: If session.expires_at is not in the future
        """

    @abstractmethod
    def find_by_id(self, session_id: str) -> SessionData:
        """
        Retrieve a session by its refresh token id.

        Raises:
            SessionNotFound: If the session does not exist
        """

    @abstractmethod
    def find_by_user_id(self, user_id: int) -> List[SessionData]:
        """Return the user's currently valid sessions, oldest first."""

    @abstractmethod
    def revoke(self, session_id: str) -> None:
        """
        Mark a session revoked. Revoking twice is not an error.

        Raises:
            SessionNotFound: If the session does not exist
        """

    @abstractmethod
    def revoke_all_by_user_id(self, user_id: int) -> None:
        """Revoke every session of the user."""

    @abstractmethod
    def count_by_user_id(self, user_id: int) -> int:
        """Return the number of currently valid sessions of the user."""

    @abstractmethod
    def delete_oldest_by_user_id(self, user_id: int) -> None:
        """Delete the user's valid session with the earliest created_at, if any."""

    @abstractmethod
    def delete_expired(self) -> int:
        """Remove expired sessions and return how many were removed."""
