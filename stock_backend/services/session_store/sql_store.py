"""
SQL Session Store

Session repository backed by the relational database. Used when Redis is not
configured. Validity filtering happens in the query; expired rows stay until
delete_expired() sweeps them.
"""

from typing import List
from sqlalchemy.orm import Session

from stock_backend.errors import SessionAlreadyExpired, SessionNotFound
from stock_backend.models.session import SessionData, SessionModel
from stock_backend.services.session_store.base import SessionRepository
from stock_backend.utils.logger import create_logger
from stock_backend.utils.market_hours import utcnow

logger = create_logger(__name__)


class SQLSessionRepository(SessionRepository):
    """SessionRepository implementation using SQLAlchemy."""

    def __init__(self, db: Session):
        """
        Initialize SQL session store.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def _valid_sessions_query(self, user_id: int):
        return self.db.query(SessionModel).filter(
            SessionModel.user_id == user_id,
            SessionModel.revoked_at.is_(None),
            SessionModel.expires_at > utcnow(),
        )

    def create(self, session: SessionData) -> None:
        if session.expires_at <= utcnow():
            raise SessionAlreadyExpired(f"session for user {session.user_id} already expired")

        try:
            self.db.add(SessionModel.from_entity(session))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def find_by_id(self, session_id: str) -> SessionData:
        model = self.db.query(SessionModel).filter(SessionModel.id == session_id).first()
        if model is None:
            raise SessionNotFound(session_id)
        return model.to_entity()

    def find_by_user_id(self, user_id: int) -> List[SessionData]:
        models = self._valid_sessions_query(user_id).order_by(SessionModel.created_at.asc()).all()
        return [model.to_entity() for model in models]

    def revoke(self, session_id: str) -> None:
        model = self.db.query(SessionModel).filter(SessionModel.id == session_id).first()
        if model is None:
            raise SessionNotFound(session_id)

        if model.revoked_at is not None:
            return

        try:
            model.revoked_at = utcnow()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def revoke_all_by_user_id(self, user_id: int) -> None:
        try:
            updated = (
                self.db.query(SessionModel)
                .filter(SessionModel.user_id == user_id, SessionModel.revoked_at.is_(None))
                .update({SessionModel.revoked_at: utcnow()}, synchronize_session=False)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Revoked {updated} session(s) for user {user_id}")

    def count_by_user_id(self, user_id: int) -> int:
        return self._valid_sessions_query(user_id).count()

    def delete_oldest_by_user_id(self, user_id: int) -> None:
        oldest = self._valid_sessions_query(user_id).order_by(SessionModel.created_at.asc()).first()
        if oldest is None:
            return

        try:
            self.db.delete(oldest)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.debug(f"Deleted oldest session of user {user_id}")

    def delete_expired(self) -> int:
        try:
            deleted = (
                self.db.query(SessionModel)
                .filter(SessionModel.expires_at < utcnow())
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if deleted > 0:
            logger.info(f"Cleaned up {deleted} expired session(s)")
        return deleted
