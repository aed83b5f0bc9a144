"""
Redis Session Store

Session repository backed by Redis. Each session is a JSON blob stored under
"{prefix}:{id}" with a TTL equal to its remaining lifetime, so expiry needs no
sweep. Redis has no secondary indexes, so every user also gets a set
"{prefix}:user:{user_id}" of session ids. Set members can outlive their blob;
they are removed lazily the next time the set is read.
"""

import json
import math
from datetime import timedelta
from typing import List
from redis import Redis as RedisClient

from stock_backend.errors import SessionAlreadyExpired, SessionNotFound
from stock_backend.models.session import SessionData
from stock_backend.services.session_store.base import SessionRepository
from stock_backend.utils.logger import create_logger
from stock_backend.utils.market_hours import utcnow

logger = create_logger(__name__)

REVOKED_SESSION_RETENTION = timedelta(hours=24)  # revoked blobs kept for audit


class RedisSessionRepository(SessionRepository):
    """SessionRepository implementation using Redis keys with TTL."""

    def __init__(self, redis: RedisClient, prefix: str = "session"):
        """
        Initialize Redis session store.

        Args:
            redis: Redis client (decode_responses=True)
            prefix: Key prefix for session blobs and user index sets
        """
        self.redis = redis
        self.prefix = prefix

    def session_key(self, session_id: str) -> str:
        return f"{self.prefix}:{session_id}"

    def user_sessions_key(self, user_id: int) -> str:
        return f"{self.prefix}:user:{user_id}"

    def create(self, session: SessionData) -> None:
        ttl = session.expires_at - utcnow()
        if ttl <= timedelta(0):
            raise SessionAlreadyExpired(f"session for user {session.user_id} already expired")

        ttl_ms = max(1, math.ceil(ttl.total_seconds() * 1000))
        self.redis.set(self.session_key(session.id), json.dumps(session.to_dict()), px=ttl_ms)
        self.redis.sadd(self.user_sessions_key(session.user_id), session.id)

    def find_by_id(self, session_id: str) -> SessionData:
        payload = self.redis.get(self.session_key(session_id))
        if payload is None:
            raise SessionNotFound(session_id)
        return SessionData.from_dict(json.loads(payload))

    def find_by_user_id(self, user_id: int) -> List[SessionData]:
        index_key = self.user_sessions_key(user_id)
        sessions = []

        for session_id in self.redis.smembers(index_key):
            try:
                session = self.find_by_id(session_id)
            except SessionNotFound:
                # Blob expired; drop the stale index entry
                self.redis.srem(index_key, session_id)
                continue

            if session.is_valid():
                sessions.append(session)

        sessions.sort(key=lambda s: s.created_at)
        return sessions

    def revoke(self, session_id: str) -> None:
        session = self.find_by_id(session_id)
        if session.is_revoked():
            return

        session.revoke()
        self.redis.set(
            self.session_key(session_id),
            json.dumps(session.to_dict()),
            ex=REVOKED_SESSION_RETENTION,
        )

    def revoke_all_by_user_id(self, user_id: int) -> None:
        revoked = 0
        for session_id in self.redis.smembers(self.user_sessions_key(user_id)):
            try:
                self.revoke(session_id)
                revoked += 1
            except SessionNotFound:
                continue

        logger.info(f"Revoked {revoked} session(s) for user {user_id}")

    def count_by_user_id(self, user_id: int) -> int:
        return len(self.find_by_user_id(user_id))

    def delete_oldest_by_user_id(self, user_id: int) -> None:
        sessions = self.find_by_user_id(user_id)
        if not sessions:
            return

        oldest = min(sessions, key=lambda s: s.created_at)
        self.redis.delete(self.session_key(oldest.id))
        self.redis.srem(self.user_sessions_key(user_id), oldest.id)
        logger.debug(f"Deleted oldest session of user {user_id}")

    def delete_expired(self) -> int:
        # Redis expires session keys on its own
        return 0
