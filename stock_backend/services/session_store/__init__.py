"""
Session Stores

One SessionRepository contract with a SQL and a Redis implementation.
"""

from stock_backend.services.session_store.base import SessionRepository
from stock_backend.services.session_store.sql_store import SQLSessionRepository
from stock_backend.services.session_store.redis_store import RedisSessionRepository

__all__ = ["SessionRepository", "SQLSessionRepository", "RedisSessionRepository"]
