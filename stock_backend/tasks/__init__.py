"""
Background Tasks

Celery tasks for candle ingestion and session maintenance.
"""

from stock_backend.tasks.ingestion import (
    ingest_daily_candles,
    cleanup_expired_sessions,
)

__all__ = [
    "ingest_daily_candles",
    "cleanup_expired_sessions",
]
