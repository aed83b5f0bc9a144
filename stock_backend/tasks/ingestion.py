"""
Candle Ingestion Background Tasks

Celery tasks:
1. ingest_daily_candles: Runs once a day, fetches candles for all active symbols
2. cleanup_expired_sessions: Runs hourly, deletes expired sessions from the database
"""

import threading

from celery.signals import worker_shutdown

from stock_backend.celery_app import celery_app
from stock_backend.config import CANDLE_CACHE_NAMESPACE, INGEST_RATE_LIMIT, INGEST_RATE_WINDOW
from stock_backend.database import SessionLocal
from stock_backend.dependencies import build_session_repository, connect_redis
from stock_backend.services.candle_cache import CachingCandleRepository
from stock_backend.services.candle_repository import SQLCandleRepository
from stock_backend.services.ingest_service import IngestService
from stock_backend.services.market_client import TwelveDataClient
from stock_backend.services.symbol_service import SymbolRepository
from stock_backend.utils.logger import create_logger
from stock_backend.utils.market_hours import time_until_next_ingestion
from stock_backend.utils.rate_limiter import RateLimiter

logger = create_logger(__name__)

# Set on worker shutdown so a rate-limit wait does not hold the worker
shutdown_event = threading.Event()


@worker_shutdown.connect
def _on_worker_shutdown(**kwargs):
    shutdown_event.set()


@celery_app.task(bind=True, max_retries=3)
def ingest_daily_candles(self):
    """
    Fetch candles for every active symbol and write them through the cache.

    - Upstream calls are limited to INGEST_RATE_LIMIT per INGEST_RATE_WINDOW seconds
    - Cache TTL is the time left until the next scheduled run
    - A failing symbol/interval is logged and skipped
    """
    db = SessionLocal()

    try:
        symbols = SymbolRepository(db).list_active_codes()
        if not symbols:
            logger.info("No active symbols, skipping ingestion")
            return {"status": "skipped", "reason": "no_symbols"}

        candles = CachingCandleRepository(
            connect_redis(),
            time_until_next_ingestion(),
            SQLCandleRepository(db),
            CANDLE_CACHE_NAMESPACE,
        )
        limiter = RateLimiter(INGEST_RATE_LIMIT, INGEST_RATE_WINDOW, stop_event=shutdown_event)
        service = IngestService(TwelveDataClient(), candles, limiter)

        report = service.ingest_all(symbols)

        return {
            "status": "success",
            "symbols": len(symbols),
            "succeeded": len(report.succeeded),
            "failed": len(report.failed),
            "candles_written": report.candles_written,
        }

    except Exception as e:
        logger.error(f"Error in candle ingestion: {e}", exc_info=True)
        db.rollback()
        raise self.retry(exc=e, countdown=300)

    finally:
        db.close()


@celery_app.task(bind=True, max_retries=3)
def cleanup_expired_sessions(self):
    """
    Delete expired sessions from the session store.

    With Redis-backed sessions this is a no-op (keys expire on their own).
    """
    db = SessionLocal()

    try:
        sessions = build_session_repository(connect_redis(), db)
        deleted = sessions.delete_expired()
        return {"status": "success", "sessions_deleted": deleted}

    except Exception as e:
        logger.error(f"Error in session cleanup: {e}", exc_info=True)
        db.rollback()
        raise self.retry(exc=e, countdown=60)

    finally:
        db.close()
