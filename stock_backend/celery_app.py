"""
Celery Application Configuration

Configures Celery for background task processing with Redis broker.
Defines beat schedule for the daily candle ingestion and session cleanup.
"""

from celery import Celery
from celery.schedules import crontab

from stock_backend.config import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    INGEST_HOUR,
    INGEST_TIMEZONE,
)

# Create Celery app
celery_app = Celery(
    "stock_backend",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
    include=["stock_backend.tasks.ingestion"],  # Import task modules
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=INGEST_TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=3600,  # 1 hour max per task (ingestion sleeps on the rate limit)
    worker_prefetch_multiplier=1,  # Process one task at a time
    worker_max_tasks_per_child=100,  # Restart worker after 100 tasks (prevent memory leaks)
)

# Beat schedule (periodic tasks)
celery_app.conf.beat_schedule = {
    # Ingest daily/weekly/monthly candles once a day (08:00 Asia/Tokyo by default)
    "ingest-daily-candles": {
        "task": "stock_backend.tasks.ingestion.ingest_daily_candles",
        "schedule": crontab(hour=INGEST_HOUR, minute=0),
    },

    # Sweep expired sessions from the database (no-op with Redis sessions)
    "cleanup-expired-sessions": {
        "task": "stock_backend.tasks.ingestion.cleanup_expired_sessions",
        "schedule": crontab(minute=30),
        "options": {
            "expires": 3000,  # Task expires if not picked up within 50 minutes
        },
    },
}

if __name__ == "__main__":
    celery_app.start()
