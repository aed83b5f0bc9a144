"""
Market Hours Utility

Clock helpers shared by the session store, the candle cache and the daily
ingestion schedule. Candles are ingested once a day at INGEST_HOUR in
INGEST_TIMEZONE (08:00 Asia/Tokyo by default), after the previous session's
daily bars are published.
"""

from datetime import datetime, timedelta, timezone
import pytz

from stock_backend.config import INGEST_HOUR, INGEST_TIMEZONE


INGEST_TZ = pytz.timezone(INGEST_TIMEZONE)


def utcnow() -> datetime:
    """
    Get the current UTC time as a naive datetime.

    All timestamps persisted by the application are naive UTC.

    Returns:
        datetime: Current UTC time without tzinfo
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_current_ingest_time() -> datetime:
    """
    Get current time in the ingestion timezone.

    Returns:
        datetime: Current datetime in INGEST_TIMEZONE
    """
    return datetime.now(INGEST_TZ)


def next_ingestion_time(dt: datetime = None) -> datetime:
    """
    Get the next daily ingestion boundary strictly after dt.

    Args:
        dt: Reference time (defaults to now). Naive values are assumed UTC.

    Returns:
        datetime: Next INGEST_HOUR:00 in INGEST_TIMEZONE
    """
    if dt is None:
        dt = get_current_ingest_time()
    elif dt.tzinfo is None:
        dt = pytz.utc.localize(dt).astimezone(INGEST_TZ)
    else:
        dt = dt.astimezone(INGEST_TZ)

    target = INGEST_TZ.localize(
        datetime(dt.year, dt.month, dt.day, INGEST_HOUR, 0, 0)
    )

    # Already past today's boundary: use tomorrow's
    if dt >= target:
        next_day = (target + timedelta(days=1)).date()
        target = INGEST_TZ.localize(
            datetime(next_day.year, next_day.month, next_day.day, INGEST_HOUR, 0, 0)
        )

    return target


def time_until_next_ingestion(dt: datetime = None) -> timedelta:
    """
    Get the time remaining until the next daily ingestion.

    Used as the candle cache TTL so cached reads stay valid for exactly one
    ingestion cycle.

    Args:
        dt: Reference time (defaults to now)

    Returns:
        timedelta: Positive duration, at most 24 hours
    """
    if dt is None:
        dt = get_current_ingest_time()
    elif dt.tzinfo is None:
        dt = pytz.utc.localize(dt)

    return next_ingestion_time(dt) - dt
