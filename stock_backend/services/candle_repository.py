"""
Candle Repository

SQL-backed candle store. Provides the two operations the rest of the
application relies on: find() for the serving path and upsert_batch() for
ingestion. Storage errors are not caught here; callers see them verbatim.
"""

from collections import defaultdict
from typing import List
from sqlalchemy.orm import Session

from stock_backend.models.candle import Candle, CandleData
from stock_backend.utils.logger import create_logger

logger = create_logger(__name__)


class SQLCandleRepository:
    """Candle store using SQLAlchemy."""

    def __init__(self, db: Session):
        """
        Initialize candle repository.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def find(self, symbol: str, interval: str, outputsize: int) -> List[CandleData]:
        """
        Get candles for a symbol and interval, newest first.

        Args:
            symbol: Ticker symbol (e.g., "AAPL")
            interval: Candle interval (e.g., "1day")
            outputsize: Maximum number of candles (no limit if <= 0)

        Returns:
            list: CandleData ordered by time descending
        """
        query = (
            self.db.query(Candle)
            .filter(Candle.symbol == symbol, Candle.interval == interval)
            .order_by(Candle.time.desc())
        )
        if outputsize > 0:
            query = query.limit(outputsize)

        return [row.to_entity() for row in query.all()]

    def upsert_batch(self, candles: List[CandleData]) -> None:
        """
        Insert new candles and update existing ones on (symbol, interval, time).

        Args:
            candles: Candles to write (may span several symbols/intervals)
        """
        if not candles:
            return

        by_series = defaultdict(list)
        for candle in candles:
            by_series[(candle.symbol, candle.interval)].append(candle)

        try:
            inserted = updated = 0
            for (symbol, interval), series in by_series.items():
                times = [c.time for c in series]
                existing = {
                    row.time: row
                    for row in self.db.query(Candle).filter(
                        Candle.symbol == symbol,
                        Candle.interval == interval,
                        Candle.time.in_(times),
                    )
                }

                for candle in series:
                    row = existing.get(candle.time)
                    if row:
                        # Update existing entry
                        row.open = candle.open
                        row.high = candle.high
                        row.low = candle.low
                        row.close = candle.close
                        row.volume = candle.volume
                        updated += 1
                    else:
                        # Create new entry
                        row = Candle(
                            symbol=candle.symbol,
                            interval=candle.interval,
                            time=candle.time,
                            open=candle.open,
                            high=candle.high,
                            low=candle.low,
                            close=candle.close,
                            volume=candle.volume,
                        )
                        self.db.add(row)
                        existing[candle.time] = row
                        inserted += 1

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.debug(f"Upserted candles: inserted={inserted}, updated={updated}")
