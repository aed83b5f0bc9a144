"""
Candle Ingestion Service

Pulls daily, weekly and monthly candles for every tracked symbol from the
market API and upserts them through the (cached) candle store. The upstream
free tier allows 8 requests per minute, so every request goes through the
rate limiter first. A failing symbol/interval is logged and skipped.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from stock_backend.config import INGEST_RATE_LIMIT, INGEST_RATE_WINDOW
from stock_backend.utils.logger import create_logger
from stock_backend.utils.rate_limiter import RateLimiter

logger = create_logger(__name__)

INGEST_INTERVALS = ["1day", "1week", "1month"]
INGEST_OUTPUT_SIZE = 200


@dataclass
class IngestReport:
    """Outcome of one ingestion run."""

    succeeded: List[Tuple[str, str]] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    candles_written: int = 0


class IngestService:
    """Market data ingestion use case."""

    def __init__(self, market, candles, rate_limiter: Optional[RateLimiter] = None):
        """
        Initialize ingestion service.

        Args:
            market: Market client exposing get_time_series(symbol, interval, outputsize)
            candles: Candle store exposing upsert_batch(candles)
            rate_limiter: Limiter applied before each upstream call
        """
        self.market = market
        self.candles = candles
        self.rate_limiter = rate_limiter or RateLimiter(INGEST_RATE_LIMIT, INGEST_RATE_WINDOW)

    def ingest_one(self, symbol: str, interval: str, outputsize: int = INGEST_OUTPUT_SIZE) -> int:
        """
        Fetch one symbol/interval series and upsert it.

        Returns:
            int: Number of candles written
        """
        candles = self.market.get_time_series(symbol, interval, outputsize)

        for candle in candles:
            candle.symbol = symbol
            candle.interval = interval

        self.candles.upsert_batch(candles)
        return len(candles)

    def ingest_all(self, symbols: List[str]) -> IngestReport:
        """
        Ingest every symbol for every interval.

        Args:
            symbols: Ticker symbols to ingest

        Returns:
            IngestReport: Per-pair outcome
        """
        report = IngestReport()
        logger.info(f"Ingesting {len(symbols)} symbol(s) x {len(INGEST_INTERVALS)} interval(s)")

        for symbol in symbols:
            for interval in INGEST_INTERVALS:
                self.rate_limiter.wait_if_needed()
                try:
                    report.candles_written += self.ingest_one(symbol, interval)
                    report.succeeded.append((symbol, interval))
                except Exception as e:
                    logger.error(f"Failed to ingest symbol {symbol}, interval {interval}: {e}")
                    report.failed.append((symbol, interval))
                    continue

        logger.info(
            f"Ingestion completed: succeeded={len(report.succeeded)}, "
            f"failed={len(report.failed)}, candles={report.candles_written}"
        )
        return report
