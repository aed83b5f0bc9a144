"""
Candle Service

Serving-path candle queries. Applies request defaults and bounds, then reads
through the candle store (normally the Redis-cached one).
"""

from typing import List

from stock_backend.models.candle import CandleData

DEFAULT_INTERVAL = "1day"
DEFAULT_OUTPUT_SIZE = 200
MAX_OUTPUT_SIZE = 5000


class CandleService:
    """Candle query use cases."""

    def __init__(self, candles):
        """
        Initialize candle service.

        Args:
            candles: Candle store exposing find(symbol, interval, outputsize)
        """
        self.candles = candles

    def get_candles(self, symbol: str, interval: str = "", outputsize: int = 0) -> List[CandleData]:
        """
        Get candles for a symbol.

        Args:
            symbol: Ticker symbol
            interval: Candle interval (defaults to "1day")
            outputsize: Number of candles; out-of-range values become 200

        Returns:
            list: CandleData, newest first
        """
        if not interval:
            interval = DEFAULT_INTERVAL
        if outputsize <= 0 or outputsize > MAX_OUTPUT_SIZE:
            outputsize = DEFAULT_OUTPUT_SIZE

        return self.candles.find(symbol, interval, outputsize)
