"""
Twelve Data Market Client

Fetches OHLCV time series from the Twelve Data REST API
(GET {base_url}/time_series). Values arrive as strings and are parsed into
CandleData; symbol and interval are left for the caller to stamp.
"""

from datetime import datetime
from typing import List
import requests

from stock_backend.config import TWELVE_DATA_API_KEY, TWELVE_DATA_BASE_URL, TWELVE_DATA_TIMEOUT
from stock_backend.errors import MarketDataError
from stock_backend.models.candle import CandleData
from stock_backend.utils.logger import create_logger

logger = create_logger(__name__)

DATETIME_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d")


def parse_datetime(value: str) -> datetime:
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise MarketDataError(f"parse time {value!r}")


class TwelveDataClient:
    """Client for the Twelve Data time series endpoint."""

    def __init__(
        self,
        api_key: str = TWELVE_DATA_API_KEY,
        base_url: str = TWELVE_DATA_BASE_URL,
        timeout: int = TWELVE_DATA_TIMEOUT,
        session: requests.Session = None,
    ):
        """
        Initialize Twelve Data client.

        Args:
            api_key: Twelve Data API key
            base_url: API base URL
            timeout: Request timeout in seconds
            session: Optional requests session (connection reuse, tests)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def get_time_series(self, symbol: str, interval: str, outputsize: int) -> List[CandleData]:
        """
        Fetch a time series.

        Args:
            symbol: Ticker symbol
            interval: Twelve Data interval ("1day", "1week", "1month")
            outputsize: Number of values to request

        Returns:
            list: CandleData in API order (newest first)

        Raises:
            MarketDataError: On HTTP errors, API errors or unparseable values
        """
        params = {
            "symbol": symbol,
            "interval": interval,
            "outputsize": outputsize,
            "apikey": self.api_key,
        }

        try:
            response = self.http.get(f"{self.base_url}/time_series", params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise MarketDataError(f"twelvedata request failed: {e}") from e

        if response.status_code >= 400:
            raise MarketDataError(f"twelvedata http {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise MarketDataError(f"twelvedata invalid json: {e}") from e

        if body.get("status") == "error":
            raise MarketDataError(f"twelvedata: {body.get('message', 'unknown error')}")

        candles = []
        for value in body.get("values") or []:
            try:
                candles.append(
                    CandleData(
                        symbol=symbol,
                        interval=interval,
                        time=parse_datetime(value["datetime"]),
                        open=float(value["open"]),
                        high=float(value["high"]),
                        low=float(value["low"]),
                        close=float(value["close"]),
                        volume=int(value.get("volume") or 0),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise MarketDataError(f"twelvedata invalid value {value!r}: {e}") from e

        logger.info(f"Fetched {len(candles)} {interval} candle(s) for {symbol}")
        return candles
