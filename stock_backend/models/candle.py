"""
Candle Model

OHLCV candlestick data for a symbol at a given interval ("1day", "1week",
"1month"). The (symbol, interval, time) unique constraint drives upserts
during ingestion.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Column, Integer, BigInteger, String, Float, DateTime, UniqueConstraint

from stock_backend.database import Base


@dataclass
class CandleData:
    """Candle value passed between the market client, stores and cache."""

    symbol: str
    interval: str
    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: int

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "interval": self.interval,
            "time": self.time.isoformat(),
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CandleData":
        return cls(
            symbol=data["symbol"],
            interval=data["interval"],
            time=datetime.fromisoformat(data["time"]),
            open=float(data["open"]),
            high=float(data["high"]),
            low=float(data["low"]),
            close=float(data["close"]),
            volume=int(data["volume"]),
        )


class Candle(Base):
    """Candle row model."""

    __tablename__ = "candles"

    id = Column(Integer, primary_key=True, index=True)
    symbol = Column(String(32), nullable=False)  # e.g., "AAPL", "7203.T"
    interval = Column(String(16), nullable=False)  # e.g., "1day"
    time = Column(DateTime, nullable=False)  # start of the candle period

    # Price data
    open = Column(Float, nullable=False)
    high = Column(Float, nullable=False)
    low = Column(Float, nullable=False)
    close = Column(Float, nullable=False)
    volume = Column(BigInteger, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("symbol", "interval", "time", name="candle_sym_int_time"),
    )

    def to_entity(self) -> CandleData:
        return CandleData(
            symbol=self.symbol,
            interval=self.interval,
            time=self.time,
            open=self.open,
            high=self.high,
            low=self.low,
            close=self.close,
            volume=self.volume,
        )

    def __repr__(self):
        return f"<Candle {self.symbol} {self.interval} @ {self.time}: {self.close:.2f}>"
