from pydantic import BaseModel, Field

from stock_backend.models.candle import CandleData


class CandleResponse(BaseModel):
    time: str = Field(..., description="Period start date (YYYY-MM-DD, UTC).")
    open: float
    high: float
    low: float
    close: float
    volume: int

    @classmethod
    def from_candle(cls, candle: CandleData) -> "CandleResponse":
        return cls(
            time=candle.time.strftime("%Y-%m-%d"),
            open=candle.open,
            high=candle.high,
            low=candle.low,
            close=candle.close,
            volume=candle.volume,
        )
