from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from stock_backend.dependencies import get_candle_service, get_current_user_id
from stock_backend.schemas.candle import CandleResponse
from stock_backend.services.candle_service import CandleService
from stock_backend.utils.logger import create_logger

logger = create_logger(__name__)
router = APIRouter(prefix="/v1", tags=["Candles"])


@router.get(
    "/candles/{code}",
    response_model=List[CandleResponse],
    summary="Get OHLCV candles for a symbol",
    responses={502: {"description": "Candle store unavailable."}},
)
def get_candles(
    code: str,
    interval: str = "1day",
    outputsize: int = 200,
    user_id: int = Depends(get_current_user_id),
    candles: CandleService = Depends(get_candle_service),
):
    """
    Returns candles newest first, served from Redis when cached.

    Example: GET /v1/candles/AAPL?interval=1week&outputsize=52
    """
    try:
        result = candles.get_candles(code, interval, outputsize)
    except Exception as e:
        logger.error(f"Error fetching candles for {code}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="failed to fetch candles")

    return [CandleResponse.from_candle(c) for c in result]
