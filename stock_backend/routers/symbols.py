from typing import List

from fastapi import APIRouter, Depends

from stock_backend.dependencies import get_current_user_id, get_symbol_service
from stock_backend.schemas.symbol import SymbolResponse
from stock_backend.services.symbol_service import SymbolService

router = APIRouter(prefix="/v1", tags=["Symbols"])


@router.get("/symbols", response_model=List[SymbolResponse], summary="List tracked symbols")
def list_symbols(
    user_id: int = Depends(get_current_user_id),
    symbols: SymbolService = Depends(get_symbol_service),
):
    return symbols.list_active_symbols()
