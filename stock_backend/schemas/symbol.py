from datetime import datetime

from pydantic import BaseModel, ConfigDict


class SymbolResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    name: str
    market: str
    updated_at: datetime
