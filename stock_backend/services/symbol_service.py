"""
Symbol Service

Lists the ticker symbols tracked by the application.
"""

from typing import List
from sqlalchemy.orm import Session

from stock_backend.models.symbol import Symbol


class SymbolRepository:
    """Symbol store using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def list_active(self) -> List[Symbol]:
        return (
            self.db.query(Symbol)
            .filter(Symbol.is_active == True)
            .order_by(Symbol.sort_key.asc())
            .all()
        )

    def list_active_codes(self) -> List[str]:
        rows = (
            self.db.query(Symbol.code)
            .filter(Symbol.is_active == True)
            .order_by(Symbol.sort_key.asc())
            .all()
        )
        return [row[0] for row in rows]


class SymbolService:
    """Symbol use cases."""

    def __init__(self, repo: SymbolRepository):
        self.repo = repo

    def list_active_symbols(self) -> List[Symbol]:
        return self.repo.list_active()
