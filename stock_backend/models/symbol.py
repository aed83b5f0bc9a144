"""
Symbol Model

Tracked ticker symbols. Active symbols are listed to clients and drive the
daily candle ingestion.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime

from stock_backend.database import Base
from stock_backend.utils.market_hours import utcnow


class Symbol(Base):
    """Tracked ticker symbol."""

    __tablename__ = "symbols"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), unique=True, nullable=False, index=True)  # e.g., "AAPL"
    name = Column(String(255), nullable=False)
    market = Column(String(100), nullable=False)  # e.g., "NASDAQ"
    is_active = Column(Boolean, default=True, nullable=False)
    sort_key = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Symbol(code={self.code}, market={self.market}, active={self.is_active})>"
