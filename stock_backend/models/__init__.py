"""
Database Models

All SQLAlchemy models for the application.
"""

from stock_backend.models.user import User
from stock_backend.models.session import SessionModel, SessionData
from stock_backend.models.candle import Candle, CandleData
from stock_backend.models.symbol import Symbol

__all__ = ["User", "SessionModel", "SessionData", "Candle", "CandleData", "Symbol"]
