from functools import lru_cache
from typing import Optional

import redis
from redis import Redis as RedisClient
import google.generativeai as genai
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from stock_backend.config import (
    REDIS_ENABLED,
    REDIS_HOSTNAME,
    REDIS_PORT,
    REDIS_PASSWORD,
    GEMINI_APIKEY,
    GEMINI_MODEL,
    JWT_SECRET,
    ACCESS_TOKEN_EXPIRES_IN,
    CANDLE_CACHE_TTL,
    CANDLE_CACHE_NAMESPACE,
)
from stock_backend.database import get_db
from stock_backend.errors import InvalidToken
from stock_backend.services.auth_service import AuthService
from stock_backend.services.candle_cache import CachingCandleRepository
from stock_backend.services.candle_repository import SQLCandleRepository
from stock_backend.services.candle_service import CandleService
from stock_backend.services.gemini_analyzer import GeminiAnalyzer
from stock_backend.services.logo_service import LogoDetectionService
from stock_backend.services.security import TokenService
from stock_backend.services.session_store import (
    SessionRepository,
    SQLSessionRepository,
    RedisSessionRepository,
)
from stock_backend.services.symbol_service import SymbolRepository, SymbolService
from stock_backend.services.user_repository import UserRepository
from stock_backend.services.vision_client import VisionLogoDetector
from stock_backend.utils.logger import create_logger
from stock_backend.utils.market_hours import time_until_next_ingestion

logger = create_logger(__name__)


@lru_cache(maxsize=1)
def connect_redis() -> Optional[RedisClient]:
    """
    Connect to Redis once and verify the connection with PING.

    Return:
        RedisClient: Connected client, or None when Redis is disabled or unreachable.
    """
    if not REDIS_ENABLED:
        logger.info("Redis disabled. Running without cache.")
        return None

    client = redis.StrictRedis(
        host=REDIS_HOSTNAME,
        port=REDIS_PORT,
        password=REDIS_PASSWORD,
        decode_responses=True,
    )
    try:
        client.ping()
    except redis.RedisError as e:
        logger.warning(f"Redis unavailable at {REDIS_HOSTNAME}:{REDIS_PORT}, running without cache: {e}")
        return None

    logger.info(f"Redis connection successful: {REDIS_HOSTNAME}:{REDIS_PORT}")
    return client


def get_redis_client() -> Optional[RedisClient]:
    """
    Dependency to provide the shared redis client.

    Return:
        RedisClient: The client, or None when the app runs without Redis.
    """
    return connect_redis()


def get_db_session():
    """
    Dependency to provide database session for FastAPI routes.

    Yields:
        Session: SQLAlchemy database session
    """
    yield from get_db()


def build_session_repository(redis_client: Optional[RedisClient], db: Session) -> SessionRepository:
    """
    Pick the session store: Redis when configured, otherwise the database.

    Args:
        redis_client: Redis client or None
        db: SQLAlchemy database session

    Returns:
        SessionRepository: Redis- or SQL-backed store
    """
    if redis_client is not None:
        return RedisSessionRepository(redis_client, prefix="session")
    return SQLSessionRepository(db)


def build_candle_repository(redis_client: Optional[RedisClient], db: Session) -> CachingCandleRepository:
    """
    Wrap the SQL candle store with the Redis cache.

    The TTL is CANDLE_CACHE_TTL when positive, otherwise the time left until
    the next daily ingestion.
    """
    ttl = CANDLE_CACHE_TTL if CANDLE_CACHE_TTL > 0 else time_until_next_ingestion()
    return CachingCandleRepository(redis_client, ttl, SQLCandleRepository(db), CANDLE_CACHE_NAMESPACE)


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    """
    Dependency to provide the access token service.

    Return:
        TokenService: HS256 signer configured with JWT_SECRET.
    """
    return TokenService(JWT_SECRET, ACCESS_TOKEN_EXPIRES_IN)


def get_session_repository(
    db: Session = Depends(get_db_session),
    redis_client: Optional[RedisClient] = Depends(get_redis_client),
) -> SessionRepository:
    return build_session_repository(redis_client, db)


def get_auth_service(
    db: Session = Depends(get_db_session),
    sessions: SessionRepository = Depends(get_session_repository),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(UserRepository(db), sessions, tokens)


def get_candle_service(
    db: Session = Depends(get_db_session),
    redis_client: Optional[RedisClient] = Depends(get_redis_client),
) -> CandleService:
    return CandleService(build_candle_repository(redis_client, db))


def get_symbol_service(db: Session = Depends(get_db_session)) -> SymbolService:
    return SymbolService(SymbolRepository(db))


def get_gemini_model() -> genai.GenerativeModel:
    """
    Dependency to provide a Gemini model instance.

    Return:
        GenerativeModel: A Gemini model configured with the application's credential.
    """
    genai.configure(api_key=GEMINI_APIKEY)
    return genai.GenerativeModel(GEMINI_MODEL)


def get_logo_service(
    gemini_model: genai.GenerativeModel = Depends(get_gemini_model),
) -> LogoDetectionService:
    return LogoDetectionService(VisionLogoDetector(), GeminiAnalyzer(gemini_model))


def get_current_user_id(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> int:
    """
    Dependency that authenticates the request with a Bearer access token.

    Returns:
        int: Authenticated user id

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing bearer token")

    try:
        claims = tokens.decode_token(authorization[len("Bearer "):])
    except InvalidToken:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid token")

    return claims["sub"]
