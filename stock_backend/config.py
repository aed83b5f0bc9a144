import os

# Database Configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./stock_backend.db")

# Redis Configuration
REDIS_ENABLED = os.getenv("REDIS_ENABLED", "true").lower() == "true"
REDIS_HOSTNAME = os.getenv("REDIS_HOSTNAME", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")

# Auth Configuration
JWT_SECRET = os.getenv("JWT_SECRET")
ACCESS_TOKEN_EXPIRES_IN = int(os.getenv("ACCESS_TOKEN_EXPIRES_IN", "900"))  # seconds

# Twelve Data Configuration
TWELVE_DATA_API_KEY = os.getenv("TWELVE_DATA_API_KEY")
TWELVE_DATA_BASE_URL = os.getenv("TWELVE_DATA_BASE_URL", "https://api.twelvedata.com")
TWELVE_DATA_TIMEOUT = int(os.getenv("TWELVE_DATA_TIMEOUT", "10"))  # seconds

# Google Vision / Gemini Configuration
GOOGLE_VISION_API_KEY = os.getenv("GOOGLE_VISION_API_KEY")
GEMINI_APIKEY = os.getenv("GEMINI_APIKEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

# Celery Configuration
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", f"redis://{REDIS_HOSTNAME}:{REDIS_PORT}/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", f"redis://{REDIS_HOSTNAME}:{REDIS_PORT}/1")

# Candle Cache Configuration
CANDLE_CACHE_TTL = int(os.getenv("CANDLE_CACHE_TTL", "0"))  # seconds; 0 = until next ingestion
CANDLE_CACHE_NAMESPACE = os.getenv("CANDLE_CACHE_NAMESPACE", "candles")

# Ingestion Configuration
INGEST_RATE_LIMIT = int(os.getenv("INGEST_RATE_LIMIT", "8"))  # upstream calls per window
INGEST_RATE_WINDOW = int(os.getenv("INGEST_RATE_WINDOW", "60"))  # window length (seconds)
INGEST_HOUR = int(os.getenv("INGEST_HOUR", "8"))  # daily ingestion hour (local to INGEST_TIMEZONE)
INGEST_TIMEZONE = os.getenv("INGEST_TIMEZONE", "Asia/Tokyo")

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_PATH = os.getenv("LOG_PATH", "logs/app.log")
