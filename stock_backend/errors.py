"""
Domain Errors

Exceptions raised by services and repositories. Routers translate them into
HTTP responses; storage errors (SQLAlchemy) are not wrapped and propagate as-is.
"""


class StockBackendError(Exception):
    """Base class for all domain errors."""


# Sessions

class SessionNotFound(StockBackendError):
    """No session exists for the given id (or it already expired in Redis)."""


class SessionAlreadyExpired(StockBackendError):
    """A session handed to create() has an expiry that is not in the future."""


class SessionRevoked(StockBackendError):
    """The refresh token belongs to a revoked session."""


class SessionExpired(StockBackendError):
    """The refresh token belongs to an expired session."""


class InvalidRefreshToken(StockBackendError):
    """The refresh token is unknown or malformed."""


# Users and tokens

class UserNotFound(StockBackendError):
    pass


class EmailAlreadyExists(StockBackendError):
    pass


class InvalidCredentials(StockBackendError):
    """Email unknown or password wrong; the message is the same for both."""


class InvalidToken(StockBackendError):
    """Access token failed signature or expiry validation."""


# Input and upstream

class ValidationError(StockBackendError):
    pass


class MarketDataError(StockBackendError):
    """The market-data API returned an error or an unparseable payload."""


class AnalysisError(StockBackendError):
    """Logo detection or company analysis upstream failed."""
