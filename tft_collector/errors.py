# errors.py
# Exception taxonomy for the collector.
# Per-item errors (one player, one match, one lookup) are caught by the loop
# that owns the item; ConfigError and InvalidArgument end the command.

from typing import Optional


class CollectorError(Exception):
    """Base class for every error raised by tft_collector."""


class ConfigError(CollectorError):
    pass


class InvalidArgument(CollectorError):
    pass


class ApiError(CollectorError):
    """Upstream call failed. `status` is the HTTP status when there was one."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RateLimitExceeded(ApiError):
    pass


class NotFound(ApiError):
    pass


class TransientNetworkError(ApiError):
    pass


class ValidationError(CollectorError):
    pass


class PersistenceError(CollectorError):
    pass
