from .rate_limit import RateLimitEntry, RateLimiter, client_key
from .submission import MAX_TIME, MIN_TIME, NAME_MAX_LENGTH, ValidatedScore, validate_submission

__all__ = [
    "MAX_TIME",
    "MIN_TIME",
    "NAME_MAX_LENGTH",
    "RateLimitEntry",
    "RateLimiter",
    "ValidatedScore",
    "client_key",
    "validate_submission",
]
