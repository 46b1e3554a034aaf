from __future__ import annotations


class ScoreboardError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ScoreboardError):
    status_code = 400


class RateLimitError(ScoreboardError):
    status_code = 429


class AuthError(ScoreboardError):
    status_code = 403


class StoreError(ScoreboardError):
    """Datastore failure; the underlying message is logged, never returned to clients."""

    status_code = 500
