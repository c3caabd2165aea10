"""
API Exceptions

This module contains exception classes for the translation store client.
Separated to avoid circular imports between the client and the pipelines.
"""

from yflow.config import DEFAULT_RETRY_AFTER


class APIError(Exception):
    """Translation store error with optional status code and details."""

    def __init__(self, message: str, status_code: int = None, details: dict = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details or {}


class AuthenticationError(APIError):
    """The API key was rejected."""
    pass


class RateLimitError(APIError):
    """The store answered 429 Too Many Requests."""

    def __init__(self, message: str, retry_after: float = DEFAULT_RETRY_AFTER, details: dict = None):
        super().__init__(message, status_code=429, details=details)
        self.retry_after = retry_after
