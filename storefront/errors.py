# Overview: Exception taxonomy shared by the API client, containers and admin hooks.

from __future__ import annotations

from typing import Any


class StorefrontError(Exception):
    """Base class for every error raised by this package."""


class NetworkError(StorefrontError):
    """Transport failure; no response was received."""


class APIError(StorefrontError):
    """Server answered with a 4xx/5xx status."""

    def __init__(self, status_code: int, message: str | None = None, payload: Any = None):
        self.status_code = status_code
        self.message = message
        self.payload = payload
        super().__init__(message or f"HTTP {status_code}")


class UnauthorizedError(APIError):
    """401: token missing, invalid or expired."""


class ValidationError(StorefrontError, ValueError):
    """Local input problem detected before any request is sent."""


class AdminOperationError(StorefrontError):
    """
    An admin operation failed after its toast was shown.

    The original error is chained as __cause__. For single-comment moderation
    calls `result` holds the rolled-back ModerationResult.
    """

    def __init__(self, message: str, result: Any = None):
        self.message = message
        self.result = result
        super().__init__(message)


def error_message(exc: BaseException, fallback: str) -> str:
    """Server-provided message when there is one, otherwise the fallback text."""
    if isinstance(exc, APIError) and exc.message:
        return exc.message
    return fallback
