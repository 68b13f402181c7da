from enum import Enum
from typing import Optional


class CompletionErrorKind(str, Enum):
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    NETWORK = "network"
    UPSTREAM = "upstream"


class CompletionError(Exception):
    """Failure of the hosted completion call. `kind` is set by the transport layer."""

    kind = CompletionErrorKind.UPSTREAM

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(CompletionError):
    kind = CompletionErrorKind.AUTH


class RateLimitError(CompletionError):
    kind = CompletionErrorKind.RATE_LIMIT


class NetworkError(CompletionError):
    kind = CompletionErrorKind.NETWORK


class UpstreamError(CompletionError):
    kind = CompletionErrorKind.UPSTREAM


class ParseError(Exception):
    """Model output could not be turned into structured records."""


def error_for_status(status_code: int, message: str) -> CompletionError:
    """Maps a non-2xx HTTP status from the completion API onto an error kind."""
    if status_code in (401, 403):
        return AuthError(message, status_code=status_code)
    if status_code == 429:
        return RateLimitError(message, status_code=status_code)
    return UpstreamError(message, status_code=status_code)
