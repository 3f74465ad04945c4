"""Exceptions raised by the fanatic pipeline.

Exception Hierarchy:
    FanaticError (base)
    ├── TransportError - Network failure or non-2xx HTTP status
    ├── ParseError - Markup or JSON payload missing expected fields
    ├── EmptyResultError - No episode survived extraction
    └── SerializationError - Feed document could not be rendered

ParseError and TransportError raised while building a single episode only
cost that episode. TransportError on the show page, EmptyResultError and
SerializationError end the whole run.
"""

from typing import Optional


class FanaticError(Exception):
    """Base exception for all fanatic errors.

    Attributes:
        message: Human-readable error message
        suggestion: Optional hint for resolving the error
    """

    def __init__(self, message: str, suggestion: Optional[str] = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.suggestion:
            return f"{self.message} Suggestion: {self.suggestion}"
        return self.message


class TransportError(FanaticError):
    """Raised when a fetch fails at the network or HTTP level.

    Example:
        >>> raise TransportError(
        ...     "status code error: 503 Service Unavailable",
        ...     url="https://www.kcrw.com/music/shows/henry-rollins",
        ...     status_code=503,
        ...     reason="Service Unavailable",
        ... )
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if url and url not in message:
            message = f"{message} (url: {url})"
        super().__init__(message=message, suggestion=suggestion)


class ParseError(FanaticError):
    """Raised when an episode card or its payload lacks a required field."""


class EmptyResultError(FanaticError):
    """Raised when extraction produced no episodes at all.

    An empty batch means the page layout changed or the fetch returned
    something other than the show page, so it is never a valid result.
    """

    def __init__(self, endpoint: Optional[str] = None, skipped: int = 0) -> None:
        self.endpoint = endpoint
        self.skipped = skipped
        message = "No episodes found."
        if skipped:
            message = f"No episodes found ({skipped} episode card(s) skipped)."
        if endpoint:
            message = f"{message} (endpoint: {endpoint})"
        super().__init__(
            message=message,
            suggestion="Check whether the show page markup has changed",
        )


class SerializationError(FanaticError):
    """Raised when the feed document cannot be rendered."""
