"""Custom exceptions for BookRec.

Defines specific exception types for better error handling and reporting.
Each exception carries the HTTP status code the API answers with.
"""

from typing import Any, Dict, Optional


class BookRecException(Exception):
    """Base exception for BookRec errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class InvalidRequestError(BookRecException):
    """Raised when a required request field is missing or empty."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=400, details=details)


class BookNotFoundError(BookRecException):
    """Raised when a book id is not in the catalog."""

    def __init__(self, book_id: Any):
        super().__init__(
            message="Book not found",
            status_code=404,
            details={"book_id": book_id},
        )


class DatasetError(BookRecException):
    """Raised when a dataset is missing or malformed at load time."""

    def __init__(self, path: str, reason: str, status_code: int = 500):
        message = f"Failed to load dataset '{path}': {reason}"
        super().__init__(
            message=message,
            status_code=status_code,
            details={"path": path, "reason": reason},
        )


class UpstreamFailure(BookRecException):
    """Raised when the metadata scraper fails.

    The message shown to callers is generic. ``details`` carries only the
    kind and whether a retry may help; ``cause`` is for the logs.
    """

    kind = "upstream"
    retryable = False

    def __init__(self, isbn: str, cause: str):
        super().__init__(
            message="Error occurred while scraping the data.",
            status_code=500,
            details={
                "isbn": isbn,
                "kind": self.kind,
                "retryable": self.retryable,
            },
        )
        self.isbn = isbn
        self.cause = cause


class ScrapeTimeoutError(UpstreamFailure):
    """Navigation to the search page timed out."""

    kind = "navigation_timeout"
    retryable = True


class SelectorMissingError(UpstreamFailure):
    """An expected element was not present on the page."""

    kind = "selector_missing"


class ScraperLaunchError(UpstreamFailure):
    """The site could not be reached or refused the request."""

    kind = "launch_failure"
