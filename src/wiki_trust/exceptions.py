"""Custom exception hierarchy for Wiki Trust."""

from __future__ import annotations


class WikiTrustError(Exception):
    """Base exception for Wiki Trust."""


class WikiAPIError(WikiTrustError):
    """Definitive error from the wiki API."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        error_code: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class RetryExhaustedError(WikiAPIError):
    """A retriable failure persisted through every allowed attempt."""

    def __init__(self, attempts: int, status_code: int = 0, error_code: str | None = None):
        self.attempts = attempts
        detail = f" ({error_code})" if error_code else ""
        super().__init__(
            f"Wiki API still failing after {attempts} attempts: {status_code}{detail}",
            status_code=status_code,
            error_code=error_code,
        )


class PageMissingError(WikiAPIError):
    """The requested page does not exist (deleted or never created)."""

    def __init__(self, title: str):
        self.title = title
        super().__init__(f"Page not found: {title}", status_code=404, error_code="missingtitle")


class ConfigError(WikiTrustError):
    """Error with configuration."""


class InsufficientDataError(WikiTrustError):
    """Not enough data to produce a meaningful score."""
