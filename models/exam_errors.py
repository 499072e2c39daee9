"""
Exceptions raised by the exam workflow.

Every failure is fatal to the current run, so callers only need to tell the
kinds apart: HTTP status failures, missing tokens and incomplete question forms.
"""

from typing import Any, Dict, List, Optional


class ExamAutomatorError(Exception):
    """Base exception for all exam workflow errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class NetworkError(ExamAutomatorError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"HTTP {status_code} for {url}", {"status_code": status_code})
        self.status_code = status_code
        self.url = url


class ExtractionError(ExamAutomatorError):
    """A value could not be pulled out of a URL or page body."""

    def __init__(self, label: str) -> None:
        super().__init__(label)
        self.label = label


class TokenNotFoundError(ExtractionError):
    """A required URL or body token is missing."""


class ValidationError(ExamAutomatorError):
    """The scraped question form lacks required fields or answer options."""

    def __init__(self, message: str, missing: List[str]) -> None:
        super().__init__(message, {"missing": missing})
        self.missing = missing
