"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions bridge them to user-facing API responses.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    EMPTY_URL = "empty_url"
    INVALID_URL = "invalid_url"
    BLOCKED_DESTINATION = "blocked_destination"
    DNS_ERROR = "dns_error"
    NETWORK_ERROR = "network_error"
    DOWNLOAD_FAILED = "download_failed"
    DOWNLOAD_TIMEOUT = "download_timeout"
    TOO_MANY_REDIRECTS = "too_many_redirects"
    FILE_TOO_LARGE = "file_too_large"
    IO_ERROR = "io_error"
    PACKAGING_FAILED = "packaging_failed"
    RATE_LIMITED = "rate_limited"
    JOB_NOT_FOUND = "job_not_found"
    JOB_NOT_READY = "job_not_ready"
    INVALID_REQUEST = "invalid_request"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.EMPTY_URL: {
        "title": "URL Required",
        "message": "No URL was provided.",
        "action": "Paste the address of the file you want to fetch.",
    },
    ErrorCategory.INVALID_URL: {
        "title": "Invalid URL",
        "message": "The URL is malformed or uses an unsupported scheme.",
        "action": "Only http:// and https:// addresses with a hostname are accepted.",
    },
    ErrorCategory.BLOCKED_DESTINATION: {
        "title": "Destination Not Allowed",
        "message": "The host resolves to a private, loopback or otherwise reserved address.",
        "action": "Use a publicly reachable address.",
    },
    ErrorCategory.DNS_ERROR: {
        "title": "DNS Resolution Failed",
        "message": "The hostname could not be resolved.",
        "action": "Check the spelling of the host and try again.",
    },
    ErrorCategory.NETWORK_ERROR: {
        "title": "Network Error",
        "message": "Unable to connect to the remote server.",
        "action": "Check that the server is reachable and try again.",
    },
    ErrorCategory.DOWNLOAD_FAILED: {
        "title": "Download Failed",
        "message": "The remote server did not return the file.",
        "action": "Check that the URL points to an existing file.",
    },
    ErrorCategory.DOWNLOAD_TIMEOUT: {
        "title": "Download Timeout",
        "message": "The download took too long to complete.",
        "action": "Try again later or use a faster mirror.",
    },
    ErrorCategory.TOO_MANY_REDIRECTS: {
        "title": "Too Many Redirects",
        "message": "The server redirected more times than allowed.",
        "action": "Use the final address of the file instead.",
    },
    ErrorCategory.FILE_TOO_LARGE: {
        "title": "File Too Large",
        "message": "The file exceeds the maximum allowed size.",
        "action": "Only files below the size limit can be fetched.",
    },
    ErrorCategory.IO_ERROR: {
        "title": "Storage Error",
        "message": "The downloaded data could not be written to disk.",
        "action": "Please try again later.",
    },
    ErrorCategory.PACKAGING_FAILED: {
        "title": "Zip Creation Failed",
        "message": "The file was downloaded but could not be packaged.",
        "action": "Please try again later.",
    },
    ErrorCategory.RATE_LIMITED: {
        "title": "Too Many Requests",
        "message": "The service is receiving too many requests.",
        "action": "Please wait a moment before trying again.",
    },
    ErrorCategory.JOB_NOT_FOUND: {
        "title": "Job Not Found",
        "message": "The requested job could not be found or has expired.",
        "action": "Please submit the URL again.",
    },
    ErrorCategory.JOB_NOT_READY: {
        "title": "Download Not Ready",
        "message": "The archive for this job is not available yet.",
        "action": "Keep polling the job until it reports complete.",
    },
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Subclasses set ``category`` so callers can map any domain failure to a
    user-facing message without inspecting exception text.
    """

    category = ErrorCategory.SYSTEM_ERROR

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class ValidationError(DomainError):
    """Request rejected before any job exists."""

    category = ErrorCategory.INVALID_URL


class EmptyUrlError(ValidationError):
    """Raised when the submitted URL is blank."""

    category = ErrorCategory.EMPTY_URL


class InvalidUrlError(ValidationError):
    """Raised when a URL is malformed, has no host or a disallowed scheme."""

    category = ErrorCategory.INVALID_URL


class SecurityError(DomainError):
    """Raised when a destination is not safe to contact."""

    category = ErrorCategory.BLOCKED_DESTINATION


class BlockedDestinationError(SecurityError):
    """
    Raised when a host resolves to at least one blocked address.

    Raised by pre-flight validation, by the dial-time check inside the
    connection layer and by redirect validation.
    """

    def __init__(self, message: str, host: Optional[str] = None, address: Optional[str] = None):
        super().__init__(message)
        self.host = host
        self.address = address


class ResourceLimitError(DomainError):
    """Base class for configured limit breaches."""

    category = ErrorCategory.FILE_TOO_LARGE


class SizeLimitExceededError(ResourceLimitError):
    """Raised when the declared or actual body size exceeds the ceiling."""

    category = ErrorCategory.FILE_TOO_LARGE


class TooManyRedirectsError(ResourceLimitError):
    """Raised when the redirect chain is longer than allowed."""

    category = ErrorCategory.TOO_MANY_REDIRECTS


class TransportError(DomainError):
    """Base class for DNS, connection, HTTP status and timeout failures."""

    category = ErrorCategory.NETWORK_ERROR


class ResolutionError(TransportError):
    """Raised when a hostname cannot be resolved."""

    category = ErrorCategory.DNS_ERROR


class ConnectionFailedError(TransportError):
    """Raised when no connection to the remote server could be made."""

    category = ErrorCategory.NETWORK_ERROR


class ResponseStatusError(TransportError):
    """Raised when the final response is not a success."""

    category = ErrorCategory.DOWNLOAD_FAILED

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DownloadTimeoutError(TransportError):
    """Raised when the end-to-end fetch deadline elapses."""

    category = ErrorCategory.DOWNLOAD_TIMEOUT


class FetchIOError(TransportError):
    """Raised when the body cannot be written to local disk."""

    category = ErrorCategory.IO_ERROR


class PackagingError(DomainError):
    """Raised when archive creation fails."""

    category = ErrorCategory.PACKAGING_FAILED


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    This is an application-layer concern that bridges domain errors
    with user-facing error messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        data = {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }
        if self.technical_message:
            data["details"] = self.technical_message
        return data


class RateLimitExceededError(ApplicationError):
    """Raised when the admission gate refuses a request."""

    def __init__(
        self,
        category: ErrorCategory = ErrorCategory.RATE_LIMITED,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(category, technical_message, context)
        self.http_status_code = 429


def user_message_for(category: ErrorCategory) -> str:
    """Short, non-sensitive description stored on failed jobs."""
    error_info = ERROR_MESSAGES.get(
        category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
    )
    return f"{error_info['title']}: {error_info['message']}"


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Short detail safe to show the caller
        context: Additional context information
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code
