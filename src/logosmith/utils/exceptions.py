"""
Custom exceptions for logosmith.

This module defines all custom exceptions used throughout the application.
"""


class LogosmithError(Exception):
    """Base exception for all logosmith errors."""

    pass


class ValidationError(LogosmithError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the field that failed validation (optional)
        """
        self.field = field
        super().__init__(message)


class ConfigurationError(LogosmithError):
    """Raised when a required credential or setting is missing or invalid."""

    pass


class RemoteServiceError(LogosmithError):
    """Raised when a remote backend call fails or returns no usable result."""

    def __init__(self, message: str, status_code: int = 0, response: str = "") -> None:
        """
        Initialize remote service error.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response: Raw response body (if available)
        """
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class NetworkError(RemoteServiceError):
    """Raised when a remote backend cannot be reached."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Initialize network error.

        Args:
            message: Error message
            original_error: The underlying exception that caused this error
        """
        self.original_error = original_error
        super().__init__(message)


class RequestTimeoutError(RemoteServiceError):
    """Raised when a remote backend call times out."""

    pass


class ProcessingError(LogosmithError):
    """Raised when an image cannot be decoded or transformed."""

    def __init__(self, message: str, filename: str = "") -> None:
        """
        Initialize processing error.

        Args:
            message: Error message
            filename: Name of the image that caused the error
        """
        self.filename = filename
        super().__init__(message)


class NotFoundError(LogosmithError):
    """Raised when a requested artifact does not exist in the store."""

    def __init__(self, message: str, filename: str = "") -> None:
        self.filename = filename
        super().__init__(message)


class OperationError(LogosmithError):
    """Raised when the last tier of an operation fails."""

    def __init__(
        self,
        message: str,
        operation: str = "",
        tier: str = "",
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize operation error.

        Args:
            message: Error message, prefixed with the operation context
            operation: Operation name (e.g. "enhance")
            tier: Tier that failed last
            original_error: The error raised by that tier
        """
        self.operation = operation
        self.tier = tier
        self.original_error = original_error
        super().__init__(message)
