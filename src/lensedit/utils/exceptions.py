"""
Custom exceptions for lensedit.

Every failure on the path from input image to edited image is a
GenerationError; the generation client turns them all into a Failure outcome.
"""


class LensEditError(Exception):
    """Base exception for all lensedit errors."""

    pass


class ValidationError(LensEditError):
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


class ConfigurationError(LensEditError):
    """Raised when there is a configuration problem."""

    pass


class GenerationError(LensEditError):
    """Base for every error that ends a generation attempt."""

    pass


class ReadError(GenerationError):
    """Raised when an image resource cannot be read into encoded form."""

    def __init__(self, message: str, media_type: str = "") -> None:
        self.media_type = media_type
        super().__init__(message)


class ModelRefusalError(GenerationError):
    """Raised when the model answers with text instead of an image."""

    def __init__(self, message: str, text: str = "") -> None:
        """
        Initialize refusal error.

        Args:
            message: Error message (includes a truncated prefix of the text)
            text: Full text returned by the model
        """
        self.text = text
        super().__init__(message)


class EmptyResponseError(GenerationError):
    """Raised when the response holds neither image data nor text."""

    pass


class TransportError(GenerationError):
    """Base for network and service level faults."""

    pass


class APIError(TransportError):
    """Raised when an API call fails or returns a malformed body."""

    def __init__(self, message: str, status_code: int = 0, response: str = "") -> None:
        """
        Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response: Raw API response (if available)
        """
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class NetworkError(TransportError):
    """Raised when a network operation fails."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Initialize network error.

        Args:
            message: Error message
            original_error: The underlying exception that caused this error
        """
        self.original_error = original_error
        super().__init__(message)


class RequestTimeoutError(TransportError):
    """Raised when the request to the generation service times out."""

    pass
