"""Custom exceptions for the translation backend."""


class TranslationAppError(Exception):
    """Base exception for all backend errors."""

    def __init__(self, message: str = "An error occurred") -> None:
        """Initialize exception with message.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(self.message)


class InvalidRequestError(TranslationAppError):
    """Request validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize invalid request error.

        Args:
            message: Validation error message
            field: Optional field name that failed validation
        """
        self.field = field
        super().__init__(message)


class StoreUnavailableError(TranslationAppError):
    """The document store could not be read or written."""

    def __init__(self, operation: str, message: str | None = None) -> None:
        """Initialize store unavailable error.

        Args:
            operation: Store operation that failed (e.g., "read_config")
            message: Optional underlying error description
        """
        self.operation = operation
        detail = f": {message}" if message else ""
        super().__init__(f"Store unavailable during {operation}{detail}")


class QuotaExceededError(TranslationAppError):
    """Translation contingent exhausted for the caller."""

    def __init__(self, reason: str, message: str | None = None) -> None:
        """Initialize quota exceeded error.

        Args:
            reason: Which limit was hit ('stop_all', 'global_limit', 'user_limit')
            message: Optional user-facing message
        """
        self.reason = reason
        super().__init__(message or "Translation contingent exceeded.")


class TranslationProviderError(TranslationAppError):
    """The external translation API failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        target_language: str | None = None,
    ) -> None:
        """Initialize translation provider error.

        Args:
            message: Error message
            status_code: HTTP status returned by the provider, if any
            target_language: Target language of the failing request
        """
        self.status_code = status_code
        self.target_language = target_language
        super().__init__(message)


class ConfigurationError(TranslationAppError):
    """Configuration or environment error."""

    def __init__(self, message: str, config_key: str | None = None) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            config_key: Optional configuration key that caused the error
        """
        self.config_key = config_key
        super().__init__(message)
