"""Custom exception classes for the creative workflow service."""


class KidCreativesError(Exception):
    """Base exception for all service errors."""
    pass


class ConfigurationError(KidCreativesError):
    """Configuration or initialization errors."""
    pass


class APIError(KidCreativesError):
    """Base class for API-related errors."""
    pass


class ProviderError(APIError):
    """Generic provider API error with status code."""

    def __init__(self, provider: str, message: str, status_code: int = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"{provider} error: {message}")


class AuthenticationError(ProviderError):
    """API authentication failed."""

    def __init__(self, provider: str, status_code: int = 401):
        super().__init__(provider, "Authentication failed", status_code)


class RateLimitError(ProviderError):
    """API rate limit exceeded."""

    def __init__(self, provider: str, retry_after: int = None):
        self.retry_after = retry_after
        message = "Rate limit exceeded"
        if retry_after:
            message += f", retry after {retry_after}s"
        super().__init__(provider, message, 429)


class MalformedResponseError(APIError):
    """Service answered successfully but the payload is unusable."""
    pass


class GenerationError(KidCreativesError):
    """Errors during image generation."""
    pass


class AnalysisError(KidCreativesError):
    """Errors during vision analysis of the uploaded drawing."""
    pass


class PhaseTransitionError(KidCreativesError):
    """Completion event delivered for a phase that is not active."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Cannot complete phase '{expected}' while in phase '{actual}'"
        )


class InvalidInputError(KidCreativesError):
    """User input that a phase cannot accept (blank answer, no open question)."""
    pass


class ImageProcessingError(KidCreativesError):
    """Error processing image data."""
    pass
