"""Custom exceptions for the negative conflict finder."""


class ConflictFinderError(Exception):
    """Base exception for all conflict finder errors."""

    pass


class APIError(ConflictFinderError):
    """Raised when API calls fail."""

    pass


class AuthenticationError(APIError):
    """Raised when authentication fails."""

    pass


class RateLimitError(APIError):
    """Raised when API rate limits are exceeded."""

    pass


class ConfigurationError(ConflictFinderError):
    """Raised when configuration is invalid."""

    pass


class DataError(ConflictFinderError):
    """Raised when a source record cannot be used."""

    pass


class IndexBuildError(ConflictFinderError):
    """Raised when an account's keyword index cannot be built."""

    def __init__(self, customer_id: str, reason: str):
        """Initialize index build error.

        Args:
            customer_id: Account whose index could not be built
            reason: Human-readable failure reason
        """
        self.customer_id = customer_id
        self.reason = reason
        super().__init__(f"Could not build keyword index for {customer_id}: {reason}")
