"""Custom exceptions for the GK quantile summary."""


class ConfigurationError(ValueError):
    """Raised when a summary is configured with an error factor outside (0, 1)."""

    def __init__(self, message: str, epsilon: float = None):
        """
        Initialize ConfigurationError.

        Args:
            message: Detailed error message
            epsilon: Optional offending epsilon value
        """
        self.message = message
        self.epsilon = epsilon
        super().__init__(self.message)

    def __str__(self):
        if self.epsilon is not None:
            return f"{self.message} (epsilon: {self.epsilon})"
        return self.message


class InvalidArgumentError(ValueError):
    """Exception raised for illegal arguments, such as phi outside [0, 1]"""
    pass


class EmptySummaryError(ValueError):
    """Exception raised when a summary with no observations is queried"""
    pass


class InternalInvariantViolation(AssertionError):
    """
    Raised when the summary's rank-bound bookkeeping is found to be inconsistent.

    This signals a programming error in insert, compress or merge. It is never
    caught inside the library.
    """
    pass
