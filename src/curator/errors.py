"""Base error type for domain failures.

Domain errors are values the caller is expected to handle: they carry a
stable ``kind`` string for mapping to responses, a human-readable message
and structured context for logging.
"""

ErrorContext = dict[str, str | int | bool | list[str] | dict[str, int] | None]


class CuratorError(Exception):
    """Base exception for all domain errors.

    Provides structured error information for logging and API responses.
    """

    kind: str = "curator_error"

    def __init__(self, message: str, context: ErrorContext | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            context: Additional structured error details.
        """
        super().__init__(message)
        self.message = message
        self.context: ErrorContext = context or {}

    def to_dict(self) -> dict[str, str | ErrorContext]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "kind": self.kind,
            "message": self.message,
            "context": self.context,
        }
