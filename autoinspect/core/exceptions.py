"""Custom exceptions for the autoinspect watchdog."""


class AutoInspectException(Exception):
    """Base exception for the autoinspect application."""

    pass


class DatabaseError(AutoInspectException):
    """Raised when a database operation fails."""

    pass


class ConfigurationError(AutoInspectException):
    """Raised when configuration is invalid."""

    pass


class ScanError(AutoInspectException):
    """Raised when a watchdog pass cannot even list the jobs to check."""

    pass


class UnhandledStatusError(AutoInspectException):
    """Raised when an execution carries a status the classifier does not know."""

    def __init__(self, status: object) -> None:
        super().__init__(f"Unhandled agent execution status: {status!r}")
        self.status = status
