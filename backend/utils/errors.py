"""Exception types shared by the backend and calendar adapters."""


class SchedulingError(Exception):
    """Base exception for scheduling backend errors."""


class ConfigurationError(SchedulingError):
    """Raised when required configuration is missing."""


class CredentialsError(SchedulingError):
    """Raised when no Google credentials are available."""


class SessionError(SchedulingError):
    """Raised when an authenticated calendar session cannot be established."""


class CalendarOperationError(SchedulingError):
    """Raised when a remote calendar call fails."""
