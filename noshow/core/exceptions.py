"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class ReconciliationError(AppException):
    """The write phase of a no-show run failed and was rolled back."""

    def __init__(self, message: str = "No-show reconciliation failed"):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500)


class RunInProgressException(ConflictException):
    """A no-show run is already executing."""

    def __init__(self, message: str = "A no-show run is already in progress"):
        super().__init__(message)
