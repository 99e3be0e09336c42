"""
Service errors.

These exceptions are raised by the service layer and caught by the
endpoints, which map them to HTTP status codes.  ``message`` is the
text returned to clients in the ``{"error": ...}`` body.
"""


class ServiceError(Exception):
    """Base class for errors reported by the service layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """The requested record does not exist.  Maps to 404."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class UsernameExistsError(ServiceError):
    """Signup with a username that is already taken.  Maps to 400."""

    def __init__(self, message: str = "Username already exists"):
        super().__init__(message)


class InvalidCredentialsError(ServiceError):
    """Unknown username or wrong password, deliberately indistinguishable.  Maps to 401."""

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)


class PersistenceError(ServiceError):
    """The store failed while serving the request.  Maps to 500."""
