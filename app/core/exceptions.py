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


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


# Ride lifecycle errors


class RideNotFoundException(NotFoundException):
    """The requested ride does not exist."""

    def __init__(self, message: str = "Ride not found."):
        super().__init__(message)


class RideFullException(ConflictException):
    """Every seat of the ride is taken."""

    def __init__(self, message: str = "Ride is already full."):
        super().__init__(message)


class AlreadyJoinedException(ConflictException):
    """The acting user is already a passenger of the ride."""

    def __init__(self, message: str = "You have already joined this ride."):
        super().__init__(message)


class NotJoinedException(BadRequestException):
    """The acting user is not a passenger of the ride."""

    def __init__(self, message: str = "You have not joined this ride."):
        super().__init__(message)
