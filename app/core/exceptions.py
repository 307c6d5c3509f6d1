"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        """Initialize exception with message, status code and error code."""
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404, code="NOT_FOUND")


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401, code="UNAUTHORIZED")


class InvalidCredentialsException(AppException):
    """Wrong username or password."""

    def __init__(self, message: str = "Invalid username or password"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401, code="INVALID_CREDENTIALS")


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403, code="FORBIDDEN")


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request", code: str = "BAD_REQUEST"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400, code=code)


class ValidationException(BadRequestException):
    """Validation error exception."""

    def __init__(self, message: str = "Validation error"):
        """Initialize with 400 status code."""
        super().__init__(message, code="VALIDATION_ERROR")


class InvalidStatusException(BadRequestException):
    """Appointment is not in a state that allows the requested action."""

    def __init__(self, message: str = "Invalid appointment status"):
        """Initialize with 400 status code."""
        super().__init__(message, code="INVALID_STATUS")


class InvalidConsultantException(BadRequestException):
    """Target user is missing or is not a consultant."""

    def __init__(self, message: str = "Invalid consultant"):
        """Initialize with 400 status code."""
        super().__init__(message, code="INVALID_CONSULTANT")


class InvalidPatientException(BadRequestException):
    """Target user is missing or is not a patient."""

    def __init__(self, message: str = "Invalid patient"):
        """Initialize with 400 status code."""
        super().__init__(message, code="INVALID_PATIENT")


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict", code: str = "CONFLICT"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409, code=code)


class SlotAlreadyBookedException(ConflictException):
    """Another appointment already holds this consultant and start time."""

    def __init__(self, message: str = "Slot already booked"):
        """Initialize with 409 status code."""
        super().__init__(message, code="SLOT_BOOKED")


class UserExistsException(ConflictException):
    """Email already registered."""

    def __init__(self, message: str = "User with this email already exists"):
        """Initialize with 409 status code."""
        super().__init__(message, code="USER_EXISTS")


class SessionCompletedException(ConflictException):
    """Session for the appointment was already completed."""

    def __init__(self, message: str = "Session already completed"):
        """Initialize with 409 status code."""
        super().__init__(message, code="SESSION_COMPLETED")


class VideoProviderException(AppException):
    """Video room provider call failed."""

    def __init__(self, message: str = "Error generating video token"):
        """Initialize with 502 status code."""
        super().__init__(message, status_code=502, code="VIDEO_PROVIDER_ERROR")
