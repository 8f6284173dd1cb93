"""Domain errors raised by the services and rendered by the API layer."""


class AttendEaseError(Exception):
    """Base class for every user-facing, recoverable error."""

    status_code = 400
    reason = 'Error'

    def __init__(self, message: str = None, reason: str = None):
        self.message = message or self.__class__.__doc__.strip()
        if reason is not None:
            self.reason = reason
        super().__init__(self.message)


class ValidationError(AttendEaseError):
    """Invalid request data."""
    reason = 'ValidationError'


class Forbidden(AttendEaseError):
    """You do not have access to this resource."""
    status_code = 403
    reason = 'Forbidden'


class NotFound(AttendEaseError):
    """Resource not found."""
    status_code = 404
    reason = 'NotFound'


class InvalidCode(AttendEaseError):
    """Invalid enrollment code."""
    status_code = 404
    reason = 'InvalidCode'


class AlreadyEnrolled(AttendEaseError):
    """You are already enrolled in this course."""
    status_code = 409
    reason = 'AlreadyEnrolled'


class ActiveSessionExists(AttendEaseError):
    """End your active session before starting a new one."""
    status_code = 409
    reason = 'ActiveSessionExists'


class StorageConflict(AttendEaseError):
    """A uniqueness constraint rejected the write."""
    status_code = 409
    reason = 'StorageConflict'

    def __init__(self, message: str = None, constraint: str = None):
        super().__init__(message)
        self.constraint = constraint


class TransientFailure(AttendEaseError):
    """Service temporarily unavailable, please retry."""
    status_code = 503
    reason = 'TransientFailure'
