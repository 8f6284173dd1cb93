"""Models package with all models."""
from .base import BaseModel
from .course import Course, Enrollment
from .session import ClassSession
from .attendance import AttendanceRecord, ScanAttemptLog

__all__ = [
    'BaseModel', 'Course', 'Enrollment',
    'ClassSession', 'AttendanceRecord', 'ScanAttemptLog'
]
