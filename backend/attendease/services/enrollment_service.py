"""Student self-service enrollment by course code."""
import logging
from typing import List

from attendease import db
from attendease.errors import AlreadyEnrolled, InvalidCode, StorageConflict, ValidationError
from attendease.models.course import Course, Enrollment
from attendease.utils.identity import Identity
from attendease.utils.storage import storage_guard

logger = logging.getLogger(__name__)

class EnrollmentService:
    """Service for joining courses."""

    @staticmethod
    def enroll(student: Identity, enrollment_code: str) -> Course:
        """Join the course whose enrollment code matches exactly.

        Raises InvalidCode on a miss and AlreadyEnrolled when the
        (course, student) pair exists, including when a concurrent join wins.
        """
        if not enrollment_code or not str(enrollment_code).strip():
            raise ValidationError("Enrollment code is required")

        with storage_guard('course lookup'):
            course = Course.query.filter_by(enrollment_code=str(enrollment_code).strip()).first()

        if course is None:
            raise InvalidCode("Invalid enrollment code.")

        enrollment = Enrollment(
            course_id=course.id,
            student_uid=student.uid,
            student_name=student.display_name,
            student_id_number=student.student_id_number
        )

        try:
            with storage_guard('enrollment'):
                db.session.add(enrollment)
                db.session.commit()
        except StorageConflict:
            raise AlreadyEnrolled("You are already enrolled in this course.")

        logger.info("Student %s enrolled in course %s", student.uid, course.id)
        return course

    @staticmethod
    def list_enrolled_courses(student: Identity) -> List[Course]:
        with storage_guard('enrolled course listing'):
            return Course.query.join(Enrollment, Enrollment.course_id == Course.id)\
                .filter(Enrollment.student_uid == student.uid)\
                .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc()).all()
