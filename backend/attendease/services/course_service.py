"""Course management for teachers."""
import logging
from typing import Dict, List

from flask import current_app

from attendease import db
from attendease.errors import Forbidden, NotFound, StorageConflict, ValidationError
from attendease.models.course import Course, Enrollment
from attendease.utils.codes import generate_code
from attendease.utils.identity import Identity
from attendease.utils.storage import storage_guard
from attendease.utils.validators import Validator

logger = logging.getLogger(__name__)

class CourseService:
    """Service for creating and editing courses."""

    @staticmethod
    def create_course(owner: Identity, name: str, code: str,
                      description: str = None, schedule: str = None) -> Course:
        """Create a course with a fresh, unique enrollment code."""
        name = Validator.validate_text(name, 'name')
        code = Validator.validate_text(code, 'code', max_length=50)
        description = Validator.validate_text(description, 'description', max_length=2000, required=False)
        schedule = Validator.validate_text(schedule, 'schedule', required=False)

        attempts = current_app.config['CODE_GENERATION_ATTEMPTS']
        length = current_app.config['ENROLLMENT_CODE_LENGTH']

        for _ in range(attempts):
            course = Course(
                owner_id=owner.uid,
                name=name,
                code=code,
                enrollment_code=generate_code(length),
                description=description,
                schedule=schedule
            )
            try:
                with storage_guard('course creation'):
                    db.session.add(course)
                    db.session.commit()
            except StorageConflict:
                logger.warning("Enrollment code collision, regenerating")
                continue

            logger.info("Course %s created by %s", course.id, owner.uid)
            return course

        raise ValidationError("Could not allocate a unique enrollment code, please retry")

    @staticmethod
    def get_owned_course(owner: Identity, course_id: int) -> Course:
        course = Course.get_by_id(course_id)
        if course is None:
            raise NotFound("Course not found")
        if course.owner_id != owner.uid:
            raise Forbidden("You can only manage your own courses")
        return course

    @staticmethod
    def update_course(owner: Identity, course_id: int, changes: Dict) -> Course:
        """Edit the owner-editable fields of a course."""
        if not isinstance(changes, dict):
            raise ValidationError("Changes must be a JSON object")
        course = CourseService.get_owned_course(owner, course_id)

        unknown = set(changes) - set(Course.EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        if 'name' in changes:
            course.name = Validator.validate_text(changes['name'], 'name')
        if 'code' in changes:
            course.code = Validator.validate_text(changes['code'], 'code', max_length=50)
        if 'description' in changes:
            course.description = Validator.validate_text(
                changes['description'], 'description', max_length=2000, required=False)
        if 'schedule' in changes:
            course.schedule = Validator.validate_text(changes['schedule'], 'schedule', required=False)

        with storage_guard('course update'):
            db.session.commit()
        return course

    @staticmethod
    def list_courses(owner: Identity) -> List[Course]:
        with storage_guard('course listing'):
            return Course.query.filter_by(owner_id=owner.uid)\
                .order_by(Course.created_at.desc(), Course.id.desc()).all()

    @staticmethod
    def list_students(owner: Identity, course_id: int) -> List[Enrollment]:
        """Enrollments of an owned course, oldest first."""
        course = CourseService.get_owned_course(owner, course_id)
        with storage_guard('student listing'):
            return course.enrollments.order_by(Enrollment.enrolled_at, Enrollment.id).all()
