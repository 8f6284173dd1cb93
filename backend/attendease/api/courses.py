"""Course API endpoints."""
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from attendease import limiter
from attendease.services.course_service import CourseService
from attendease.services.enrollment_service import EnrollmentService
from attendease.utils.decorators import student_required, teacher_required
from attendease.utils.helpers import success_response
from attendease.utils.identity import current_identity, rate_limit_key
from attendease.utils.validators import Validator

courses_bp = Blueprint('courses', __name__)

@courses_bp.route('', methods=['POST'])
@jwt_required()
@teacher_required
def create_course():
    """Create a course; the response carries its enrollment code."""
    data = Validator.require_fields(request.get_json(silent=True), ['name', 'code'])

    course = CourseService.create_course(
        current_identity(),
        name=data['name'],
        code=data['code'],
        description=data.get('description'),
        schedule=data.get('schedule')
    )

    return success_response(
        data=course.to_dict(include_counts=True),
        message=f"Course Created! Enrollment Code: {course.enrollment_code}",
        status_code=201
    )

@courses_bp.route('', methods=['GET'])
@jwt_required()
@teacher_required
def list_courses():
    """Teacher's own courses with enrolled-student counts."""
    courses = CourseService.list_courses(current_identity())
    return success_response(data=[c.to_dict(include_counts=True) for c in courses])

@courses_bp.route('/<int:course_id>', methods=['PATCH'])
@jwt_required()
@teacher_required
def update_course(course_id):
    """Edit name, code, description or schedule."""
    data = Validator.require_fields(request.get_json(silent=True), [])
    course = CourseService.update_course(current_identity(), course_id, data)
    return success_response(data=course.to_dict(include_counts=True), message="Course updated")

@courses_bp.route('/<int:course_id>/students', methods=['GET'])
@jwt_required()
@teacher_required
def list_students(course_id):
    """Students enrolled in an owned course."""
    enrollments = CourseService.list_students(current_identity(), course_id)
    return success_response(data=[e.to_dict() for e in enrollments])

@courses_bp.route('/enroll', methods=['POST'])
@jwt_required()
@student_required
@limiter.limit("20 per hour", key_func=rate_limit_key)
def enroll():
    """Join a course with its enrollment code."""
    data = Validator.require_fields(request.get_json(silent=True), ['enrollment_code'])

    course = EnrollmentService.enroll(current_identity(), data['enrollment_code'])

    return success_response(
        data=course.to_dict(),
        message=f"Successfully enrolled in {course.name}!",
        status_code=201
    )

@courses_bp.route('/enrolled', methods=['GET'])
@jwt_required()
@student_required
def enrolled_courses():
    """Courses the current student belongs to."""
    courses = EnrollmentService.list_enrolled_courses(current_identity())
    return success_response(data=[c.to_dict(exclude=['enrollment_code']) for c in courses])
