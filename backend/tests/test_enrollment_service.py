"""Tests for course creation and enrollment."""
import pytest

from attendease.errors import AlreadyEnrolled, Forbidden, InvalidCode, ValidationError
from attendease.models.course import Enrollment
from attendease.services import course_service
from attendease.services.course_service import CourseService
from attendease.services.enrollment_service import EnrollmentService


def test_course_gets_unique_enrollment_code(teacher, course, other_course):
    assert len(course.enrollment_code) == 6
    assert course.enrollment_code != other_course.enrollment_code
    assert course.owner_id == teacher.uid


def test_course_requires_name_and_code(teacher, app):
    with pytest.raises(ValidationError):
        CourseService.create_course(teacher, name='', code='CS101')
    with pytest.raises(ValidationError):
        CourseService.create_course(teacher, name='Intro', code=None)


def test_enrollment_code_collision_is_retried(teacher, course, monkeypatch):
    codes = iter([course.enrollment_code, 'NEW123'])
    monkeypatch.setattr(course_service, 'generate_code', lambda length: next(codes))

    second = CourseService.create_course(teacher, name='Data Structures', code='CS201')
    assert second.enrollment_code == 'NEW123'


def test_enroll_with_valid_code(student, course):
    """First join succeeds and snapshots the student's profile."""
    joined = EnrollmentService.enroll(student, course.enrollment_code)

    assert joined.id == course.id
    enrollment = Enrollment.query.filter_by(course_id=course.id, student_uid=student.uid).one()
    assert enrollment.student_name == 'Jane Doe'
    assert enrollment.student_id_number == '2023001'


def test_second_enroll_is_already_enrolled(student, course):
    """Same effect, distinct result: no duplicate row, AlreadyEnrolled raised."""
    EnrollmentService.enroll(student, course.enrollment_code)

    with pytest.raises(AlreadyEnrolled):
        EnrollmentService.enroll(student, course.enrollment_code)

    assert Enrollment.query.filter_by(course_id=course.id, student_uid=student.uid).count() == 1


def test_enroll_with_unknown_code(student, course):
    with pytest.raises(InvalidCode):
        EnrollmentService.enroll(student, 'NOPE00')


def test_enroll_with_blank_code(student, app):
    with pytest.raises(ValidationError):
        EnrollmentService.enroll(student, '   ')


def test_invalid_code_and_already_enrolled_are_distinct(student, course):
    EnrollmentService.enroll(student, course.enrollment_code)

    with pytest.raises(AlreadyEnrolled) as duplicate:
        EnrollmentService.enroll(student, course.enrollment_code)
    with pytest.raises(InvalidCode) as missing:
        EnrollmentService.enroll(student, 'ZZZZZZ')

    assert duplicate.value.reason == 'AlreadyEnrolled'
    assert missing.value.reason == 'InvalidCode'


def test_enrolled_courses_and_student_list(teacher, other_teacher, student, other_student,
                                           course, other_course):
    EnrollmentService.enroll(student, course.enrollment_code)
    EnrollmentService.enroll(student, other_course.enrollment_code)
    EnrollmentService.enroll(other_student, course.enrollment_code)

    mine = EnrollmentService.list_enrolled_courses(student)
    assert {c.id for c in mine} == {course.id, other_course.id}

    roster = CourseService.list_students(teacher, course.id)
    assert [e.student_uid for e in roster] == [student.uid, other_student.uid]
    assert course.student_count() == 2

    with pytest.raises(Forbidden):
        CourseService.list_students(other_teacher, course.id)


def test_update_course_fields(teacher, other_teacher, course):
    updated = CourseService.update_course(teacher, course.id, {
        'description': 'Basics of computing', 'schedule': 'Mon 09:00'
    })
    assert updated.description == 'Basics of computing'
    assert updated.schedule == 'Mon 09:00'

    with pytest.raises(ValidationError):
        CourseService.update_course(teacher, course.id, {'enrollment_code': 'HACKED'})
    with pytest.raises(ValidationError):
        CourseService.update_course(teacher, course.id, ['name'])
    with pytest.raises(Forbidden):
        CourseService.update_course(other_teacher, course.id, {'name': 'Mine now'})
