"""Shared pytest fixtures."""
from datetime import datetime, timedelta

import pytest

from attendease import create_app, db
from attendease.services.course_service import CourseService
from attendease.services.session_service import SessionOptions, SessionService
from attendease.utils.identity import Identity, issue_access_token


class FakeClock:
    """Controllable stand-in for utcnow."""

    def __init__(self, start: datetime = None):
        self.now = start or datetime(2024, 3, 4, 9, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0) -> datetime:
        self.now = self.now + timedelta(minutes=minutes, seconds=seconds)
        return self.now


@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def teacher():
    return Identity(uid='teacher-1', role='teacher', name='Dr. Ada Lovelace', email='ada@uni.edu')


@pytest.fixture
def other_teacher():
    return Identity(uid='teacher-2', role='teacher', name='Dr. Alan Turing')


@pytest.fixture
def student():
    return Identity(uid='student-1', role='student', name='Jane Doe', student_id_number='2023001')


@pytest.fixture
def other_student():
    return Identity(uid='student-2', role='student', name='John Roe', student_id_number='2023002')


@pytest.fixture
def auth_headers(app):
    """Build a bearer header for an Identity."""
    def _headers(identity: Identity):
        token = issue_access_token(
            identity.uid, identity.role, identity.name,
            student_id_number=identity.student_id_number, email=identity.email
        )
        return {'Authorization': f'Bearer {token}'}
    return _headers


@pytest.fixture
def course(app, teacher):
    return CourseService.create_course(teacher, name='Intro to Computer Science', code='CS101')


@pytest.fixture
def other_course(app, other_teacher):
    return CourseService.create_course(other_teacher, name='Advanced Composition', code='ENG202')


@pytest.fixture
def make_session(app):
    """Start a session, optionally forcing its code."""
    def _make(owner, course, code=None, **options):
        session = SessionService.create_session(
            owner, course.id, class_name=course.name, topic='Week 1',
            options=SessionOptions(**options)
        )
        if code is not None:
            session.code = code
            db.session.commit()
        return session
    return _make
