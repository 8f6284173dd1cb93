"""Tests for the session registry."""
import pytest
from sqlalchemy.exc import IntegrityError

from attendease import db
from attendease.errors import ActiveSessionExists, Forbidden, ValidationError
from attendease.models.session import ClassSession
from attendease.services import session_service
from attendease.services.geo_service import Coordinates, Geofence, NoGeofence
from attendease.services.session_service import SessionOptions, SessionService
from attendease.utils.codes import CODE_ALPHABET


def test_create_session_assigns_active_code(teacher, course):
    """New sessions are active with a 6-character upper-case code."""
    session = SessionService.create_session(teacher, course.id, 'CS101', 'Algorithms')

    assert session.is_active is True
    assert session.ended_at is None
    assert session.created_at is not None
    assert len(session.code) == 6
    assert all(ch in CODE_ALPHABET for ch in session.code)
    assert session.owner_id == teacher.uid
    assert isinstance(session.geofence, NoGeofence)


def test_create_session_requires_owned_course(teacher, other_course):
    """A course owned by someone else is a validation error."""
    with pytest.raises(ValidationError):
        SessionService.create_session(teacher, other_course.id, 'ENG202', 'Poetry')


def test_create_session_rejects_unknown_course(teacher, app):
    with pytest.raises(ValidationError):
        SessionService.create_session(teacher, 9999, 'Ghost', 'Nothing')


def test_create_session_requires_name_and_topic(teacher, course):
    with pytest.raises(ValidationError):
        SessionService.create_session(teacher, course.id, '  ', 'Algorithms')
    with pytest.raises(ValidationError):
        SessionService.create_session(teacher, course.id, 'CS101', None)


def test_only_one_active_session_per_teacher(teacher, course):
    """A second session is refused until the first one ends."""
    first = SessionService.create_session(teacher, course.id, 'CS101', 'Week 1')

    with pytest.raises(ActiveSessionExists):
        SessionService.create_session(teacher, course.id, 'CS101', 'Week 2')

    SessionService.end_session(teacher, first.id)
    second = SessionService.create_session(teacher, course.id, 'CS101', 'Week 2')
    assert second.is_active


def test_storage_rejects_second_active_session(teacher, course):
    """The partial unique index holds even if the application check is bypassed."""
    SessionService.create_session(teacher, course.id, 'CS101', 'Week 1')

    duplicate = ClassSession(course_id=course.id, owner_id=teacher.uid, class_name='CS101',
                             topic='Week 1 again', code='ZZZZZZ', is_active=True)
    db.session.add(duplicate)
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()


def test_end_session_flips_once(teacher, course):
    """Ending is a one-way flip; ending again leaves the session untouched."""
    session = SessionService.create_session(teacher, course.id, 'CS101', 'Week 1')

    ended = SessionService.end_session(teacher, session.id)
    assert ended.is_active is False
    first_end = ended.ended_at
    assert first_end is not None

    again = SessionService.end_session(teacher, session.id)
    assert again.is_active is False
    assert again.ended_at == first_end


def test_end_session_requires_owner(teacher, other_teacher, course):
    session = SessionService.create_session(teacher, course.id, 'CS101', 'Week 1')

    with pytest.raises(Forbidden):
        SessionService.end_session(other_teacher, session.id)


def test_find_active_by_code_is_case_insensitive(teacher, course, make_session):
    session = make_session(teacher, course, code='AB12CD')

    assert SessionService.find_active_by_code('ab12cd').id == session.id
    assert SessionService.find_active_by_code('  Ab12Cd ').id == session.id
    assert SessionService.find_active_by_code('AB12C') is None
    assert SessionService.find_active_by_code('') is None


def test_find_active_by_code_ignores_ended_sessions(teacher, course, make_session):
    session = make_session(teacher, course, code='AB12CD')
    SessionService.end_session(teacher, session.id)

    assert SessionService.find_active_by_code('AB12CD') is None


def test_geofence_options(teacher, course):
    """All three geofence fields make a Geofence session."""
    options = SessionOptions.from_dict({'latitude': 10.5, 'longitude': -20, 'max_distance_meters': 75})
    session = SessionService.create_session(teacher, course.id, 'CS101', 'Lab', options)

    assert session.geofence == Geofence(Coordinates(10.5, -20.0), 75.0)
    assert session.to_dict()['has_geofence'] is True


@pytest.mark.parametrize('payload', [
    {'latitude': 10, 'longitude': 20},
    {'max_distance_meters': 50},
    {'latitude': 95, 'longitude': 20, 'max_distance_meters': 50},
    {'latitude': 10, 'longitude': 20, 'max_distance_meters': 0},
    {'latitude': 'north', 'longitude': 20, 'max_distance_meters': 50},
])
def test_incomplete_or_invalid_geofence_is_rejected(payload):
    with pytest.raises(ValidationError):
        SessionOptions.from_dict(payload)


def test_dynamic_qr_flag_is_stored(teacher, course):
    session = SessionService.create_session(
        teacher, course.id, 'CS101', 'Week 1', SessionOptions(use_dynamic_qr=True)
    )
    assert session.use_dynamic_qr is True


def test_code_collision_is_retried(teacher, other_teacher, course, other_course,
                                   make_session, monkeypatch):
    """A clash with an existing code regenerates instead of failing."""
    make_session(other_teacher, other_course, code='AAAAAA')

    codes = iter(['AAAAAA', 'BBBBBB'])
    monkeypatch.setattr(session_service, 'generate_code', lambda length: next(codes))

    session = SessionService.create_session(teacher, course.id, 'CS101', 'Week 1')
    assert session.code == 'BBBBBB'


def test_list_sessions_most_recent_first(teacher, course):
    first = SessionService.create_session(teacher, course.id, 'CS101', 'Week 1')
    SessionService.end_session(teacher, first.id)
    second = SessionService.create_session(teacher, course.id, 'CS101', 'Week 2')

    listed = SessionService.list_sessions(teacher)
    assert [s.id for s in listed] == [second.id, first.id]
    assert SessionService.find_active_for_owner(teacher).id == second.id
