"""Session registry: creation, code assignment and the active -> ended flip."""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from flask import current_app

from attendease import db
from attendease.errors import (ActiveSessionExists, Forbidden, NotFound,
                               StorageConflict, ValidationError)
from attendease.models.course import Course
from attendease.models.session import ClassSession
from attendease.utils.codes import generate_code, normalize_code
from attendease.utils.helpers import utcnow
from attendease.utils.identity import Identity
from attendease.utils.storage import storage_guard
from attendease.utils.validators import Validator

logger = logging.getLogger(__name__)

@dataclass
class SessionOptions:
    """Optional session settings: geofence and the dynamic-QR flag."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    max_distance_meters: Optional[float] = None
    use_dynamic_qr: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'SessionOptions':
        data = data or {}
        geofence_fields = [data.get('latitude'), data.get('longitude'), data.get('max_distance_meters')]
        given = [value is not None for value in geofence_fields]

        if any(given) and not all(given):
            raise ValidationError(
                "A geofence needs latitude, longitude and max_distance_meters together"
            )

        options = cls(use_dynamic_qr=bool(data.get('use_dynamic_qr', False)))
        if all(given):
            options.latitude = Validator.validate_latitude(data['latitude'])
            options.longitude = Validator.validate_longitude(data['longitude'])
            options.max_distance_meters = Validator.validate_radius(data['max_distance_meters'])
        return options

class SessionService:
    """Service owning class-session records."""

    @staticmethod
    def create_session(owner: Identity, course_id, class_name: str, topic: str,
                       options: SessionOptions = None) -> ClassSession:
        """Start a new active session for one of the owner's courses."""
        options = options or SessionOptions()
        try:
            course_id = int(course_id)
        except (TypeError, ValueError):
            raise ValidationError("course_id must be an integer")
        class_name = Validator.validate_text(class_name, 'class_name')
        topic = Validator.validate_text(topic, 'topic')

        with storage_guard('course lookup'):
            course = Course.get_by_id(course_id)
        if course is None or course.owner_id != owner.uid:
            raise ValidationError("Course does not belong to you")

        if SessionService.find_active_for_owner(owner) is not None:
            raise ActiveSessionExists()

        attempts = current_app.config['CODE_GENERATION_ATTEMPTS']
        length = current_app.config['SESSION_CODE_LENGTH']

        for _ in range(attempts):
            session = ClassSession(
                course_id=course.id,
                owner_id=owner.uid,
                class_name=class_name,
                topic=topic,
                code=generate_code(length),
                is_active=True,
                use_dynamic_qr=options.use_dynamic_qr,
                latitude=options.latitude,
                longitude=options.longitude,
                max_distance_meters=options.max_distance_meters
            )
            try:
                with storage_guard('session creation'):
                    db.session.add(session)
                    db.session.commit()
            except StorageConflict:
                # either a racing create from another device or a code collision
                if SessionService.find_active_for_owner(owner) is not None:
                    raise ActiveSessionExists()
                logger.warning("Session code collision, regenerating")
                continue

            logger.info("Session %s (%s) started by %s", session.id, session.code, owner.uid)
            return session

        raise ValidationError("Could not allocate a unique session code, please retry")

    @staticmethod
    def end_session(owner: Identity, session_id: int) -> ClassSession:
        """Flip an active session to ended; a second call changes nothing."""
        session = SessionService.get_owned_session(owner, session_id)

        with storage_guard('ending session'):
            updated = ClassSession.query\
                .filter_by(id=session.id, is_active=True)\
                .update({'is_active': False, 'ended_at': utcnow()}, synchronize_session=False)
            db.session.commit()

        if updated:
            logger.info("Session %s ended by %s", session.id, owner.uid)
        else:
            logger.info("Session %s was already ended", session.id)

        db.session.refresh(session)
        return session

    @staticmethod
    def find_active_by_code(code: str) -> Optional[ClassSession]:
        """Active session whose code matches case-insensitively, or None."""
        normalized = normalize_code(code)
        if not normalized:
            return None
        with storage_guard('session lookup'):
            return ClassSession.query.filter_by(code=normalized, is_active=True).first()

    @staticmethod
    def find_active_for_owner(owner: Identity) -> Optional[ClassSession]:
        with storage_guard('active session lookup'):
            return ClassSession.query.filter_by(owner_id=owner.uid, is_active=True).first()

    @staticmethod
    def get_owned_session(owner: Identity, session_id: int) -> ClassSession:
        with storage_guard('session lookup'):
            session = ClassSession.get_by_id(session_id)
        if session is None:
            raise NotFound("Session not found")
        if session.owner_id != owner.uid:
            raise Forbidden("You can only manage your own sessions")
        return session

    @staticmethod
    def list_sessions(owner: Identity, course_id: int = None) -> List[ClassSession]:
        """Owner's sessions, most recent first."""
        with storage_guard('session listing'):
            query = ClassSession.query.filter_by(owner_id=owner.uid)
            if course_id is not None:
                query = query.filter_by(course_id=course_id)
            return query.order_by(ClassSession.created_at.desc(), ClassSession.id.desc()).all()
