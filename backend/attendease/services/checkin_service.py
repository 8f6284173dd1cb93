"""Check-in validation: decides whether a student's scanned code is accepted.

Checks run in a fixed order and the first failure wins:

1. the code resolves to an active session
2. the student is not already on that session's ledger
3. the student's last accepted check-in anywhere is outside the cooldown
4. if the session is geofenced, the device position is inside the radius

An accepted attempt is written to the ledger with a server timestamp. Every
attempt, accepted or not, gets one scan-log row.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from flask import current_app

from attendease.errors import StorageConflict, TransientFailure
from attendease.models.attendance import AttendanceRecord, ScanAttemptLog
from attendease.models.session import ClassSession
from attendease.services.geo_service import Coordinates, Geofence, NoGeofence
from attendease.services.ledger_service import LedgerService
from attendease.services.location_service import (LocationDeniedError, LocationProvider,
                                                  LocationUnavailableError, acquire_position)
from attendease.services.session_service import SessionService
from attendease.utils.helpers import utcnow
from attendease.utils.identity import Identity

logger = logging.getLogger(__name__)

class RejectionReason(str, Enum):
    """Machine-readable rejection reasons, as stored in the scan log."""
    INVALID_OR_INACTIVE_CODE = 'InvalidOrInactiveCode'
    ALREADY_MARKED = 'AlreadyMarked'
    COOLDOWN_ACTIVE = 'CooldownActive'
    LOCATION_DENIED = 'LocationDenied'
    LOCATION_UNAVAILABLE = 'LocationUnavailable'
    TOO_FAR = 'TooFar'

@dataclass
class CheckInResult:
    """Outcome of one attempt: accepted with its record, or rejected with a reason."""
    accepted: bool
    message: str
    reason: Optional[RejectionReason] = None
    session: Optional[ClassSession] = None
    record: Optional[AttendanceRecord] = None
    details: dict = field(default_factory=dict)

    @classmethod
    def reject(cls, reason: RejectionReason, message: str,
               session: ClassSession = None, **details) -> 'CheckInResult':
        return cls(accepted=False, message=message, reason=reason, session=session, details=details)

    def to_dict(self) -> dict:
        data = {
            'accepted': self.accepted,
            'reason': self.reason.value if self.reason else None,
            'message': self.message
        }
        data.update(self.details)
        if self.session is not None:
            data['session'] = {
                'id': self.session.id,
                'class_name': self.session.class_name,
                'topic': self.session.topic
            }
        if self.record is not None:
            data['record'] = self.record.to_dict()
        return data

@dataclass
class _Attempt:
    """What the scan log needs to know about an attempt in flight."""
    code: str
    session_id: Optional[int] = None
    position: Optional[Coordinates] = None

class CheckInValidator:
    """Runs the check-in protocol for one student attempt at a time."""

    def __init__(self, cooldown_minutes: float = 30, location_timeout: float = 5.0,
                 clock: Callable[[], datetime] = utcnow):
        self.cooldown_minutes = cooldown_minutes
        self.location_timeout = location_timeout
        self.clock = clock

    @classmethod
    def from_config(cls, config=None, clock: Callable[[], datetime] = utcnow) -> 'CheckInValidator':
        config = config if config is not None else current_app.config
        return cls(
            cooldown_minutes=config['CHECKIN_COOLDOWN_MINUTES'],
            location_timeout=config['GEOLOCATION_TIMEOUT_SECONDS'],
            clock=clock
        )

    def attempt_check_in(self, code: str, student: Identity,
                         location_provider: LocationProvider = None,
                         device_info: str = None, device_id: str = None) -> CheckInResult:
        """Validate and, if every check passes, record a check-in.

        Raises TransientFailure when storage is unreachable; the attempt is
        still audited on a best-effort basis.
        """
        attempt = _Attempt(code=code)
        try:
            result = self._evaluate(attempt, student, location_provider, device_info, device_id)
        except TransientFailure:
            self._audit(attempt, student, 'TransientFailure', device_info, device_id)
            raise

        self._audit(attempt, student, None if result.accepted else result.reason.value,
                    device_info, device_id)

        if result.accepted:
            logger.info("Check-in accepted: student %s session %s", student.uid, attempt.session_id)
        else:
            logger.info("Check-in rejected: student %s code %r reason %s",
                        student.uid, code, result.reason.value)
        return result

    def _evaluate(self, attempt: _Attempt, student: Identity,
                  location_provider: Optional[LocationProvider],
                  device_info: Optional[str], device_id: Optional[str]) -> CheckInResult:
        session = SessionService.find_active_by_code(attempt.code)
        if session is None:
            return CheckInResult.reject(
                RejectionReason.INVALID_OR_INACTIVE_CODE,
                "Invalid or inactive session code."
            )
        attempt.session_id = session.id

        if LedgerService.has_attended(session.id, student.uid):
            return self._already_marked(session)

        last = LedgerService.most_recent_attendance(student.uid)
        if last is not None:
            elapsed_minutes = (self.clock() - last.timestamp).total_seconds() / 60
            if elapsed_minutes < self.cooldown_minutes:
                remaining = min(math.ceil(self.cooldown_minutes - elapsed_minutes),
                                math.ceil(self.cooldown_minutes))
                return CheckInResult.reject(
                    RejectionReason.COOLDOWN_ACTIVE,
                    f"Please wait {remaining} minutes before scanning into another class.",
                    session=session,
                    remaining_minutes=remaining
                )

        distance = None
        geofence = session.geofence
        if isinstance(geofence, Geofence):
            try:
                position = acquire_position(location_provider, self.location_timeout)
            except LocationDeniedError:
                return CheckInResult.reject(
                    RejectionReason.LOCATION_DENIED,
                    "Location permission is required to check in to this class.",
                    session=session
                )
            except LocationUnavailableError:
                return CheckInResult.reject(
                    RejectionReason.LOCATION_UNAVAILABLE,
                    "Could not determine your location. Please try again.",
                    session=session
                )

            attempt.position = position.coordinates
            distance = geofence.distance_to(attempt.position)
            if distance > geofence.radius_meters:
                rounded = int(round(distance))
                return CheckInResult.reject(
                    RejectionReason.TOO_FAR,
                    f"You are {rounded}m away from the class location "
                    f"(maximum allowed is {geofence.radius_meters:g}m).",
                    session=session,
                    distance_meters=rounded,
                    max_distance_meters=geofence.radius_meters
                )
        elif not isinstance(geofence, NoGeofence):
            raise TypeError(f"Unknown geofence variant: {geofence!r}")

        try:
            record = LedgerService.record(
                session_id=session.id,
                student_uid=student.uid,
                student_name=student.display_name,
                student_id_number=student.student_id_number or 'N/A',
                timestamp=self.clock(),
                position=attempt.position,
                distance=distance,
                device_info=device_info,
                device_id=device_id
            )
        except StorageConflict:
            # a concurrent attempt for the same (session, student) got there first
            return self._already_marked(session)

        return CheckInResult(
            accepted=True,
            message=f"Attendance marked for {session.class_name}!",
            session=session,
            record=record
        )

    @staticmethod
    def _already_marked(session: ClassSession) -> CheckInResult:
        return CheckInResult.reject(
            RejectionReason.ALREADY_MARKED,
            "You have already marked attendance for this session.",
            session=session
        )

    def _audit(self, attempt: _Attempt, student: Identity, failure_reason: Optional[str],
               device_info: Optional[str], device_id: Optional[str]) -> None:
        LedgerService.log_attempt(
            student_uid=student.uid,
            status=ScanAttemptLog.STATUS_FAILED if failure_reason else ScanAttemptLog.STATUS_SUCCESS,
            timestamp=self.clock(),
            session_id=attempt.session_id,
            failure_reason=failure_reason,
            submitted_code=attempt.code,
            position=attempt.position,
            device_info=device_info,
            device_id=device_id
        )
