"""Attendance ledger: accepted check-ins plus the scan-attempt audit trail."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from attendease import db
from attendease.models.attendance import AttendanceRecord, ScanAttemptLog
from attendease.models.session import ClassSession
from attendease.services.feed_service import attendance_feed
from attendease.services.geo_service import Coordinates
from attendease.utils.storage import storage_guard

logger = logging.getLogger(__name__)

class LedgerService:
    """Append-only access to attendance records and scan logs."""

    @staticmethod
    def has_attended(session_id: int, student_uid: str) -> bool:
        with storage_guard('attendance lookup'):
            return db.session.query(
                AttendanceRecord.query.filter_by(session_id=session_id, student_uid=student_uid).exists()
            ).scalar()

    @staticmethod
    def most_recent_attendance(student_uid: str) -> Optional[AttendanceRecord]:
        """Latest accepted check-in of a student across all sessions."""
        with storage_guard('attendance lookup'):
            return AttendanceRecord.query.filter_by(student_uid=student_uid)\
                .order_by(AttendanceRecord.timestamp.desc(), AttendanceRecord.id.desc())\
                .first()

    @staticmethod
    def list_for_session(session_id: int, after_id: int = None) -> List[AttendanceRecord]:
        """Records of a session in insertion order, optionally only those after a known id."""
        with storage_guard('attendance listing'):
            query = AttendanceRecord.query.filter_by(session_id=session_id)
            if after_id is not None:
                query = query.filter(AttendanceRecord.id > after_id)
            return query.order_by(AttendanceRecord.id).all()

    @staticmethod
    def history_for_student(student_uid: str, course_id: int = None) -> List[AttendanceRecord]:
        """A student's check-ins, most recent first."""
        with storage_guard('attendance history'):
            query = AttendanceRecord.query.filter_by(student_uid=student_uid)
            if course_id is not None:
                query = query.join(ClassSession, ClassSession.id == AttendanceRecord.session_id)\
                    .filter(ClassSession.course_id == course_id)
            return query.order_by(AttendanceRecord.timestamp.desc(), AttendanceRecord.id.desc()).all()

    @staticmethod
    def record(session_id: int, student_uid: str, student_name: str,
               student_id_number: Optional[str], timestamp: datetime,
               position: Optional[Coordinates] = None,
               distance: Optional[float] = None,
               device_info: str = None, device_id: str = None) -> AttendanceRecord:
        """Insert one record; a duplicate (session, student) raises StorageConflict."""
        record = AttendanceRecord(
            session_id=session_id,
            student_uid=student_uid,
            student_name=student_name,
            student_id_number=student_id_number,
            timestamp=timestamp,
            latitude=position.latitude if position else None,
            longitude=position.longitude if position else None,
            distance_from_session=distance,
            device_info=device_info,
            device_id=device_id
        )

        with storage_guard('attendance insert'):
            db.session.add(record)
            db.session.flush()
            # serialized before commit expires the row, so publishing needs no reload
            event = record.to_dict()
            db.session.commit()

        attendance_feed.publish(session_id, event)
        return record

    @staticmethod
    def log_attempt(student_uid: str, status: str, timestamp: datetime,
                    session_id: int = None, failure_reason: str = None,
                    submitted_code: str = None,
                    position: Optional[Coordinates] = None,
                    device_info: str = None, device_id: str = None) -> Optional[ScanAttemptLog]:
        """Append an audit row. Failures are logged and swallowed so they never
        replace the outcome being audited."""
        entry = ScanAttemptLog(
            session_id=session_id,
            student_uid=student_uid,
            submitted_code=str(submitted_code)[:64] if submitted_code else None,
            status=status,
            failure_reason=failure_reason,
            timestamp=timestamp,
            latitude=position.latitude if position else None,
            longitude=position.longitude if position else None,
            device_info=device_info,
            device_id=device_id
        )
        try:
            db.session.add(entry)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Could not write scan log for %s (%s)", student_uid, failure_reason or status)
            return None
        return entry

    @staticmethod
    def list_scan_logs(session_id: int) -> List[ScanAttemptLog]:
        with storage_guard('scan log listing'):
            return ScanAttemptLog.query.filter_by(session_id=session_id)\
                .order_by(ScanAttemptLog.id).all()
