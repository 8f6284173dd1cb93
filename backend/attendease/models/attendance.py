"""Attendance ledger and scan-attempt audit models."""
from attendease import db
from attendease.models.base import BaseModel
from attendease.utils.helpers import utcnow

class AttendanceRecord(BaseModel):
    """Accepted check-in; at most one per (session, student)."""

    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_uid', name='uq_attendance_session_student'),
        db.Index('ix_attendance_student_timestamp', 'student_uid', 'timestamp'),
    )

    session_id = db.Column(db.Integer, db.ForeignKey('sessions.id'), nullable=False, index=True)
    student_uid = db.Column(db.String(64), nullable=False)

    # Snapshot of the student's profile at check-in time
    student_name = db.Column(db.String(255), nullable=False)
    student_id_number = db.Column(db.String(50), nullable=True)

    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)

    # Location where check-in happened
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    distance_from_session = db.Column(db.Float, nullable=True)

    # Device fingerprint
    device_info = db.Column(db.String(512), nullable=True)
    device_id = db.Column(db.String(128), nullable=True)

    def __repr__(self):
        return f'<AttendanceRecord {self.session_id}-{self.student_uid}>'

class ScanAttemptLog(BaseModel):
    """Append-only audit row for every check-in attempt."""

    __tablename__ = 'scan_logs'

    STATUS_SUCCESS = 'success'
    STATUS_FAILED = 'failed'

    session_id = db.Column(db.Integer, db.ForeignKey('sessions.id'), nullable=True, index=True)
    student_uid = db.Column(db.String(64), nullable=False, index=True)
    submitted_code = db.Column(db.String(64), nullable=True)
    status = db.Column(db.String(16), nullable=False)
    failure_reason = db.Column(db.String(64), nullable=True)
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    device_info = db.Column(db.String(512), nullable=True)
    device_id = db.Column(db.String(128), nullable=True)

    def __repr__(self):
        return f'<ScanAttemptLog {self.student_uid} {self.status}>'
