"""Class session with a check-in code."""
from attendease import db
from attendease.models.base import BaseModel
from attendease.services.geo_service import Coordinates, Geofence, NoGeofence, SessionGeofence

class ClassSession(BaseModel):
    """A single class meeting collecting attendance under one code.

    Created active; ``is_active`` flips to False exactly once and never back.
    """

    __tablename__ = 'sessions'
    __table_args__ = (
        db.CheckConstraint(
            '(latitude IS NULL AND longitude IS NULL AND max_distance_meters IS NULL) OR '
            '(latitude IS NOT NULL AND longitude IS NOT NULL AND max_distance_meters IS NOT NULL)',
            name='ck_sessions_geofence_complete'
        ),
    )

    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)
    owner_id = db.Column(db.String(64), nullable=False, index=True)
    class_name = db.Column(db.String(255), nullable=False)
    topic = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(32), unique=True, nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    ended_at = db.Column(db.DateTime, nullable=True)
    use_dynamic_qr = db.Column(db.Boolean, default=False, nullable=False)

    # Geofence (all three set, or none)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    max_distance_meters = db.Column(db.Float, nullable=True)

    # Relationships
    records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic')

    @property
    def geofence(self) -> SessionGeofence:
        if self.latitude is None or self.longitude is None or self.max_distance_meters is None:
            return NoGeofence()
        return Geofence(
            center=Coordinates(self.latitude, self.longitude),
            radius_meters=self.max_distance_meters
        )

    def to_dict(self, exclude: list = None, include_counts: bool = False):
        """Convert to dictionary."""
        data = super().to_dict(exclude=exclude)
        data['has_geofence'] = isinstance(self.geofence, Geofence)
        if include_counts:
            data['attendance_count'] = self.records.count()
        return data

    def __repr__(self):
        return f'<ClassSession {self.code}>'

# At most one active session per teacher.
db.Index(
    'uq_sessions_one_active_per_owner',
    ClassSession.owner_id,
    unique=True,
    sqlite_where=ClassSession.is_active.is_(True),
    postgresql_where=ClassSession.is_active.is_(True)
)
