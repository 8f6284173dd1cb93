"""Course and enrollment models."""
from attendease import db
from attendease.models.base import BaseModel
from attendease.utils.helpers import utcnow

class Course(BaseModel):
    """Course owned by a teacher; students join it with the enrollment code."""

    __tablename__ = 'courses'

    owner_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(50), nullable=False)
    enrollment_code = db.Column(db.String(32), unique=True, nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    schedule = db.Column(db.String(255), nullable=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    sessions = db.relationship('ClassSession', backref='course', lazy='dynamic')
    enrollments = db.relationship('Enrollment', backref='course', lazy='dynamic')

    EDITABLE_FIELDS = ('name', 'code', 'description', 'schedule')

    def student_count(self) -> int:
        return self.enrollments.count()

    def to_dict(self, exclude: list = None, include_counts: bool = False):
        """Convert to dictionary."""
        data = super().to_dict(exclude=exclude)
        if include_counts:
            data['student_count'] = self.student_count()
        return data

    def __repr__(self):
        return f'<Course {self.code}>'

class Enrollment(BaseModel):
    """A student's membership in a course, unique per (course, student)."""

    __tablename__ = 'enrollments'
    __table_args__ = (
        db.UniqueConstraint('course_id', 'student_uid', name='uq_enrollments_course_student'),
    )

    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False)
    student_uid = db.Column(db.String(64), nullable=False, index=True)
    student_name = db.Column(db.String(255), nullable=True)
    student_id_number = db.Column(db.String(50), nullable=True)
    enrolled_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f'<Enrollment {self.course_id}-{self.student_uid}>'
