"""Attendance API endpoints (student side)."""
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from attendease import limiter
from attendease.services.checkin_service import CheckInValidator, RejectionReason
from attendease.services.ledger_service import LedgerService
from attendease.services.location_service import ReportedLocationProvider
from attendease.models.session import ClassSession
from attendease.utils.decorators import student_required
from attendease.utils.helpers import error_response, success_response
from attendease.utils.identity import current_identity, rate_limit_key
from attendease.utils.validators import Validator

attendance_bp = Blueprint('attendance', __name__)

REJECTION_STATUS = {
    RejectionReason.INVALID_OR_INACTIVE_CODE: 404,
    RejectionReason.ALREADY_MARKED: 409,
    RejectionReason.COOLDOWN_ACTIVE: 429,
    RejectionReason.LOCATION_DENIED: 403,
    RejectionReason.LOCATION_UNAVAILABLE: 422,
    RejectionReason.TOO_FAR: 403,
}

@attendance_bp.route('/checkin', methods=['POST'])
@jwt_required()
@student_required
@limiter.limit("30 per hour", key_func=rate_limit_key)
def check_in():
    """Submit a scanned or typed session code."""
    data = Validator.require_fields(request.get_json(silent=True), ['code'])

    validator = CheckInValidator.from_config()
    result = validator.attempt_check_in(
        str(data['code']),
        current_identity(),
        location_provider=ReportedLocationProvider.from_payload(data),
        device_info=data.get('device_info') or request.headers.get('User-Agent'),
        device_id=data.get('device_id')
    )

    if result.accepted:
        return success_response(data=result.to_dict(), message=result.message, status_code=201)

    return error_response(
        result.message,
        REJECTION_STATUS[result.reason],
        reason=result.reason.value,
        data=result.to_dict()
    )

@attendance_bp.route('/my-records', methods=['GET'])
@jwt_required()
@student_required
def get_my_attendance():
    """Student's attendance history, most recent first; ?course_id= filters."""
    course_id = request.args.get('course_id', type=int)
    records = LedgerService.history_for_student(current_identity().uid, course_id=course_id)

    history = []
    for record in records:
        session: ClassSession = record.session
        entry = record.to_dict(exclude=['device_id'])
        entry['session'] = {
            'class_name': session.class_name,
            'topic': session.topic,
            'course_id': session.course_id,
            'is_active': session.is_active
        }
        history.append(entry)

    return success_response(data={
        'records': history,
        'total': len(history)
    })
