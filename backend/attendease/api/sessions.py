"""Class session API endpoints (teacher side)."""
from flask import Blueprint, Response, current_app, request, stream_with_context
from flask_jwt_extended import jwt_required
from attendease import limiter
from attendease.errors import ValidationError
from attendease.services.feed_service import attendance_feed, sse_stream
from attendease.services.ledger_service import LedgerService
from attendease.services.qr_service import QRService
from attendease.services.report_service import ReportService
from attendease.services.session_service import SessionOptions, SessionService
from attendease.utils.decorators import teacher_required
from attendease.utils.helpers import success_response
from attendease.utils.identity import current_identity, rate_limit_key
from attendease.utils.validators import Validator

sessions_bp = Blueprint('sessions', __name__)

def _after_id():
    """Last record id the client already has, from ?after_id= or Last-Event-ID."""
    raw = request.args.get('after_id') or request.headers.get('Last-Event-ID')
    if raw in (None, ''):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("after_id must be an integer")

@sessions_bp.route('', methods=['POST'])
@jwt_required()
@teacher_required
@limiter.limit("30 per hour", key_func=rate_limit_key)
def create_session():
    """Start a session and hand back its check-in code."""
    data = Validator.require_fields(request.get_json(silent=True), ['course_id', 'class_name', 'topic'])

    session = SessionService.create_session(
        current_identity(),
        course_id=data['course_id'],
        class_name=data['class_name'],
        topic=data['topic'],
        options=SessionOptions.from_dict(data)
    )

    return success_response(data=session.to_dict(), message="Session started", status_code=201)

@sessions_bp.route('', methods=['GET'])
@jwt_required()
@teacher_required
def list_sessions():
    """Teacher's sessions, most recent first; ?course_id= narrows to one course."""
    course_id = request.args.get('course_id', type=int)
    sessions = SessionService.list_sessions(current_identity(), course_id=course_id)
    return success_response(data=[s.to_dict(include_counts=True) for s in sessions])

@sessions_bp.route('/active', methods=['GET'])
@jwt_required()
@teacher_required
def active_session():
    """The teacher's running session, or null."""
    session = SessionService.find_active_for_owner(current_identity())
    return success_response(data=session.to_dict(include_counts=True) if session else None)

@sessions_bp.route('/<int:session_id>/end', methods=['POST'])
@jwt_required()
@teacher_required
def end_session(session_id):
    """Close a session to further check-ins."""
    session = SessionService.end_session(current_identity(), session_id)
    return success_response(data=session.to_dict(include_counts=True), message="Session ended")

@sessions_bp.route('/<int:session_id>/qr', methods=['GET'])
@jwt_required()
@teacher_required
def session_qr(session_id):
    """QR image of the session code for projection."""
    session = SessionService.get_owned_session(current_identity(), session_id)
    return success_response(data={
        'code': session.code,
        'qr_image': QRService.session_qr_data_uri(session.code),
        'is_active': session.is_active
    })

@sessions_bp.route('/<int:session_id>/attendance', methods=['GET'])
@jwt_required()
@teacher_required
def session_attendance(session_id):
    """Ledger rows for a session in check-in order."""
    session = SessionService.get_owned_session(current_identity(), session_id)
    records = LedgerService.list_for_session(session.id, after_id=_after_id())
    return success_response(data=[r.to_dict() for r in records])

@sessions_bp.route('/<int:session_id>/scan-logs', methods=['GET'])
@jwt_required()
@teacher_required
def session_scan_logs(session_id):
    """Every check-in attempt against a session, accepted or not."""
    session = SessionService.get_owned_session(current_identity(), session_id)
    logs = LedgerService.list_scan_logs(session.id)
    return success_response(data=[log.to_dict() for log in logs])

@sessions_bp.route('/<int:session_id>/feed', methods=['GET'])
@jwt_required()
@teacher_required
def session_feed(session_id):
    """Server-Sent Events stream of new check-ins for a session."""
    session = SessionService.get_owned_session(current_identity(), session_id)
    after_id = _after_id()

    subscription = attendance_feed.subscribe(session.id)
    try:
        replay = [r.to_dict() for r in LedgerService.list_for_session(session.id, after_id=after_id)]
    except Exception:
        subscription.close()
        raise
    heartbeat = current_app.config['FEED_HEARTBEAT_SECONDS']

    return Response(
        stream_with_context(sse_stream(subscription, replay, heartbeat, after_id=after_id or 0)),
        mimetype='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'}
    )

@sessions_bp.route('/<int:session_id>/report', methods=['POST'])
@jwt_required()
@teacher_required
@limiter.limit("10 per hour", key_func=rate_limit_key)
def session_report(session_id):
    """AI summary of a session's turnout."""
    session = SessionService.get_owned_session(current_identity(), session_id)
    records = LedgerService.list_for_session(session.id)
    report = ReportService.generate_attendance_report(
        session, records, total_students=session.course.student_count()
    )
    report['attendance_count'] = len(records)
    return success_response(data=report)
