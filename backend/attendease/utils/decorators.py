"""Role decorators; apply beneath @jwt_required()."""
from functools import wraps
from attendease.utils.identity import current_identity
from attendease.utils.helpers import error_response

def teacher_required(f):
    """Decorator to require the teacher role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_identity().is_teacher:
            return error_response("Teacher access required", 403, reason='Forbidden')

        return f(*args, **kwargs)
    return decorated_function

def student_required(f):
    """Decorator to require the student role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_identity().is_student:
            return error_response("Student access required", 403, reason='Forbidden')

        return f(*args, **kwargs)
    return decorated_function
