"""Swagger/OpenAPI configuration for the application."""

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'

def _secured(summary: str, tag: str, body: str = None, responses: dict = None) -> dict:
    operation = {
        'tags': [tag],
        'summary': summary,
        'security': [{'bearerAuth': []}],
        'responses': responses or {'200': {'description': 'Success'}}
    }
    if body:
        operation['requestBody'] = {
            'required': True,
            'content': {'application/json': {'schema': {'$ref': f'#/components/schemas/{body}'}}}
        }
    return operation

def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    return {
        "openapi": "3.0.0",
        "info": {
            "title": "AttendEase API",
            "description": "Classroom attendance with session codes, QR, cooldown and geofencing",
            "version": "1.0.0"
        },
        "servers": [
            {
                "url": "http://127.0.0.1:5000",
                "description": "Development server"
            }
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT"
                }
            },
            "schemas": {
                "CourseCreate": {
                    "type": "object",
                    "required": ["name", "code"],
                    "properties": {
                        "name": {"type": "string"},
                        "code": {"type": "string"},
                        "description": {"type": "string"},
                        "schedule": {"type": "string"}
                    }
                },
                "Enroll": {
                    "type": "object",
                    "required": ["enrollment_code"],
                    "properties": {"enrollment_code": {"type": "string"}}
                },
                "SessionCreate": {
                    "type": "object",
                    "required": ["course_id", "class_name", "topic"],
                    "properties": {
                        "course_id": {"type": "integer"},
                        "class_name": {"type": "string"},
                        "topic": {"type": "string"},
                        "latitude": {"type": "number"},
                        "longitude": {"type": "number"},
                        "max_distance_meters": {"type": "number"},
                        "use_dynamic_qr": {"type": "boolean"}
                    }
                },
                "CheckIn": {
                    "type": "object",
                    "required": ["code"],
                    "properties": {
                        "code": {"type": "string"},
                        "location": {
                            "type": "object",
                            "properties": {
                                "latitude": {"type": "number"},
                                "longitude": {"type": "number"},
                                "accuracy": {"type": "number"}
                            }
                        },
                        "location_error": {"type": "string", "enum": ["denied", "timeout", "unavailable"]},
                        "device_info": {"type": "string"},
                        "device_id": {"type": "string"}
                    }
                },
                "Error": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean"},
                        "message": {"type": "string"},
                        "reason": {"type": "string"},
                        "status_code": {"type": "integer"}
                    }
                }
            }
        },
        "paths": {
            "/api/courses": {
                "post": _secured("Create course", "Courses", body="CourseCreate"),
                "get": _secured("List own courses", "Courses")
            },
            "/api/courses/{course_id}": {
                "patch": _secured("Edit course", "Courses")
            },
            "/api/courses/{course_id}/students": {
                "get": _secured("Enrolled students", "Courses")
            },
            "/api/courses/enroll": {
                "post": _secured("Join course by enrollment code", "Enrollment", body="Enroll", responses={
                    '201': {'description': 'Enrolled'},
                    '404': {'description': 'InvalidCode'},
                    '409': {'description': 'AlreadyEnrolled'}
                })
            },
            "/api/courses/enrolled": {
                "get": _secured("Courses the student belongs to", "Enrollment")
            },
            "/api/sessions": {
                "post": _secured("Start session", "Sessions", body="SessionCreate", responses={
                    '201': {'description': 'Session started'},
                    '400': {'description': 'ValidationError'},
                    '409': {'description': 'ActiveSessionExists'}
                }),
                "get": _secured("List own sessions", "Sessions")
            },
            "/api/sessions/active": {"get": _secured("Current active session", "Sessions")},
            "/api/sessions/{session_id}/end": {"post": _secured("End session", "Sessions")},
            "/api/sessions/{session_id}/qr": {"get": _secured("Session QR image", "Sessions")},
            "/api/sessions/{session_id}/attendance": {"get": _secured("Session attendance", "Sessions")},
            "/api/sessions/{session_id}/scan-logs": {"get": _secured("Check-in attempts", "Sessions")},
            "/api/sessions/{session_id}/feed": {"get": _secured("Live feed (text/event-stream)", "Sessions")},
            "/api/sessions/{session_id}/report": {"post": _secured("AI attendance report", "Sessions")},
            "/api/attendance/checkin": {
                "post": _secured("Check in with a session code", "Attendance", body="CheckIn", responses={
                    '201': {'description': 'Accepted'},
                    '403': {'description': 'LocationDenied or TooFar'},
                    '404': {'description': 'InvalidOrInactiveCode'},
                    '409': {'description': 'AlreadyMarked'},
                    '422': {'description': 'LocationUnavailable'},
                    '429': {'description': 'CooldownActive'},
                    '503': {'description': 'TransientFailure'}
                })
            },
            "/api/attendance/my-records": {"get": _secured("Attendance history", "Attendance")}
        }
    }
