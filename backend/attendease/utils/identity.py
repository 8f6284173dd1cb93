"""Caller identity as asserted by the identity provider's access token."""
from dataclasses import dataclass
from typing import Optional

from flask_jwt_extended import (create_access_token, get_jwt, get_jwt_identity,
                                verify_jwt_in_request)
from flask_limiter.util import get_remote_address

ROLE_TEACHER = 'teacher'
ROLE_STUDENT = 'student'

@dataclass(frozen=True)
class Identity:
    """Authenticated caller: stable id, role and profile fields."""
    uid: str
    role: str
    name: str
    student_id_number: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_teacher(self) -> bool:
        return self.role == ROLE_TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == ROLE_STUDENT

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.uid

def current_identity() -> Identity:
    """Build the Identity from the verified JWT of the current request."""
    claims = get_jwt()
    return Identity(
        uid=str(get_jwt_identity()),
        role=claims.get('role', ''),
        name=claims.get('name') or '',
        student_id_number=claims.get('student_id_number'),
        email=claims.get('email'),
    )

def rate_limit_key() -> str:
    """Rate-limit bucket per caller; a classroom shares one address behind NAT."""
    verify_jwt_in_request(optional=True)
    uid = get_jwt_identity()
    return f"user:{uid}" if uid else get_remote_address()

def issue_access_token(uid: str, role: str, name: str, student_id_number: str = None,
                       email: str = None) -> str:
    """Mint a token carrying the claims the identity provider would supply."""
    claims = {'role': role, 'name': name}
    if student_id_number:
        claims['student_id_number'] = student_id_number
    if email:
        claims['email'] = email
    return create_access_token(identity=str(uid), additional_claims=claims)
